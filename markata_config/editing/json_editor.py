"""Get/set on JSON documents.

JSON has no comments to preserve, so a ``set`` decodes the whole document,
assigns the value, and re-serialises it with two-space indentation as a single
whole-buffer :class:`~markata_config.editing.edits.Edit`.
"""

from __future__ import annotations

import typing as typ

import msgspec

from ..formats import ConfigFormat, ConfigParseError
from .edits import Edit, InsertionPointError, KeyNotFoundError

if typ.TYPE_CHECKING:
    from ..keypath import KeyPath


def _decode(data: bytes) -> typ.Any:
    if not data.strip():
        return {}
    try:
        return msgspec.json.decode(data)
    except (msgspec.DecodeError, UnicodeDecodeError) as exc:
        raise ConfigParseError(ConfigFormat.JSON, exc) from exc


def get_json_value(data: bytes, path: KeyPath) -> typ.Any:
    """Return the value stored at ``path``.

    Raises
    ------
    KeyNotFoundError
        If any segment of ``path`` is missing.
    """
    current = _decode(data)
    for segment in path:
        if not isinstance(current, dict) or segment.name not in current:
            msg = f"Key {str(path)!r} not found."
            raise KeyNotFoundError(msg)
        current = current[segment.name]
        if segment.index is None:
            continue
        if not isinstance(current, list) or segment.index >= len(current):
            msg = f"Key {str(path)!r} not found."
            raise KeyNotFoundError(msg)
        current = current[segment.index]
    return current


def plan_json_edit(data: bytes, path: KeyPath, value: typ.Any) -> Edit:
    """Return a whole-buffer edit storing ``value`` at ``path``.

    Missing mappings along the path are created; array elements must exist.
    """
    if not path:
        msg = "Cannot set a value at an empty key path."
        raise InsertionPointError(msg)
    document = _decode(data)
    if not isinstance(document, dict):
        msg = "JSON document root is not an object."
        raise InsertionPointError(msg)
    current = document
    for position, segment in enumerate(path):
        last = position == len(path) - 1
        if segment.index is None:
            if last:
                current[segment.name] = value
                break
            current = current.setdefault(segment.name, {})
        else:
            items = current.get(segment.name)
            if not isinstance(items, list) or segment.index >= len(items):
                msg = f"Cannot create array element for {str(path)!r}."
                raise InsertionPointError(msg)
            if last:
                items[segment.index] = value
                break
            current = items[segment.index]
        if not isinstance(current, dict):
            msg = f"Cannot insert {str(path)!r}: parent is not an object."
            raise InsertionPointError(msg)
    encoded = msgspec.json.format(msgspec.json.encode(document), indent=2)
    return Edit(0, len(data), encoded.decode("utf-8") + "\n")


def set_json_value(data: bytes, path: KeyPath, value: typ.Any) -> bytes:
    """Return ``data`` with ``value`` stored at ``path``."""
    return plan_json_edit(data, path, value).apply(data)


__all__ = ["get_json_value", "plan_json_edit", "set_json_value"]
