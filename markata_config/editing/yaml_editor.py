"""Structural get/set on YAML documents that preserves unrelated formatting.

``ruamel.yaml`` composes the document into a node tree whose marks give the
character offsets of every key and value. Lookups walk mappings by key and
sequences by index; edits replace the located value span or insert new
``key: value`` lines after the deepest existing mapping, indented to match
it. Values are decoded with the safe loader and encoded with the safe dumper,
with multi-line output re-indented to the target nesting depth.

Examples
--------
>>> from markata_config.keypath import parse_key_path
>>> source = b"markata-go:\\n  theme:\\n    palette: light\\n"
>>> set_yaml_value(source, parse_key_path("markata-go.theme.palette"), "dark")
b'markata-go:\\n  theme:\\n    palette: dark\\n'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import io
import logging
import textwrap
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from ..formats import ConfigFormat, ConfigParseError
from .edits import (
    Edit,
    InsertionPointError,
    KeyNotFoundError,
    Span,
    char_edit,
    decode_text,
)

if typ.TYPE_CHECKING:
    from ..keypath import KeyPath

logger = logging.getLogger(__name__)

_INDENT = "  "


@dc.dataclass(slots=True)
class YamlLookup:
    """Result of walking a key path through a composed document.

    ``depth`` counts the segments that resolved. When the walk is complete
    ``node`` is the target value; otherwise it is the deepest node reached.
    ``key`` is the mapping key node that led to ``node``, if any. ``aliased``
    is set once the walk follows an alias, whose marks point at the anchor.
    """

    depth: int
    node: Node | None
    key: ScalarNode | None = None
    aliased: bool = False

    def complete(self, path: KeyPath) -> bool:
        return self.depth == len(path)


def compose_yaml(text: str) -> Node | None:
    """Compose ``text`` into a node tree; ``None`` for an empty document.

    Raises
    ------
    ConfigParseError
        If ``text`` is not valid YAML.
    """
    try:
        return YAML().compose(text)
    except YAMLError as exc:
        raise ConfigParseError(ConfigFormat.YAML, exc) from exc


def _load(text: str) -> typ.Any:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    return loader.load(text)


def encode_yaml_value(value: typ.Any, *, flow: bool = False) -> str:
    """Encode ``value`` with the safe dumper, without trailing markers.

    Examples
    --------
    >>> encode_yaml_value("dark")
    'dark'
    >>> encode_yaml_value({"html": True, "rss": False})
    'html: true\\nrss: false'
    >>> encode_yaml_value(["a", "b"], flow=True)
    '[a, b]'
    """
    dumper = YAML(typ="safe", pure=True)
    dumper.default_flow_style = flow
    dumper.sort_base_mapping_type_on_output = False
    dumper.width = 4096
    stream = io.StringIO()
    dumper.dump(value, stream)
    encoded = stream.getvalue()
    if encoded.endswith("\n...\n"):
        encoded = encoded[: -len("...\n")]
    return encoded.rstrip("\n")


def _is_empty_scalar(node: Node) -> bool:
    return isinstance(node, ScalarNode) and node.value == "" and not node.style


def _is_block_collection(node: Node) -> bool:
    return isinstance(node, MappingNode | SequenceNode) and not node.flow_style


def _after_colon(text: str, key: ScalarNode) -> int:
    return text.index(":", key.end_mark.index) + 1


def _trim(text: str, start: int, end: int) -> int:
    while end > start and text[end - 1] in " \t\r\n":
        end -= 1
    return end


def _node_end(text: str, node: Node) -> int:
    """Offset just past the last character of ``node`` and its descendants."""
    if _is_block_collection(node) and node.value:
        if isinstance(node, MappingNode):
            last_key, last_value = node.value[-1]
            if _is_empty_scalar(last_value):
                return _after_colon(text, last_key)
            return _node_end(text, last_value)
        return _node_end(text, node.value[-1])
    return _trim(text, node.start_mark.index, node.end_mark.index)


def _value_span(text: str, node: Node, key: ScalarNode | None) -> Span:
    if key is not None and _is_empty_scalar(node):
        start = _after_colon(text, key)
        return Span(start, start)
    return Span(node.start_mark.index, _node_end(text, node))


def walk_yaml(root: Node | None, path: KeyPath) -> YamlLookup:
    """Follow ``path`` from ``root`` as far as the document allows."""
    node = root
    key: ScalarNode | None = None
    aliased = False
    for depth, segment in enumerate(path):
        if not isinstance(node, MappingNode):
            return YamlLookup(depth, node, key, aliased)
        pair = next(
            (
                (candidate, value)
                for candidate, value in node.value
                if isinstance(candidate, ScalarNode) and candidate.value == segment.name
            ),
            None,
        )
        if pair is None:
            return YamlLookup(depth, node, key, aliased)
        # Composed aliases share the anchored node, which precedes its key.
        aliased = aliased or pair[1].start_mark.index < pair[0].end_mark.index
        if segment.index is None:
            key, node = pair
            continue
        items = pair[1]
        if not isinstance(items, SequenceNode) or segment.index >= len(items.value):
            msg = f"No element {segment.index} under {segment.name!r}."
            raise KeyNotFoundError(msg)
        key, node = None, items.value[segment.index]
        earlier = items.value[: segment.index]
        aliased = (
            aliased
            or node.start_mark.index < items.start_mark.index
            or any(item.start_mark.index >= node.start_mark.index for item in earlier)
        )
    return YamlLookup(len(path), node, key, aliased)


def _fragment_value(text: str, node: Node, span: Span) -> typ.Any:
    fragment = " " * node.start_mark.column + text[span.start : span.end]
    return _load(textwrap.dedent(fragment))


def locate_yaml_value(text: str, path: KeyPath) -> Span | None:
    """Return the span assigning ``path``, or ``None`` when absent.

    Block collections report their key, since the value begins on a later
    line.
    """
    try:
        lookup = walk_yaml(compose_yaml(text), path)
    except KeyNotFoundError:
        return None
    if not lookup.complete(path) or lookup.node is None:
        return None
    if lookup.key is not None and _is_block_collection(lookup.node):
        return Span(lookup.key.start_mark.index, lookup.key.end_mark.index)
    return _value_span(text, lookup.node, lookup.key)


def get_yaml_value(data: bytes, path: KeyPath) -> typ.Any:
    """Return the native value stored at ``path``.

    Raises
    ------
    KeyNotFoundError
        If no value exists at ``path``.
    ConfigParseError
        If ``data`` is not valid YAML.
    """
    text = decode_text(data, ConfigFormat.YAML)
    lookup = walk_yaml(compose_yaml(text), path)
    if not lookup.complete(path) or lookup.node is None:
        msg = f"Key {str(path)!r} not found."
        raise KeyNotFoundError(msg)
    if lookup.key is not None and _is_empty_scalar(lookup.node):
        return None
    span = _value_span(text, lookup.node, lookup.key)
    return _fragment_value(text, lookup.node, span)


def _is_nested(value: typ.Any) -> bool:
    """Non-empty mappings and sequences must start on their own line."""
    return isinstance(value, cabc.Mapping | list | tuple) and bool(value)


def _indent_block(encoded: str, column: int) -> str:
    prefix = " " * column
    return "\n".join(prefix + line if line else line for line in encoded.split("\n"))


def _replace_mapping_value(
    text: str, key: ScalarNode, node: Node, value: typ.Any
) -> Edit:
    encoded = encode_yaml_value(value)
    span = _value_span(text, node, key)
    single_line = "\n" not in encoded and not _is_nested(value)
    if single_line and not _is_block_collection(node):
        if span.start == span.end:
            return char_edit(text, span.start, span.end, " " + encoded)
        return char_edit(text, span.start, span.end, encoded)
    start = _after_colon(text, key)
    if single_line:
        return char_edit(text, start, span.end, " " + encoded)
    block = _indent_block(encoded, key.start_mark.column + len(_INDENT))
    return char_edit(text, start, span.end, "\n" + block)


def _replace_item(text: str, node: Node, value: typ.Any) -> Edit:
    encoded = encode_yaml_value(value)
    span = _value_span(text, node, None)
    first, *rest = encoded.split("\n")
    column = node.start_mark.column
    replacement = "\n".join([first, *(" " * column + line for line in rest)])
    return char_edit(text, span.start, span.end, replacement)


def _nest(keys: list[str], value: typ.Any) -> typ.Any:
    for name in reversed(keys):
        value = {name: value}
    return value


def _key_lines(keys: list[str], value: typ.Any, column: int) -> str:
    """Render a chain of nested keys ending in ``value`` at ``column``."""
    lines = []
    for depth, name in enumerate(keys[:-1]):
        indent = " " * (column + depth * len(_INDENT))
        lines.append(f"{indent}{encode_yaml_value(name)}:")
    leaf_column = column + (len(keys) - 1) * len(_INDENT)
    leaf = " " * leaf_column + f"{encode_yaml_value(keys[-1])}:"
    encoded = encode_yaml_value(value)
    if "\n" in encoded or _is_nested(value):
        lines.append(leaf + "\n" + _indent_block(encoded, leaf_column + len(_INDENT)))
    else:
        lines.append(f"{leaf} {encoded}")
    return "\n".join(lines)


def _line_end(text: str, offset: int) -> int:
    end = text.find("\n", offset)
    if end == -1:
        return len(text)
    if end > 0 and text[end - 1] == "\r":
        return end - 1
    return end


def plan_yaml_edit(data: bytes, path: KeyPath, value: typ.Any) -> Edit:
    """Compute the minimal edit that stores ``value`` at ``path``.

    Parameters
    ----------
    data : bytes
        Source YAML document.
    path : KeyPath
        Fully-qualified key path, including the namespace segment.
    value : Any
        New value; anything the safe dumper can represent.

    Returns
    -------
    Edit
        Replacement of the existing value span, or an insertion of the
        missing keys after the deepest existing mapping.

    Raises
    ------
    InsertionPointError
        If ``path`` is empty, runs through a scalar, sequence or alias, or names a
        missing array element.
    ConfigParseError
        If ``data`` is not valid YAML.
    """
    if not path:
        msg = "Cannot set a value at an empty key path."
        raise InsertionPointError(msg)
    text = decode_text(data, ConfigFormat.YAML)
    root = compose_yaml(text)
    try:
        lookup = walk_yaml(root, path)
    except KeyNotFoundError as exc:
        raise InsertionPointError(str(exc)) from exc
    if lookup.aliased:
        msg = f"Cannot edit {str(path)!r} through a YAML alias."
        raise InsertionPointError(msg)

    if lookup.complete(path) and lookup.node is not None:
        if lookup.key is not None:
            return _replace_mapping_value(text, lookup.key, lookup.node, value)
        return _replace_item(text, lookup.node, value)

    missing = path[lookup.depth :]
    if any(segment.index is not None for segment in missing):
        msg = f"Cannot create array element for {str(path)!r}."
        raise InsertionPointError(msg)
    keys = [segment.name for segment in missing]
    container = lookup.node

    if container is None:
        logger.debug("Inserting %s into an empty YAML document", path)
        return Edit(0, 0, _key_lines(keys, value, 0) + "\n")

    if lookup.key is not None and _is_empty_scalar(container):
        return _replace_mapping_value(text, lookup.key, container, _nest(keys, value))

    if not isinstance(container, MappingNode):
        msg = f"Cannot insert {str(path)!r}: parent is not a mapping."
        raise InsertionPointError(msg)

    if container.flow_style:
        span = _value_span(text, container, None)
        current = _fragment_value(text, container, span) or {}
        current.update(_nest(keys, value))
        return char_edit(
            text, span.start, span.end, encode_yaml_value(current, flow=True)
        )

    anchor = _line_end(text, _node_end(text, container))
    lines = _key_lines(keys, value, container.start_mark.column)
    return char_edit(text, anchor, anchor, "\n" + lines)


def set_yaml_value(data: bytes, path: KeyPath, value: typ.Any) -> bytes:
    """Return ``data`` with ``value`` stored at ``path``."""
    return plan_yaml_edit(data, path, value).apply(data)


__all__ = [
    "YamlLookup",
    "compose_yaml",
    "encode_yaml_value",
    "get_yaml_value",
    "locate_yaml_value",
    "plan_yaml_edit",
    "set_yaml_value",
    "walk_yaml",
]
