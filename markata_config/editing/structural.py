"""Format dispatch and file helpers for the structural editors.

Keys given to these helpers are relative to the ``markata-go`` namespace
unless they already start with it, so ``theme.palette`` and
``markata-go.theme.palette`` address the same value.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import stat
import typing as typ
from pathlib import Path

from ..formats import ConfigFormat
from ..keypath import KeyPath, normalize_config_path
from .json_editor import get_json_value, plan_json_edit
from .toml_editor import get_toml_value, plan_toml_edit
from .yaml_editor import get_yaml_value, plan_yaml_edit

if typ.TYPE_CHECKING:
    from .edits import Edit

logger = logging.getLogger(__name__)

Getter = cabc.Callable[[bytes, KeyPath], typ.Any]
Planner = cabc.Callable[[bytes, KeyPath, typ.Any], "Edit"]

_GETTERS: dict[ConfigFormat, Getter] = {
    ConfigFormat.TOML: get_toml_value,
    ConfigFormat.YAML: get_yaml_value,
    ConfigFormat.JSON: get_json_value,
}

_PLANNERS: dict[ConfigFormat, Planner] = {
    ConfigFormat.TOML: plan_toml_edit,
    ConfigFormat.YAML: plan_yaml_edit,
    ConfigFormat.JSON: plan_json_edit,
}


def get_value(
    data: bytes, key: str | KeyPath, fmt: ConfigFormat = ConfigFormat.TOML
) -> typ.Any:
    """Return the value stored under ``key`` in a configuration document.

    Parameters
    ----------
    data : bytes
        Raw configuration file contents.
    key : str or KeyPath
        Dotted key, with or without the leading ``markata-go`` segment.
    fmt : ConfigFormat
        Format of ``data``.

    Raises
    ------
    KeyNotFoundError
        If the key is not present.
    ConfigParseError
        If ``data`` is not valid for ``fmt``.

    Examples
    --------
    >>> get_value(b'[markata-go]\\nconcurrency = 4\\n', "concurrency")
    4
    """
    return _GETTERS[fmt](data, normalize_config_path(key))


def plan_edit(
    data: bytes,
    key: str | KeyPath,
    value: typ.Any,
    fmt: ConfigFormat = ConfigFormat.TOML,
) -> Edit:
    """Return the byte-range edit that stores ``value`` under ``key``."""
    return _PLANNERS[fmt](data, normalize_config_path(key), value)


def set_value(
    data: bytes,
    key: str | KeyPath,
    value: typ.Any,
    fmt: ConfigFormat = ConfigFormat.TOML,
) -> bytes:
    """Return ``data`` with ``value`` stored under ``key``.

    Only the value's own byte range changes; new keys add a line after their
    container, and new containers add a section or key chain.

    Raises
    ------
    InsertionPointError
        If no container can receive the key.
    ConfigParseError
        If ``data`` is not valid for ``fmt``.
    """
    return plan_edit(data, key, value, fmt).apply(data)


def get_value_from_file(path: Path | str, key: str | KeyPath) -> typ.Any:
    """Read ``path`` and return the value under ``key``.

    The format is detected from the extension, defaulting to TOML.
    """
    file_path = Path(path)
    return get_value(file_path.read_bytes(), key, ConfigFormat.from_path(file_path))


def set_value_from_file(path: Path | str, key: str | KeyPath, value: typ.Any) -> None:
    """Rewrite ``path`` in place with ``value`` stored under ``key``.

    The file keeps its permission bits.
    """
    file_path = Path(path)
    mode = stat.S_IMODE(file_path.stat().st_mode)
    updated = set_value(
        file_path.read_bytes(), key, value, ConfigFormat.from_path(file_path)
    )
    file_path.write_bytes(updated)
    file_path.chmod(mode)
    logger.debug("Updated %s in %s", key, file_path)


__all__ = [
    "get_value",
    "get_value_from_file",
    "plan_edit",
    "set_value",
    "set_value_from_file",
]
