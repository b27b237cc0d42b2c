"""Structural editors for TOML, YAML, and JSON configuration files.

Editors read and update individual values in raw configuration bytes and
return byte-range :class:`Edit` patches against the original buffer, leaving
comments, ordering, and formatting elsewhere in the file untouched.

Examples
--------
>>> from markata_config.editing import set_value
>>> from markata_config.formats import ConfigFormat
>>> source = b"markata-go:\\n  theme:\\n    palette: light\\n"
>>> set_value(source, "theme.palette", "dark", ConfigFormat.YAML)
b'markata-go:\\n  theme:\\n    palette: dark\\n'
"""

from .edits import Edit, EditError, InsertionPointError, KeyNotFoundError
from .json_editor import get_json_value, set_json_value
from .structural import (
    get_value,
    get_value_from_file,
    plan_edit,
    set_value,
    set_value_from_file,
)
from .toml_editor import get_toml_value, locate_toml_value, set_toml_value
from .yaml_editor import get_yaml_value, locate_yaml_value, set_yaml_value

__all__ = [
    "Edit",
    "EditError",
    "InsertionPointError",
    "KeyNotFoundError",
    "get_json_value",
    "get_toml_value",
    "get_value",
    "get_value_from_file",
    "get_yaml_value",
    "locate_toml_value",
    "locate_yaml_value",
    "plan_edit",
    "set_json_value",
    "set_toml_value",
    "set_value",
    "set_value_from_file",
    "set_yaml_value",
]
