"""Configuration core for the markata-go site generator.

The package resolves site configuration authored in TOML, YAML, or JSON into a
single canonical model, validates it with source positions for diagnostics,
and applies minimal structural edits to configuration files without
disturbing unrelated formatting.
"""

from .config import (
    ConfigFormat,
    ConfigParseError,
    SiteConfig,
    apply_env_overrides,
    default_config,
    load,
    merge,
)
from .editing import EditError, get_value, set_value
from .keypath import KeyPath, KeyPathError, KeySegment, parse_key_path
from .validation import (
    ConfigValidationError,
    PositionTracker,
    Severity,
    ValidationIssue,
    validate,
    validate_with_positions,
)

__all__ = [
    "ConfigFormat",
    "ConfigParseError",
    "ConfigValidationError",
    "EditError",
    "KeyPath",
    "KeyPathError",
    "KeySegment",
    "PositionTracker",
    "Severity",
    "SiteConfig",
    "ValidationIssue",
    "apply_env_overrides",
    "default_config",
    "get_value",
    "load",
    "merge",
    "parse_key_path",
    "set_value",
    "validate",
    "validate_with_positions",
]
