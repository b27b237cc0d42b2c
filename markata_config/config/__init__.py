"""Resolve markata-go site configuration into a canonical model.

This subpackage decodes TOML, YAML, and JSON configuration into one
format-independent :class:`SiteConfig`, merges it over the documented
defaults, and applies ``MARKATA_GO_*`` environment overrides last. The
primary entry point is :func:`load`, which discovers the configuration file
when no path is given.

Examples
--------
>>> from markata_config.config import load_from_string
>>> config = load_from_string('[markata-go]\\nconcurrency = 4\\n')
>>> config.concurrency, config.output_dir
(4, 'output')
"""

from ..formats import ConfigFormat, ConfigParseError
from .env import apply_env_override, apply_env_overrides, env_overrides
from .loader import (
    ConfigPath,
    discover,
    discover_all,
    load,
    load_and_validate,
    load_and_validate_with_positions,
    load_from_string,
    load_single_config,
    load_with_defaults,
    load_with_merge,
)
from .merge import (
    append_disabled_hooks,
    append_feeds,
    append_glob_patterns,
    append_hooks,
    merge,
    merge_list,
)
from .models import (
    FeedConfig,
    FeedDefaults,
    FeedFormats,
    FeedTemplates,
    GlobConfig,
    SiteConfig,
    SyndicationConfig,
    ThemeConfig,
    default_config,
)
from .parsers import parse_config, parse_json, parse_toml, parse_yaml
from .serialize import config_to_builtins, dump_config, dump_site_config

__all__ = [
    "ConfigFormat",
    "ConfigParseError",
    "ConfigPath",
    "FeedConfig",
    "FeedDefaults",
    "FeedFormats",
    "FeedTemplates",
    "GlobConfig",
    "SiteConfig",
    "SyndicationConfig",
    "ThemeConfig",
    "append_disabled_hooks",
    "append_feeds",
    "append_glob_patterns",
    "append_hooks",
    "apply_env_override",
    "apply_env_overrides",
    "config_to_builtins",
    "default_config",
    "discover",
    "discover_all",
    "dump_config",
    "dump_site_config",
    "env_overrides",
    "load",
    "load_and_validate",
    "load_and_validate_with_positions",
    "load_from_string",
    "load_single_config",
    "load_with_defaults",
    "load_with_merge",
    "merge",
    "merge_list",
    "parse_config",
    "parse_json",
    "parse_toml",
    "parse_yaml",
]
