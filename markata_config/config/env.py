"""Apply ``MARKATA_GO_*`` environment variable overrides to a configuration.

Variable names drop the prefix, are lowercased, and flatten nested fields
with underscores, so ``MARKATA_GO_FEED_DEFAULTS_ITEMS_PER_PAGE`` sets
``feed_defaults.items_per_page``. Coercion is best-effort: booleans accept
``true``/``1``/``yes`` (anything else is false), lists are comma separated,
and an integer that fails to parse leaves the field untouched.

The override logic works on an explicit mapping. Only :func:`apply_env_overrides`
falls back to :data:`os.environ`, and only when no mapping is supplied.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import os
import re
import typing as typ

from .._constants import ENV_PREFIX
from .models import FEED_FORMAT_NAMES, SiteConfig

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")


def parse_bool(value: str) -> bool:
    """Interpret an environment value as a boolean.

    Examples
    --------
    >>> parse_bool(" Yes "), parse_bool("0"), parse_bool("maybe")
    (True, False, False)
    """
    return value.strip().lower() in {"true", "1", "yes"}


def parse_string_list(value: str) -> list[str]:
    """Split a comma-separated value into trimmed, non-empty items.

    Examples
    --------
    >>> parse_string_list("a, b,,c ")
    ['a', 'b', 'c']
    >>> parse_string_list("")
    []
    """
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_int(value: str) -> int | None:
    """Parse a base-10 integer, returning ``None`` when it is malformed."""
    if not _INT_RE.fullmatch(value):
        return None
    return int(value)


Coercer = cabc.Callable[[str], typ.Any]

_SCALAR_FIELDS: dict[str, tuple[tuple[str, ...], Coercer]] = {
    "output_dir": (("output_dir",), str),
    "url": (("url",), str),
    "title": (("title",), str),
    "description": (("description",), str),
    "author": (("author",), str),
    "assets_dir": (("assets_dir",), str),
    "templates_dir": (("templates_dir",), str),
    "concurrency": (("concurrency",), parse_int),
    "hooks": (("hooks",), parse_string_list),
    "disabled_hooks": (("disabled_hooks",), parse_string_list),
    "glob_patterns": (("glob", "patterns"), parse_string_list),
    "glob_use_gitignore": (("glob", "use_gitignore"), parse_bool),
    "markdown_extensions": (("markdown", "extensions"), parse_string_list),
    "theme_name": (("theme", "name"), str),
    "theme_palette": (("theme", "palette"), str),
    "search_pagefind_auto_install": (("search", "pagefind", "auto_install"), parse_bool),
    "search_pagefind_cache_dir": (("search", "pagefind", "cache_dir"), str),
    "search_pagefind_version": (("search", "pagefind", "version"), str),
    "search_pagefind_bundle_dir": (("search", "pagefind", "bundle_dir"), str),
    "search_pagefind_verbose": (("search", "pagefind", "verbose"), parse_bool),
}


def _feed_default_fields() -> dict[str, tuple[tuple[str, ...], Coercer]]:
    fields: dict[str, tuple[tuple[str, ...], Coercer]] = {
        "items_per_page": (("feed_defaults", "items_per_page"), parse_int),
        "orphan_threshold": (("feed_defaults", "orphan_threshold"), parse_int),
        "syndication_max_items": (
            ("feed_defaults", "syndication", "max_items"),
            parse_int,
        ),
        "syndication_include_content": (
            ("feed_defaults", "syndication", "include_content"),
            parse_bool,
        ),
    }
    for name in FEED_FORMAT_NAMES:
        fields[f"formats_{name}"] = (("feed_defaults", "formats", name), parse_bool)
    # Both spellings are accepted.
    return {
        f"{prefix}_{suffix}": target
        for prefix in ("feed_defaults", "feeds_defaults")
        for suffix, target in fields.items()
    }


ENV_FIELDS: cabc.Mapping[str, tuple[tuple[str, ...], Coercer]] = {
    **_SCALAR_FIELDS,
    **_feed_default_fields(),
}


def env_overrides(environ: cabc.Mapping[str, str]) -> dict[str, str]:
    """Return prefixed variables keyed by their lowercased, unprefixed name.

    Examples
    --------
    >>> env_overrides({"MARKATA_GO_URL": "https://x.dev", "HOME": "/root"})
    {'url': 'https://x.dev'}
    """
    return {
        key.removeprefix(ENV_PREFIX).lower(): value
        for key, value in environ.items()
        if key.startswith(ENV_PREFIX)
    }


def _assign(config: SiteConfig, path: tuple[str, ...], value: typ.Any) -> None:
    target: typ.Any = config
    for attribute in path[:-1]:
        target = getattr(target, attribute)
    setattr(target, path[-1], value)


def apply_env_override(config: SiteConfig, name: str, value: str) -> bool:
    """Apply a single unprefixed override; return ``True`` when it was used."""
    entry = ENV_FIELDS.get(name.lower())
    if entry is None:
        logger.debug("Ignoring unrecognised environment override %r", name)
        return False
    path, coerce = entry
    coerced = coerce(value)
    if coerced is None:
        logger.debug("Ignoring non-numeric value %r for %s", value, name)
        return False
    _assign(config, path, coerced)
    return True


def apply_env_overrides(
    config: SiteConfig, environ: cabc.Mapping[str, str] | None = None
) -> SiteConfig:
    """Apply every recognised ``MARKATA_GO_*`` override to ``config`` in place.

    Parameters
    ----------
    config : SiteConfig
        Configuration to mutate, normally the merged defaults and file.
    environ : Mapping[str, str] or None, optional
        Variables to read. ``None`` reads the process environment once.

    Returns
    -------
    SiteConfig
        The same ``config`` object, for chaining.

    Examples
    --------
    >>> config = SiteConfig(concurrency=4)
    >>> apply_env_overrides(config, {"MARKATA_GO_CONCURRENCY": "8"}).concurrency
    8
    >>> apply_env_overrides(config, {"MARKATA_GO_CONCURRENCY": "lots"}).concurrency
    8
    """
    source = os.environ if environ is None else environ
    for name, value in sorted(env_overrides(source).items()):
        apply_env_override(config, name, value)
    return config


__all__ = [
    "ENV_FIELDS",
    "apply_env_override",
    "apply_env_overrides",
    "env_overrides",
    "parse_bool",
    "parse_int",
    "parse_string_list",
]
