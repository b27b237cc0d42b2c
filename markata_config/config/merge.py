"""Deep-merge canonical configurations under an "override when set" policy.

Fields are merged one by one:

* strings and integers take the override value only when it is non-empty or
  non-zero, so an override can never reset a value back to empty or zero;
* optional booleans take the override unless it is ``None``; a bare boolean
  always has a value, so the override always wins;
* lists are replaced wholesale by a non-empty override;
* mappings are merged key by key;
* nested records recurse, except :class:`FeedFormats`, which is replaced as a
  group whenever the override requests at least one format.

The inputs are never mutated and the result shares no mutable state with
either of them, so a single defaults value can seed any number of merges.
"""

from __future__ import annotations

import copy
import dataclasses as dc
import typing as typ

from .models import FeedConfig, FeedFormats, SiteConfig

T = typ.TypeVar("T")


def _merge_feed_formats(base: FeedFormats, override: FeedFormats) -> FeedFormats:
    """Replace the whole group when the override requests any format."""
    if override.has_any_enabled():
        return copy.deepcopy(override)
    return copy.deepcopy(base)


_GROUP_MERGES: dict[type, typ.Callable[[typ.Any, typ.Any], typ.Any]] = {
    FeedFormats: _merge_feed_formats,
}


def _merge_value(base: typ.Any, override: typ.Any) -> typ.Any:
    match base, override:
        case _, None:
            return copy.deepcopy(base)
        case bool(), bool():
            return override
        case str(), str():
            return override or base
        case int(), int():
            return override if override != 0 else base
        case list(), list():
            return copy.deepcopy(override if override else base)
        case dict(), dict():
            merged = copy.deepcopy(base)
            merged.update(copy.deepcopy(override))
            return merged
        case _ if dc.is_dataclass(base) and type(base) is type(override):
            return _merge_record(base, override)
        case _:
            return copy.deepcopy(override)


def _merge_record(base: T, override: T) -> T:
    group_merge = _GROUP_MERGES.get(type(base))
    if group_merge is not None:
        return group_merge(base, override)
    return type(base)(
        **{
            field.name: _merge_value(
                getattr(base, field.name), getattr(override, field.name)
            )
            for field in dc.fields(base)
        }
    )


def merge(base: SiteConfig | None, override: SiteConfig | None) -> SiteConfig | None:
    """Merge ``override`` on top of ``base`` and return a new configuration.

    Parameters
    ----------
    base : SiteConfig or None
        The lower-precedence configuration, typically the defaults.
    override : SiteConfig or None
        The higher-precedence configuration, typically a parsed file.

    Returns
    -------
    SiteConfig or None
        A new configuration. When either side is ``None`` a copy of the other
        is returned.

    Examples
    --------
    >>> from markata_config.config.models import default_config
    >>> merged = merge(default_config(), SiteConfig(title="Notes"))
    >>> merged.title, merged.output_dir
    ('Notes', 'output')
    """
    if base is None:
        return copy.deepcopy(override)
    if override is None:
        return copy.deepcopy(base)
    return _merge_record(base, override)


def merge_list(base: list[T], override: list[T], *, append: bool = False) -> list[T]:
    """Combine two lists by replacement or, with ``append``, concatenation.

    Examples
    --------
    >>> merge_list(["a"], ["b"])
    ['b']
    >>> merge_list(["a"], ["b"], append=True)
    ['a', 'b']
    >>> merge_list(["a"], [])
    ['a']
    """
    if append:
        return [*copy.deepcopy(base), *copy.deepcopy(override)]
    return copy.deepcopy(override if override else base)


def append_hooks(config: SiteConfig, *hooks: str) -> None:
    """Append hooks to ``config`` in place."""
    config.hooks = merge_list(config.hooks, list(hooks), append=True)


def append_disabled_hooks(config: SiteConfig, *hooks: str) -> None:
    """Append disabled hooks to ``config`` in place."""
    config.disabled_hooks = merge_list(config.disabled_hooks, list(hooks), append=True)


def append_glob_patterns(config: SiteConfig, *patterns: str) -> None:
    """Append glob patterns to ``config`` in place."""
    config.glob.patterns = merge_list(config.glob.patterns, list(patterns), append=True)


def append_feeds(config: SiteConfig, *feeds: FeedConfig) -> None:
    """Append feed definitions to ``config`` in place."""
    config.feeds = merge_list(config.feeds, list(feeds), append=True)


__all__ = [
    "append_disabled_hooks",
    "append_feeds",
    "append_glob_patterns",
    "append_hooks",
    "merge",
    "merge_list",
]
