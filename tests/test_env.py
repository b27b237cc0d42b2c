"""Unit tests for environment variable overrides."""

from __future__ import annotations

import pytest

from markata_config.config.env import (
    apply_env_override,
    apply_env_overrides,
    env_overrides,
)
from markata_config.config.models import SiteConfig, default_config


def test_environment_wins_over_file_values() -> None:
    """A prefixed variable replaces the value read from the file."""
    config = SiteConfig(concurrency=4)

    apply_env_overrides(config, {"MARKATA_GO_CONCURRENCY": "8"})

    assert config.concurrency == 8, "environment should override the file"


def test_nested_fields_flatten_with_underscores() -> None:
    """Nested settings are addressed by joining their path with underscores."""
    config = default_config()

    apply_env_overrides(
        config,
        {
            "MARKATA_GO_FEED_DEFAULTS_ITEMS_PER_PAGE": "25",
            "MARKATA_GO_FEED_DEFAULTS_FORMATS_ATOM": "yes",
            "MARKATA_GO_GLOB_USE_GITIGNORE": "false",
            "MARKATA_GO_THEME_PALETTE": "dark",
        },
    )

    assert config.feed_defaults.items_per_page == 25
    assert config.feed_defaults.formats.atom is True
    assert config.glob.use_gitignore is False
    assert config.theme.palette == "dark"


def test_feeds_defaults_alias_is_accepted() -> None:
    """The plural spelling reaches the same feed default fields."""
    config = default_config()

    apply_env_overrides(config, {"MARKATA_GO_FEEDS_DEFAULTS_ORPHAN_THRESHOLD": "7"})

    assert config.feed_defaults.orphan_threshold == 7


def test_lists_are_comma_separated() -> None:
    """List values split on commas with whitespace and empties dropped."""
    config = default_config()

    apply_env_overrides(
        config, {"MARKATA_GO_GLOB_PATTERNS": "posts/*.md, pages/*.md,,"}
    )

    assert config.glob.patterns == ["posts/*.md", "pages/*.md"]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("1", True), ("YES", True), ("no", False), ("on", False)],
)
def test_boolean_coercion(raw: str, expected: bool) -> None:
    """Only true, 1, and yes count as true."""
    config = default_config()

    apply_env_overrides(config, {"MARKATA_GO_SEARCH_PAGEFIND_VERBOSE": raw})

    assert config.search.pagefind.verbose is expected


def test_malformed_integer_leaves_field_untouched() -> None:
    """An integer that fails to parse is ignored."""
    config = SiteConfig(concurrency=4)

    used = apply_env_override(config, "concurrency", "four")

    assert used is False, "malformed value should be reported as unused"
    assert config.concurrency == 4


def test_unknown_and_unprefixed_variables_are_ignored() -> None:
    """Only recognised, prefixed names change the configuration."""
    config = default_config()

    apply_env_overrides(
        config, {"MARKATA_GO_NOT_A_FIELD": "x", "OUTPUT_DIR": "elsewhere"}
    )

    assert config == default_config(), "nothing should have changed"


def test_env_overrides_strips_prefix_and_lowercases() -> None:
    """Variable names are reduced to their lowercase unprefixed form."""
    assert env_overrides({"MARKATA_GO_OUTPUT_DIR": "dist", "PATH": "/bin"}) == {
        "output_dir": "dist"
    }


def test_process_environment_is_read_when_no_mapping_given(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Without an explicit mapping the process environment is consulted."""
    monkeypatch.setenv("MARKATA_GO_TITLE", "From env")
    config = default_config()

    apply_env_overrides(config)

    assert config.title == "From env"
