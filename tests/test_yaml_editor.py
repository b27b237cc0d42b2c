"""Unit tests for structural YAML get/set."""

from __future__ import annotations

from textwrap import dedent

import pytest

from markata_config.editing import (
    InsertionPointError,
    KeyNotFoundError,
    get_yaml_value,
    locate_yaml_value,
    set_yaml_value,
)
from markata_config.formats import ConfigParseError
from markata_config.keypath import parse_key_path

SOURCE = dedent(
    """\
    # site settings
    markata-go:
      title: Notes   # keep me
      theme:
        palette: light
      feeds:
        - slug: blog
        - slug: notes
          items_per_page: 5
    """
).encode()


def _set(data: bytes, key: str, value: object) -> bytes:
    return set_yaml_value(data, parse_key_path(key), value)


def _changed_lines(before: bytes, after: bytes) -> list[tuple[str, str]]:
    return [
        (old, new)
        for old, new in zip(
            before.decode().splitlines(), after.decode().splitlines(), strict=True
        )
        if old != new
    ]


def test_replacing_a_scalar_changes_one_line() -> None:
    """Setting an existing key only rewrites that key's line."""
    before = b"markata-go:\n  theme:\n    palette: light\n"

    after = _set(before, "markata-go.theme.palette", "dark")

    assert after == b"markata-go:\n  theme:\n    palette: dark\n", after.decode()
    assert _changed_lines(before, after) == [("    palette: light", "    palette: dark")]


def test_trailing_comments_survive_replacement() -> None:
    """A comment after the value is left in place."""
    after = _set(SOURCE, "markata-go.title", "Journal")

    assert b"  title: Journal   # keep me\n" in after, after.decode()
    assert after.startswith(b"# site settings\n"), "leading comment kept"


def test_sequence_items_are_addressed_by_index() -> None:
    """Indexed segments step into block sequences."""
    after = _set(SOURCE, "markata-go.feeds[1].slug", "journal")

    assert _changed_lines(SOURCE, after) == [
        ("    - slug: notes", "    - slug: journal")
    ]


def test_get_scalar_mapping_and_item() -> None:
    """Lookups decode the value found at the path."""
    assert get_yaml_value(SOURCE, parse_key_path("markata-go.title")) == "Notes"
    assert get_yaml_value(SOURCE, parse_key_path("markata-go.theme")) == {
        "palette": "light"
    }
    assert get_yaml_value(SOURCE, parse_key_path("markata-go.feeds[1]")) == {
        "slug": "notes",
        "items_per_page": 5,
    }


def test_get_missing_key_raises() -> None:
    """Absent keys and elements are KeyNotFoundError."""
    with pytest.raises(KeyNotFoundError):
        get_yaml_value(SOURCE, parse_key_path("markata-go.author"))
    with pytest.raises(KeyNotFoundError):
        get_yaml_value(SOURCE, parse_key_path("markata-go.feeds[9].slug"))


def test_insert_key_into_existing_mapping() -> None:
    """New keys are indented like their siblings."""
    after = _set(SOURCE, "markata-go.theme.name", "ocean")

    assert b"    palette: light\n    name: ocean\n  feeds:\n" in after, after.decode()


def test_insert_after_nested_block() -> None:
    """Insertion skips past the deepest last child of the mapping."""
    after = _set(SOURCE, "markata-go.author", "Me")

    assert after.endswith(b"      items_per_page: 5\n  author: Me\n"), after.decode()


def test_insert_chain_of_missing_keys() -> None:
    """Missing parents are created as nested block mappings."""
    after = _set(SOURCE, "markata-go.search.pagefind.verbose", True)

    assert after.endswith(
        b"  search:\n    pagefind:\n      verbose: true\n"
    ), after.decode()


def test_insert_into_empty_document() -> None:
    """An empty file gains the namespace mapping."""
    assert _set(b"", "markata-go.title", "Notes") == b"markata-go:\n  title: Notes\n"


def test_empty_value_becomes_a_mapping() -> None:
    """A key with no value can receive nested keys."""
    after = _set(b"markata-go:\n  theme:\n", "markata-go.theme.palette", "dark")

    assert after == b"markata-go:\n  theme:\n    palette: dark\n", after.decode()


def test_nested_values_are_written_as_blocks() -> None:
    """Mappings replacing a scalar start on their own line."""
    after = _set(SOURCE, "markata-go.theme", {"palette": "dark"})

    assert b"  theme:\n    palette: dark\n  feeds:\n" in after, after.decode()
    assert get_yaml_value(after, parse_key_path("markata-go.theme")) == {
        "palette": "dark"
    }


def test_flow_mappings_stay_flow() -> None:
    """Keys added to a flow mapping are written in flow style."""
    data = b"markata-go:\n  theme: {palette: light}\n"

    after = _set(data, "markata-go.theme.name", "ocean")

    assert after == b"markata-go:\n  theme: {palette: light, name: ocean}\n"


def test_scalar_parent_cannot_receive_keys() -> None:
    """Paths through a scalar have no insertion point."""
    with pytest.raises(InsertionPointError):
        _set(SOURCE, "markata-go.title.text", "x")


def test_missing_sequence_element_cannot_be_created() -> None:
    """Setting below a non-existent element is refused."""
    with pytest.raises(InsertionPointError):
        _set(SOURCE, "markata-go.feeds[4].slug", "ghost")


def test_invalid_yaml_raises_parse_error() -> None:
    """Malformed documents are never edited."""
    with pytest.raises(ConfigParseError):
        _set(b"markata-go: [unclosed\n", "markata-go.title", "x")


def test_locate_reports_value_or_key_span() -> None:
    """Scalars report their value span; block collections their key."""
    text = SOURCE.decode()

    scalar = locate_yaml_value(text, parse_key_path("markata-go.theme.palette"))
    block = locate_yaml_value(text, parse_key_path("markata-go.theme"))

    assert scalar is not None, "palette should be found"
    assert text[scalar.start : scalar.end] == "light"
    assert block is not None, "theme should be found"
    assert text[block.start : block.end] == "theme"


ALIASED = dedent(
    """\
    base: &look
      palette: light
    markata-go:
      theme: *look
      feeds:
        - &blog {slug: blog}
        - *blog
    """
).encode()


@pytest.mark.parametrize(
    "key",
    [
        "markata-go.theme.palette",
        "markata-go.theme.name",
        "markata-go.feeds[1].slug",
    ],
)
def test_edits_through_aliases_are_refused(key: str) -> None:
    """An alias shares its anchor's text, so editing it would change both."""
    with pytest.raises(InsertionPointError, match="alias"):
        _set(ALIASED, key, "dark")


def test_anchored_values_remain_editable() -> None:
    """The anchor itself is an ordinary value."""
    after = _set(ALIASED, "base.palette", "dark")

    assert _changed_lines(ALIASED, after) == [("  palette: light", "  palette: dark")]
    assert _set(ALIASED, "markata-go.feeds[0].slug", "posts").count(b"posts") == 1


def test_aliased_values_can_still_be_read() -> None:
    """Reads resolve through aliases."""
    assert get_yaml_value(ALIASED, parse_key_path("markata-go.theme.palette")) == (
        "light"
    )


def test_invalid_utf8_raises_parse_error() -> None:
    """Undecodable bytes are a YAML parse failure for get and set alike."""
    data = b"markata-go:\n  title: \xff\n"

    with pytest.raises(ConfigParseError, match="YAML"):
        get_yaml_value(data, parse_key_path("markata-go.title"))
    with pytest.raises(ConfigParseError, match="YAML"):
        _set(data, "markata-go.title", "x")
