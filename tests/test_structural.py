"""Tests for the JSON editor and the format-dispatching edit helpers."""

from __future__ import annotations

import stat
import typing as typ

import pytest

from markata_config.editing import (
    InsertionPointError,
    KeyNotFoundError,
    get_json_value,
    get_value,
    get_value_from_file,
    set_json_value,
    set_value,
    set_value_from_file,
)
from markata_config.formats import ConfigFormat, ConfigParseError
from markata_config.keypath import parse_key_path

if typ.TYPE_CHECKING:
    from pathlib import Path

JSON_SOURCE = b'{"markata-go": {"title": "Notes", "feeds": [{"slug": "blog"}]}}'


def test_json_set_rewrites_with_indentation() -> None:
    """JSON output is re-serialised with two-space indentation."""
    result = set_json_value(JSON_SOURCE, parse_key_path("markata-go.title"), "Log")

    assert result == (
        b'{\n  "markata-go": {\n    "title": "Log",\n    "feeds": [\n'
        b'      {\n        "slug": "blog"\n      }\n    ]\n  }\n}\n'
    ), result.decode()


def test_json_set_creates_missing_objects() -> None:
    """Intermediate objects are created on demand."""
    result = set_json_value(b"", parse_key_path("markata-go.theme.palette"), "dark")

    assert get_json_value(result, parse_key_path("markata-go.theme")) == {
        "palette": "dark"
    }


def test_json_array_elements_must_exist() -> None:
    """Indexes address existing elements only."""
    path = parse_key_path("markata-go.feeds[0].slug")

    assert get_json_value(set_json_value(JSON_SOURCE, path, "notes"), path) == "notes"
    with pytest.raises(InsertionPointError):
        set_json_value(JSON_SOURCE, parse_key_path("markata-go.feeds[3].slug"), "x")


def test_json_scalar_parent_is_rejected() -> None:
    """Keys cannot be added below a string."""
    with pytest.raises(InsertionPointError):
        set_json_value(JSON_SOURCE, parse_key_path("markata-go.title.text"), "x")


def test_json_errors() -> None:
    """Missing keys and malformed input raise the shared errors."""
    with pytest.raises(KeyNotFoundError):
        get_json_value(JSON_SOURCE, parse_key_path("markata-go.url"))
    with pytest.raises(ConfigParseError):
        get_json_value(b"{", parse_key_path("markata-go.url"))


@pytest.mark.parametrize(
    ("fmt", "data"),
    [
        (ConfigFormat.TOML, b"[markata-go]\nconcurrency = 4\n"),
        (ConfigFormat.YAML, b"markata-go:\n  concurrency: 4\n"),
        (ConfigFormat.JSON, b'{"markata-go": {"concurrency": 4}}'),
    ],
)
def test_keys_are_relative_to_the_namespace(fmt: ConfigFormat, data: bytes) -> None:
    """Short and fully-qualified keys address the same value in every format."""
    assert get_value(data, "concurrency", fmt) == 4
    assert get_value(data, "markata-go.concurrency", fmt) == 4

    updated = set_value(data, "concurrency", 8, fmt)

    assert get_value(updated, "concurrency", fmt) == 8, updated.decode()


def test_file_helpers_detect_format_and_keep_mode(tmp_path: Path) -> None:
    """File edits pick the format from the extension and keep permissions."""
    config = tmp_path / "markata-go.yaml"
    config.write_text("markata-go:\n  theme:\n    palette: light\n", encoding="utf-8")
    config.chmod(0o640)

    set_value_from_file(config, "theme.palette", "dark")

    assert config.read_text(encoding="utf-8") == (
        "markata-go:\n  theme:\n    palette: dark\n"
    )
    assert stat.S_IMODE(config.stat().st_mode) == 0o640, "mode should be kept"
    assert get_value_from_file(config, "theme.palette") == "dark"
