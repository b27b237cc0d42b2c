"""Tests for configuration discovery and resolution."""

from __future__ import annotations

import typing as typ

import pytest

from markata_config.config import (
    discover,
    discover_all,
    load,
    load_and_validate,
    load_and_validate_with_positions,
    load_from_string,
    load_single_config,
    load_with_merge,
)
from markata_config.formats import ConfigFormat, ConfigParseError

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``~`` at an empty directory so no user config is found."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def project(tmp_path: Path, isolated_home: Path) -> Path:
    """Return an empty project directory."""
    root = tmp_path / "site"
    root.mkdir()
    return root


def test_defaults_without_file_or_environment(project: Path) -> None:
    """With nothing to read the documented defaults are returned."""
    config = load(environ={}, cwd=project)

    assert config.output_dir == "output"
    assert config.glob.patterns == ["content/**/*.md", "*.md"]


def test_environment_beats_file(project: Path) -> None:
    """Environment overrides apply after the file."""
    (project / "markata-go.toml").write_text(
        "[markata-go]\nconcurrency = 4\n", encoding="utf-8"
    )

    config = load(environ={"MARKATA_GO_CONCURRENCY": "8"}, cwd=project)

    assert config.concurrency == 8


def test_discovery_order(project: Path, isolated_home: Path) -> None:
    """TOML wins over YAML and JSON; the user file comes last."""
    for name in ("markata-go.json", "markata-go.yaml", "markata-go.toml"):
        (project / name).write_text("", encoding="utf-8")
    user_dir = isolated_home / ".config" / "markata-go"
    user_dir.mkdir(parents=True)
    (user_dir / "config.toml").write_text("", encoding="utf-8")

    found = discover_all(project)

    assert discover(project) == project / "markata-go.toml"
    assert [entry.path.name for entry in found] == [
        "markata-go.toml",
        "markata-go.yaml",
        "markata-go.json",
        "config.toml",
    ]
    assert [entry.source for entry in found] == ["cwd", "cwd", "cwd", "user"]
    assert found[1].format is ConfigFormat.YAML


def test_discover_returns_none_when_nothing_exists(project: Path) -> None:
    """No configuration is not an error."""
    assert discover(project) is None


def test_discover_uses_working_directory(
    project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Without an explicit directory the working directory is probed."""
    (project / "markata-go.yml").write_text("markata-go: {}\n", encoding="utf-8")
    monkeypatch.chdir(project)

    found = discover()

    assert found is not None
    assert found.name == "markata-go.yml"


def test_explicit_missing_file_raises(project: Path) -> None:
    """Naming a file that does not exist is an error."""
    with pytest.raises(FileNotFoundError, match="not found"):
        load(project / "missing.toml", environ={})


def test_malformed_file_raises(project: Path) -> None:
    """Parse errors propagate from ``load``."""
    path = project / "markata-go.json"
    path.write_text("{", encoding="utf-8")

    with pytest.raises(ConfigParseError):
        load(path, environ={})


def test_load_with_merge_layers_files(project: Path) -> None:
    """Later files override earlier ones and empty entries are skipped."""
    base = project / "markata-go.toml"
    base.write_text(
        '[markata-go]\ntitle = "Base"\noutput_dir = "public"\n', encoding="utf-8"
    )
    local = project / "local.yaml"
    local.write_text("markata-go:\n  title: Local\n", encoding="utf-8")

    config = load_with_merge(base, None, local, environ={})

    assert config.title == "Local"
    assert config.output_dir == "public", "unset override keeps the base"
    assert config.templates_dir == "templates", "defaults fill the rest"


def test_load_single_config_has_no_defaults(project: Path) -> None:
    """A single file is parsed without the default layer."""
    path = project / "markata-go.toml"
    path.write_text('[markata-go]\ntitle = "Only"\n', encoding="utf-8")

    config = load_single_config(path)

    assert config.title == "Only"
    assert config.output_dir == ""


def test_load_from_string_ignores_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """In-memory loading merges defaults but never reads the environment."""
    monkeypatch.setenv("MARKATA_GO_TITLE", "From env")

    config = load_from_string("markata-go:\n  title: Inline\n", ConfigFormat.YAML)

    assert config.title == "Inline"
    assert config.output_dir == "output"


def test_load_and_validate_reports_findings(project: Path) -> None:
    """Validation runs on the resolved configuration."""
    path = project / "markata-go.toml"
    path.write_text('[markata-go]\nurl = "example.com"\n', encoding="utf-8")

    _, report = load_and_validate(path, environ={})

    assert [issue.field for issue in report.errors] == ["url"]


def test_positions_variant_locates_findings(project: Path) -> None:
    """Findings carry the file and line of the offending value."""
    path = project / "markata-go.yaml"
    path.write_text("markata-go:\n  concurrency: -1\n", encoding="utf-8")

    config, report = load_and_validate_with_positions(path, environ={})

    assert config is not None
    (issue,) = report.errors
    assert (issue.file, issue.line, issue.column) == (str(path), 2, 16)


def test_positions_variant_reports_syntax_errors(project: Path) -> None:
    """A malformed file becomes a syntax finding instead of an exception."""
    path = project / "markata-go.toml"
    path.write_text("[markata-go\n", encoding="utf-8")

    config, report = load_and_validate_with_positions(path, environ={})

    assert config is None
    (issue,) = report
    assert issue.field == "syntax"
    assert issue.message.startswith("failed to parse configuration:")
    assert issue.file == str(path)
