"""Behaviour tests for resolving, editing, and validating site configuration.

The scenarios cover the layering of defaults, file, and environment, a
structural YAML edit that leaves every other line untouched, and a
position-aware validation finding with its suggested fix.

Usage
-----
Run ``pytest tests/bdd/test_config_resolution.py -v``. Every scenario works
inside ``tmp_path`` with ``HOME`` redirected, so no user configuration or
process environment leaks in.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, scenarios, then, when

from markata_config.config import (
    load,
    load_and_validate_with_positions,
)
from markata_config.editing import set_value_from_file

if typ.TYPE_CHECKING:
    from markata_config.config import SiteConfig
    from markata_config.validation import ValidationReport

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "config_resolution.feature"
)
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]

YAML_SOURCE = "# appearance\nmarkata-go:\n  title: Notes\n  theme:\n    palette: light\n"


@pytest.fixture
def scenario_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps.

    Parameters
    ----------
    tmp_path : Path
        Pytest-provided directory used as the site root.
    monkeypatch : pytest.MonkeyPatch
        Used to isolate ``HOME`` from the developer's configuration.

    Returns
    -------
    ScenarioState
        Dictionary seeded with the site ``root`` and an empty ``environ``.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    root = tmp_path / "site"
    root.mkdir()
    return {"root": root, "environ": {}}


@given("an empty site directory")
def given_empty_site(scenario_state: ScenarioState) -> None:
    """Leave the site root without any configuration file."""
    assert not any(typ.cast("Path", scenario_state["root"]).iterdir())


@given("a TOML configuration setting concurrency to 4")
def given_toml_concurrency(scenario_state: ScenarioState) -> None:
    """Write ``markata-go.toml`` with ``concurrency = 4``."""
    root = typ.cast("Path", scenario_state["root"])
    (root / "markata-go.toml").write_text(
        "[markata-go]\nconcurrency = 4\n", encoding="utf-8"
    )


@given("the environment sets MARKATA_GO_CONCURRENCY to 8")
def given_env_concurrency(scenario_state: ScenarioState) -> None:
    """Record an explicit environment mapping for the resolve step."""
    scenario_state["environ"] = {"MARKATA_GO_CONCURRENCY": "8"}


@given("a YAML configuration with a light palette")
def given_yaml_palette(scenario_state: ScenarioState) -> None:
    """Write a commented YAML configuration selecting the light palette."""
    path = typ.cast("Path", scenario_state["root"]) / "markata-go.yaml"
    path.write_text(YAML_SOURCE, encoding="utf-8")
    scenario_state["config_path"] = path


@given('a TOML configuration with the URL "example.com"')
def given_toml_url(scenario_state: ScenarioState) -> None:
    """Write a TOML configuration whose URL lacks a scheme."""
    path = typ.cast("Path", scenario_state["root"]) / "markata-go.toml"
    path.write_text('[markata-go]\nurl = "example.com"\n', encoding="utf-8")
    scenario_state["config_path"] = path


@when("the configuration is resolved")
def when_resolved(scenario_state: ScenarioState) -> None:
    """Resolve defaults, the discovered file, and the recorded environment.

    Parameters
    ----------
    scenario_state : ScenarioState
        Provides ``root`` and ``environ``; receives ``config``.

    Returns
    -------
    None
        The resolved configuration is stored for later steps.
    """
    scenario_state["config"] = load(
        environ=scenario_state["environ"], cwd=scenario_state["root"]
    )


@when("the palette is set to dark")
def when_palette_set(scenario_state: ScenarioState) -> None:
    """Apply a structural edit to the YAML file in place."""
    set_value_from_file(scenario_state["config_path"], "theme.palette", "dark")


@when("the configuration is validated with positions")
def when_validated(scenario_state: ScenarioState) -> None:
    """Load and validate the file, keeping the report."""
    _, report = load_and_validate_with_positions(
        scenario_state["config_path"], environ={}
    )
    scenario_state["report"] = report


@then('the output directory is "output"')
def then_output_dir(scenario_state: ScenarioState) -> None:
    """Check the default output directory."""
    config = typ.cast("SiteConfig", scenario_state["config"])
    assert config.output_dir == "output"


@then("the glob patterns are the documented defaults")
def then_default_globs(scenario_state: ScenarioState) -> None:
    """Check the default glob patterns."""
    config = typ.cast("SiteConfig", scenario_state["config"])
    assert config.glob.patterns == ["content/**/*.md", "*.md"]


@then("concurrency is 8")
def then_concurrency(scenario_state: ScenarioState) -> None:
    """Check that the environment value won."""
    config = typ.cast("SiteConfig", scenario_state["config"])
    assert config.concurrency == 8


@then("only the palette line differs")
def then_single_line_changed(scenario_state: ScenarioState) -> None:
    """Compare the edited file with the original line by line.

    Parameters
    ----------
    scenario_state : ScenarioState
        Provides ``config_path`` for the edited file.

    Returns
    -------
    None
        Raises AssertionError if any line other than the palette changed.
    """
    path = typ.cast("Path", scenario_state["config_path"])
    before = YAML_SOURCE.splitlines()
    after = path.read_text(encoding="utf-8").splitlines()

    changed = [
        (old, new) for old, new in zip(before, after, strict=True) if old != new
    ]

    assert changed == [("    palette: light", "    palette: dark")], changed


@then('exactly one error is reported for "url"')
def then_single_url_error(scenario_state: ScenarioState) -> None:
    """Check the report holds one error on the URL, located in the file."""
    report = typ.cast("ValidationReport", scenario_state["report"])
    assert [issue.field for issue in report.errors] == ["url"]
    assert report.errors[0].line == 2


@then("the suggested fix is 'url = \"https://example.com\"'")
def then_fix(scenario_state: ScenarioState) -> None:
    """Check the fix suggestion attached to the URL error."""
    report = typ.cast("ValidationReport", scenario_state["report"])
    assert report.errors[0].fix == 'url = "https://example.com"'
