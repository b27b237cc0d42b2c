"""Cyclopts CLI for inspecting and editing markata-go configuration files.

The ``markata-config`` console script shows the resolved configuration, reads
single values, edits a value in place without reformatting the rest of the
file, validates the configuration with file positions, and writes a starter
configuration.

Examples
--------
Show the resolved configuration as JSON:

>>> from markata_config.cli import app
>>> app.run(["show", "--format", "json"])  # doctest: +SKIP

Preview an edit without writing it:

>>> app.run(["set", "theme.palette", "dark", "--dry-run"])  # doctest: +SKIP
"""

from __future__ import annotations

import sys
import typing as typ
from pathlib import Path

import cyclopts
import msgspec
from cyclopts import App, Parameter

from ._constants import CONFIG_FILENAMES, NAMESPACE_KEY
from .config import (
    config_to_builtins,
    discover,
    dump_config,
    dump_site_config,
    load,
    load_and_validate_with_positions,
)
from .config.env import parse_int
from .editing import (
    EditError,
    KeyNotFoundError,
    get_value,
    plan_edit,
    set_value_from_file,
)
from .formats import ConfigFormat, ConfigParseError
from .keypath import KeyPath, normalize_config_path

DEFAULT_INIT_FILE = Path(CONFIG_FILENAMES[0])

STARTER_CONFIG: dict[str, typ.Any] = {
    "title": "My Site",
    "url": "https://example.com",
    "description": "A site built with markata-go",
    "author": "Your Name",
    "output_dir": "output",
    "templates_dir": "templates",
    "assets_dir": "static",
    "glob": {"patterns": ["**/*.md"], "use_gitignore": True},
    "post_formats": {"html": True, "markdown": True, "og": True},
    "feed_defaults": {
        "items_per_page": 10,
        "orphan_threshold": 3,
        "formats": {
            "html": True,
            "rss": True,
            "atom": True,
            "json": True,
            "sitemap": True,
        },
    },
}

app = App(name="markata-config", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

ConfigOption = typ.Annotated[
    Path | None,
    Parameter(
        help="Configuration file (discovered when omitted)", env_var="INPUT_CONFIG"
    ),
]


def _fail(message: str) -> typ.NoReturn:
    print(message, file=sys.stderr)
    raise SystemExit(1)


def parse_cli_value(raw: str) -> typ.Any:
    """Interpret a command-line value.

    ``true``/``false`` become booleans, base-10 integers become ``int``,
    numbers containing a dot become ``float``, JSON arrays and objects are
    decoded, and anything else stays a string.

    Examples
    --------
    >>> parse_cli_value("TRUE"), parse_cli_value("15"), parse_cli_value("1.5")
    (True, 15, 1.5)
    >>> parse_cli_value('["posts/**/*.md"]')
    ['posts/**/*.md']
    >>> parse_cli_value("dist")
    'dist'
    """
    match raw.lower():
        case "true":
            return True
        case "false":
            return False
    number = parse_int(raw)
    if number is not None:
        return number
    if "." in raw:
        try:
            return float(raw)
        except ValueError:
            pass
    if raw.startswith(("[", "{")):
        try:
            return msgspec.json.decode(raw)
        except msgspec.DecodeError:
            pass
    return raw


def format_display_value(value: typ.Any) -> str:
    """Render a value for the ``set --dry-run`` preview.

    Examples
    --------
    >>> format_display_value(None), format_display_value("dark")
    ('<not set>', '"dark"')
    >>> format_display_value(["a", 1])
    '["a",1]'
    """
    match value:
        case None:
            return "<not set>"
        case str() | list() | dict():
            return msgspec.json.encode(value).decode("utf-8")
        case bool():
            return str(value).lower()
        case _:
            return str(value)


def _lookup(data: typ.Any, path: KeyPath) -> typ.Any:
    current = data
    for segment in path[1:]:
        if not isinstance(current, dict) or segment.name not in current:
            raise KeyNotFoundError(str(path[1:]))
        current = current[segment.name]
        if segment.index is None:
            continue
        if not isinstance(current, list) or segment.index >= len(current):
            raise KeyNotFoundError(str(path[1:]))
        current = current[segment.index]
    return current


@app.command(help="Print the resolved configuration.")
def show(
    *,
    config: ConfigOption = None,
    fmt: typ.Annotated[
        ConfigFormat,
        Parameter(name="--format", help="Output format", env_var="INPUT_FORMAT"),
    ] = ConfigFormat.YAML,
) -> None:
    """Print defaults, file, and environment merged into one document.

    Parameters
    ----------
    config : Path or None, optional
        Configuration file; discovered when omitted.
    fmt : ConfigFormat, optional
        ``yaml`` (default), ``toml``, or ``json``.
    """
    print(dump_site_config(load(config), fmt), end="")


@app.command(help="Print a single resolved configuration value.")
def get(
    key: typ.Annotated[str, Parameter(help="Dotted key, e.g. feed_defaults.items_per_page")],
    *,
    config: ConfigOption = None,
) -> None:
    """Print the resolved value stored under ``key``.

    Strings print bare, string lists print one item per line, and anything
    else prints as indented JSON.
    """
    data = config_to_builtins(load(config))
    try:
        value = _lookup(data, normalize_config_path(key.lower()))
    except KeyNotFoundError:
        _fail(f"unknown config key: {key}")
    match value:
        case str():
            print(value)
        case list() if all(isinstance(item, str) for item in value):
            for item in value:
                print(item)
        case _:
            print(msgspec.json.format(msgspec.json.encode(value), indent=2).decode())


@app.command(name="set", help="Set a value in the configuration file, keeping its formatting.")
def set_value(
    key: typ.Annotated[str, Parameter(help="Dotted key, e.g. theme.palette")],
    value: typ.Annotated[str, Parameter(help="New value; JSON for lists and maps")],
    *,
    config: ConfigOption = None,
    dry_run: typ.Annotated[
        bool, Parameter(help="Show the change without writing it")
    ] = False,
) -> None:
    """Store ``value`` under ``key`` with a minimal structural edit.

    Parameters
    ----------
    key : str
        Dotted key relative to the ``markata-go`` namespace.
    value : str
        Raw value, type-detected by :func:`parse_cli_value`.
    config : Path or None, optional
        File to edit; discovered when omitted.
    dry_run : bool, optional
        Print the old and new values instead of writing.
    """
    path = config or discover()
    if path is None:
        _fail(
            "no config file found (use --config to specify one "
            "or run 'init' first)"
        )
    fmt = ConfigFormat.from_path(path)
    data = path.read_bytes()
    parsed = parse_cli_value(value)
    try:
        old = get_value(data, key, fmt)
    except KeyNotFoundError:
        old = None
    except ConfigParseError as exc:
        _fail(f"{path}: {exc}")
    # Fails before any preview when the key cannot be placed.
    try:
        plan_edit(data, key, parsed, fmt)
    except (EditError, ConfigParseError) as exc:
        _fail(f"cannot set {key} in {path}: {exc}")

    if dry_run:
        print(f"Would update {key} in {path}:")
        print(f"  Old: {format_display_value(old)}")
        print(f"  New: {format_display_value(parsed)}")
        return

    set_value_from_file(path, key, parsed)
    print(f"Updated {key} in {path}")


@app.command(help="Validate the configuration and report problems with positions.")
def validate(
    *,
    config: ConfigOption = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Print a configuration summary")
    ] = False,
) -> None:
    """Print warnings and errors; exit non-zero when any error is found."""
    path = config or discover()
    resolved, report = load_and_validate_with_positions(path)

    if report.warnings:
        print("Warnings:")
        for issue in report.warnings:
            print(f"  - {issue.short()}")
        print()

    if report.has_errors or resolved is None:
        print("Errors:")
        for issue in report.errors:
            print(f"  - {issue.short()}")
        print()
        print(report.format(), end="", file=sys.stderr)
        raise SystemExit(1)

    print(f"Configuration is valid: {path if path else '(defaults)'}")
    if verbose:
        print("\nConfiguration summary:")
        print(f"  Output directory: {resolved.output_dir}")
        print(f"  Site URL: {resolved.url}")
        print(f"  Site title: {resolved.title}")
        print(f"  Glob patterns: {resolved.glob.patterns}")
        print(f"  Feeds defined: {len(resolved.feeds)}")


@app.command(help="Write a starter configuration file.")
def init(
    filename: typ.Annotated[
        Path, Parameter(help="File to create; the extension picks the format")
    ] = DEFAULT_INIT_FILE,
    *,
    force: typ.Annotated[
        bool, Parameter(help="Overwrite an existing file")
    ] = False,
) -> None:
    """Create ``filename`` with documented starter values."""
    if filename.exists() and not force:
        _fail(f"file already exists: {filename} (use --force to overwrite)")
    fmt = ConfigFormat.from_path(filename)
    filename.write_text(
        dump_config({NAMESPACE_KEY: STARTER_CONFIG}, fmt), encoding="utf-8"
    )
    print(f"Created: {filename}")


def main() -> None:
    """Invoke the Cyclopts application behind the ``markata-config`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
