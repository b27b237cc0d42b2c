"""Discover, read, and resolve configuration files.

Resolution layers the documented defaults, the discovered (or explicitly
named) file, and finally ``MARKATA_GO_*`` environment variables, so the
environment always has the last word.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
from pathlib import Path

from .._constants import CONFIG_FILENAMES, USER_CONFIG_PATH
from ..formats import ConfigFormat, ConfigParseError
from ..validation import (
    PositionTracker,
    ValidationIssue,
    ValidationReport,
    validate,
    validate_with_positions,
)
from .env import apply_env_overrides
from .merge import merge
from .models import SiteConfig, default_config
from .parsers import parse_config

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class ConfigPath:
    """A discovered configuration file.

    ``source`` is ``"cwd"`` for the working directory and ``"user"`` for the
    per-user configuration directory.
    """

    path: Path
    format: ConfigFormat
    source: str


def _candidates(cwd: Path | None) -> cabc.Iterator[ConfigPath]:
    base = Path.cwd() if cwd is None else cwd
    for name in CONFIG_FILENAMES:
        path = base / name
        if path.is_file():
            yield ConfigPath(path, ConfigFormat.from_path(path), "cwd")
    user_path = USER_CONFIG_PATH.expanduser()
    if user_path.is_file():
        yield ConfigPath(user_path, ConfigFormat.TOML, "user")


def discover(cwd: Path | None = None) -> Path | None:
    """Return the first configuration file found, or ``None``.

    Parameters
    ----------
    cwd : Path, optional
        Directory to probe instead of the working directory.

    Returns
    -------
    Path or None
        ``markata-go.toml``, ``.yaml``, ``.yml``, then ``.json`` in ``cwd``,
        then ``~/.config/markata-go/config.toml``. ``None`` when none exist,
        which is not an error.
    """
    found = next(_candidates(cwd), None)
    if found is None:
        logger.debug("No configuration file found; using defaults")
        return None
    logger.debug("Discovered configuration file %s", found.path)
    return found.path


def discover_all(cwd: Path | None = None) -> list[ConfigPath]:
    """Return every configuration file in the standard locations."""
    return list(_candidates(cwd))


def _read(path: Path) -> bytes:
    if not path.is_file():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)
    return path.read_bytes()


def load_single_config(path: Path | str) -> SiteConfig:
    """Parse one file without defaults or environment overrides.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ConfigParseError
        If the file is malformed.
    """
    file_path = Path(path)
    return parse_config(_read(file_path), ConfigFormat.from_path(file_path))


def load_with_defaults(environ: cabc.Mapping[str, str] | None = None) -> SiteConfig:
    """Return the defaults with environment overrides applied."""
    return apply_env_overrides(default_config(), environ)


def load(
    path: Path | str | None = None,
    *,
    environ: cabc.Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> SiteConfig:
    """Resolve the site configuration.

    Parameters
    ----------
    path : Path or str, optional
        Configuration file to read. When omitted the file is discovered; if
        none exists the defaults are used.
    environ : Mapping[str, str], optional
        Environment to read overrides from; defaults to :data:`os.environ`.
    cwd : Path, optional
        Directory used for discovery.

    Returns
    -------
    SiteConfig
        Defaults merged with the file, then environment overrides.

    Raises
    ------
    FileNotFoundError
        If an explicit ``path`` does not exist.
    ConfigParseError
        If the file is malformed.

    Examples
    --------
    >>> config = load(environ={})  # doctest: +SKIP
    >>> config.output_dir  # doctest: +SKIP
    'output'
    """
    file_path = discover(cwd) if path is None else Path(path)
    if file_path is None:
        return load_with_defaults(environ)
    logger.debug("Loading configuration from %s", file_path)
    config = merge(default_config(), load_single_config(file_path))
    return apply_env_overrides(config, environ)


def load_with_merge(
    base: Path | str | None,
    *overrides: Path | str | None,
    environ: cabc.Mapping[str, str] | None = None,
) -> SiteConfig:
    """Layer several files over the defaults, later files winning.

    Empty override entries are skipped, which lets callers pass optional
    local override paths unconditionally.

    Examples
    --------
    >>> load_with_merge("markata-go.toml", "markata-go.local.toml")  # doctest: +SKIP
    """
    config = merge(
        default_config(),
        load_single_config(base) if base else SiteConfig(),
    )
    for override in overrides:
        if not override:
            continue
        logger.debug("Merging override configuration %s", override)
        config = merge(config, load_single_config(override))
    return apply_env_overrides(config, environ)


def load_from_string(
    data: str | bytes, fmt: ConfigFormat = ConfigFormat.TOML
) -> SiteConfig:
    """Parse in-memory configuration and merge it over the defaults.

    Environment variables are not consulted.

    Examples
    --------
    >>> load_from_string('[markata-go]\\ntitle = "Notes"\\n').output_dir
    'output'
    """
    raw = data.encode("utf-8") if isinstance(data, str) else data
    return merge(default_config(), parse_config(raw, fmt))


def load_and_validate(
    path: Path | str | None = None,
    *,
    environ: cabc.Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> tuple[SiteConfig, ValidationReport]:
    """Load the configuration and validate it without positions."""
    config = load(path, environ=environ, cwd=cwd)
    return config, validate(config)


def load_and_validate_with_positions(
    path: Path | str | None = None,
    *,
    environ: cabc.Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> tuple[SiteConfig | None, ValidationReport]:
    """Load and validate the configuration, locating findings in the file.

    Returns
    -------
    tuple[SiteConfig or None, ValidationReport]
        The resolved configuration and its findings. A file that fails to
        parse yields ``None`` and a single ``syntax`` error instead of
        raising.

    Raises
    ------
    FileNotFoundError
        If an explicit ``path`` does not exist.
    """
    file_path = discover(cwd) if path is None else Path(path)
    if file_path is None:
        config = load_with_defaults(environ)
        return config, validate_with_positions(config, None)

    data = _read(file_path)
    tracker = PositionTracker(data, str(file_path))
    try:
        parsed = parse_config(data, ConfigFormat.from_path(file_path))
    except ConfigParseError as exc:
        logger.debug("Failed to parse %s: %s", file_path, exc)
        issue = ValidationIssue(
            "syntax",
            f"failed to parse configuration: {exc}",
            file=str(file_path),
        )
        return None, ValidationReport([issue])

    config = apply_env_overrides(merge(default_config(), parsed), environ)
    return config, validate_with_positions(config, tracker)


__all__ = [
    "ConfigPath",
    "discover",
    "discover_all",
    "load",
    "load_and_validate",
    "load_and_validate_with_positions",
    "load_from_string",
    "load_single_config",
    "load_with_defaults",
    "load_with_merge",
]
