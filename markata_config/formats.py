"""On-disk configuration formats, extension-based detection, and parse errors."""

from __future__ import annotations

import enum
from pathlib import Path


class ConfigFormat(enum.StrEnum):
    """Serialisation formats a configuration file may be authored in."""

    TOML = "toml"
    YAML = "yaml"
    JSON = "json"

    @classmethod
    def from_path(cls, path: Path | str) -> ConfigFormat:
        """Detect the format from a file extension, defaulting to TOML.

        Examples
        --------
        >>> ConfigFormat.from_path("site/markata-go.yml")
        <ConfigFormat.YAML: 'yaml'>
        >>> ConfigFormat.from_path("config")
        <ConfigFormat.TOML: 'toml'>
        """
        match Path(path).suffix.lower():
            case ".yaml" | ".yml":
                return cls.YAML
            case ".json":
                return cls.JSON
            case _:
                return cls.TOML


class ConfigParseError(ValueError):
    """Raised when configuration bytes are not valid for their format.

    Attributes
    ----------
    format : ConfigFormat
        The format the input was decoded as.
    cause : BaseException
        The underlying syntax or type error.
    """

    def __init__(self, fmt: ConfigFormat, cause: BaseException) -> None:
        self.format = fmt
        self.cause = cause
        super().__init__(f"failed to parse {fmt.value.upper()} config: {cause}")


__all__ = ["ConfigFormat", "ConfigParseError"]
