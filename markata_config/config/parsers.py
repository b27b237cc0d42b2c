"""Decode TOML, YAML, and JSON configuration bytes into the canonical model.

Each parser implements :meth:`FormatParser.load` for its own format and then
shares one conversion path: the decoded mapping is converted into
:class:`~markata_config.config.records.ConfigDocument` with ``msgspec`` and the
resulting record is walked once by
:func:`~markata_config.config.records.to_config`. Parsing is all-or-nothing:
any syntax or type error raises :class:`ConfigParseError` and no partially
populated configuration is returned.

Examples
--------
>>> from markata_config.config.parsers import parse_config
>>> from markata_config.formats import ConfigFormat
>>> config = parse_config(b'[markata-go]\\ntitle = "Notes"\\n', ConfigFormat.TOML)
>>> config.title
'Notes'
"""

from __future__ import annotations

import abc
import collections.abc as cabc
import datetime as dt
import functools
import logging
import tomllib
import typing as typ

import msgspec
import msgspec.inspect as mi
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .._constants import NAMESPACE_KEY
from ..formats import ConfigFormat, ConfigParseError
from .records import ConfigDocument, to_config, unknown_sections

if typ.TYPE_CHECKING:
    from .models import SiteConfig

logger = logging.getLogger(__name__)


def drop_nulls(value: typ.Any) -> typ.Any:
    """Treat explicit nulls as absent keys, recursively."""
    match value:
        case dict():
            return {
                key: drop_nulls(item) for key, item in value.items() if item is not None
            }
        case list():
            return [drop_nulls(item) for item in value]
        case _:
            return value


_YAML_BOOLEANS: dict[str, bool] = {
    "y": True,
    "yes": True,
    "on": True,
    "true": True,
    "n": False,
    "no": False,
    "off": False,
    "false": False,
}


@functools.cache
def _document_info() -> mi.Type:
    return mi.type_info(ConfigDocument)


def _scalar_text(value: typ.Any) -> str | None:
    match value:
        case bool():
            return "true" if value else "false"
        case int() | float():
            return repr(value)
        case dt.date() | dt.time():
            return value.isoformat()
        case _:
            return None


def coerce_scalars(value: typ.Any, info: mi.Type) -> typ.Any:
    """Convert plain YAML scalars to the scalar type a record field expects.

    Numbers, booleans, and dates bound for string fields become their text;
    ``yes``/``no`` and ``on``/``off`` bound for boolean fields become
    booleans. Anything else is returned unchanged for ``msgspec`` to check.

    Examples
    --------
    >>> coerce_scalars(2024, mi.StrType())
    '2024'
    >>> coerce_scalars("No", mi.BoolType())
    False
    """
    match info:
        case mi.StrType():
            text = _scalar_text(value)
            return value if text is None else text
        case mi.BoolType() if isinstance(value, str):
            return _YAML_BOOLEANS.get(value.lower(), value)
        case mi.UnionType():
            for option in info.types:
                coerced = coerce_scalars(value, option)
                if coerced is not value:
                    return coerced
            return value
        case mi.ListType() if isinstance(value, list):
            return [coerce_scalars(item, info.item_type) for item in value]
        case mi.DictType() if isinstance(value, dict):
            return {
                key: coerce_scalars(item, info.value_type)
                for key, item in value.items()
            }
        case mi.StructType() if isinstance(value, dict):
            fields = {field.encode_name: field.type for field in info.fields}
            return {
                key: coerce_scalars(item, fields[key]) if key in fields else item
                for key, item in value.items()
            }
        case _:
            return value


class FormatParser(abc.ABC):
    """Shared conversion path for the per-format parsers."""

    format: typ.ClassVar[ConfigFormat]

    @abc.abstractmethod
    def load(self, text: str) -> typ.Any:
        """Decode ``text`` into plain Python containers."""

    def coerce(self, raw: typ.Any) -> typ.Any:
        """Adjust decoded values before type conversion; identity by default."""
        return raw

    def decode(self, data: bytes) -> tuple[ConfigDocument, dict[str, typ.Any]]:
        """Decode ``data`` into the intermediate record and its unknown keys.

        Raises
        ------
        ConfigParseError
            If the bytes are not valid UTF-8, not valid for the format, or do
            not match the expected record types.
        """
        try:
            text = data.decode("utf-8")
            raw = drop_nulls(self.load(text))
        except (
            UnicodeDecodeError,
            tomllib.TOMLDecodeError,
            YAMLError,
            msgspec.DecodeError,
        ) as exc:
            raise ConfigParseError(self.format, exc) from exc
        if raw is None:
            raw = {}
        try:
            document = msgspec.convert(self.coerce(raw), ConfigDocument)
        except msgspec.ValidationError as exc:
            raise ConfigParseError(self.format, exc) from exc
        section = raw.get(NAMESPACE_KEY) if isinstance(raw, dict) else None
        extra = unknown_sections(section) if isinstance(section, dict) else {}
        if extra:
            logger.debug(
                "Preserving unknown %s sections: %s",
                self.format.value,
                ", ".join(sorted(extra)),
            )
        return document, extra

    def parse(self, data: bytes) -> SiteConfig:
        """Parse ``data`` into a canonical configuration.

        Parameters
        ----------
        data : bytes
            Raw file contents carrying a top-level ``markata-go`` key.

        Returns
        -------
        SiteConfig
            The decoded configuration with only the fields present in
            ``data`` set; defaults are applied later by merging.

        Raises
        ------
        ConfigParseError
            If ``data`` cannot be decoded.
        """
        document, extra = self.decode(data)
        return to_config(document.site, extra=extra)


class TomlParser(FormatParser):
    format = ConfigFormat.TOML

    def load(self, text: str) -> typ.Any:
        return tomllib.loads(text)


class YamlParser(FormatParser):
    format = ConfigFormat.YAML

    def load(self, text: str) -> typ.Any:
        loader = YAML(typ="safe")
        loader.version = (1, 2)
        return loader.load(text)

    def coerce(self, raw: typ.Any) -> typ.Any:
        return coerce_scalars(raw, _document_info())


class JsonParser(FormatParser):
    format = ConfigFormat.JSON

    def load(self, text: str) -> typ.Any:
        return msgspec.json.decode(text)


PARSERS: cabc.Mapping[ConfigFormat, FormatParser] = {
    ConfigFormat.TOML: TomlParser(),
    ConfigFormat.YAML: YamlParser(),
    ConfigFormat.JSON: JsonParser(),
}


def parse_config(data: bytes, fmt: ConfigFormat) -> SiteConfig:
    """Parse ``data`` with the parser registered for ``fmt``."""
    return PARSERS[fmt].parse(data)


def parse_toml(data: bytes) -> SiteConfig:
    """Parse TOML bytes with a ``[markata-go]`` table."""
    return PARSERS[ConfigFormat.TOML].parse(data)


def parse_yaml(data: bytes) -> SiteConfig:
    """Parse YAML bytes with a top-level ``markata-go`` key."""
    return PARSERS[ConfigFormat.YAML].parse(data)


def parse_json(data: bytes) -> SiteConfig:
    """Parse JSON bytes with a top-level ``"markata-go"`` key."""
    return PARSERS[ConfigFormat.JSON].parse(data)


__all__ = [
    "PARSERS",
    "ConfigParseError",
    "FormatParser",
    "JsonParser",
    "TomlParser",
    "YamlParser",
    "coerce_scalars",
    "drop_nulls",
    "parse_config",
    "parse_json",
    "parse_toml",
    "parse_yaml",
]
