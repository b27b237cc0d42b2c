"""Render configuration mappings back into TOML, YAML, or JSON text."""

from __future__ import annotations

import io
import typing as typ

import msgspec
import tomlkit
from ruamel.yaml import YAML

from .._constants import NAMESPACE_KEY
from ..formats import ConfigFormat
from .parsers import drop_nulls

if typ.TYPE_CHECKING:
    from .models import SiteConfig


def config_to_builtins(config: SiteConfig) -> dict[str, typ.Any]:
    """Return ``config`` as plain containers without unset values.

    Unknown sections kept in ``extra`` are folded back in beside the known
    fields.

    Examples
    --------
    >>> from markata_config.config.models import SiteConfig
    >>> config_to_builtins(SiteConfig(title="Notes"))["title"]
    'Notes'
    """
    data = drop_nulls(msgspec.to_builtins(config))
    extra = data.pop("extra", {})
    return {**data, **extra}


def dump_config(data: typ.Mapping[str, typ.Any], fmt: ConfigFormat) -> str:
    """Serialise ``data`` as ``fmt`` text ending in a newline."""
    match fmt:
        case ConfigFormat.JSON:
            encoded = msgspec.json.format(msgspec.json.encode(data), indent=2)
            return encoded.decode("utf-8") + "\n"
        case ConfigFormat.YAML:
            dumper = YAML(typ="safe", pure=True)
            dumper.default_flow_style = False
            dumper.sort_base_mapping_type_on_output = False
            stream = io.StringIO()
            dumper.dump(dict(data), stream)
            return stream.getvalue()
        case _:
            return tomlkit.dumps(dict(data))


def dump_site_config(config: SiteConfig, fmt: ConfigFormat) -> str:
    """Serialise a configuration under its ``markata-go`` namespace key."""
    return dump_config({NAMESPACE_KEY: config_to_builtins(config)}, fmt)


__all__ = ["config_to_builtins", "dump_config", "dump_site_config"]
