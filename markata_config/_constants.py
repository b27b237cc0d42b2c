"""Common literal values shared across markata_config.

The namespacing key, environment prefix, and discovery file names live here so
parsers, editors, the loader, and tests agree on a single spelling.

Examples
--------
>>> from markata_config import _constants
>>> _constants.ENV_PREFIX + "OUTPUT_DIR"
'MARKATA_GO_OUTPUT_DIR'
>>> _constants.CONFIG_FILENAMES[0]
'markata-go.toml'
"""

from __future__ import annotations

from pathlib import Path

NAMESPACE_KEY = "markata-go"
ENV_PREFIX = "MARKATA_GO_"

CONFIG_FILENAMES: tuple[str, ...] = (
    f"{NAMESPACE_KEY}.toml",
    f"{NAMESPACE_KEY}.yaml",
    f"{NAMESPACE_KEY}.yml",
    f"{NAMESPACE_KEY}.json",
)
USER_CONFIG_PATH = Path("~/.config") / NAMESPACE_KEY / "config.toml"
