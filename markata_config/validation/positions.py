"""Map configuration field names to line and column positions in a file.

:class:`PositionTracker` first resolves the full key path through the same
structural walk the editors use, so two sections that share a leaf name (two
``enabled`` keys, say) report their own lines. When the structural lookup
cannot answer (JSON input, a path absent from the file, or a document that
no longer parses) it falls back to a leaf-name scan for the first
``name =`` or ``name:`` assignment.

Examples
--------
>>> tracker = PositionTracker(b'[markata-go]\\nurl = "example.com"\\n', "site.toml")
>>> tracker.find("url")
FieldPosition(line=2, column=7)
"""

from __future__ import annotations

import logging
import re
import typing as typ

from ..editing.edits import line_column
from ..editing.toml_editor import locate_toml_value
from ..editing.yaml_editor import locate_yaml_value
from ..formats import ConfigFormat, ConfigParseError
from ..keypath import KeyPathError, normalize_config_path

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from ..editing.edits import Span
    from ..keypath import KeyPath

logger = logging.getLogger(__name__)


class FieldPosition(typ.NamedTuple):
    """1-based line and column of a field; ``(0, 0)`` when unknown."""

    line: int = 0
    column: int = 0

    @property
    def known(self) -> bool:
        return self.line > 0


UNKNOWN_POSITION = FieldPosition()

_LOCATORS: dict[ConfigFormat, cabc.Callable[[str, KeyPath], Span | None]] = {
    ConfigFormat.TOML: locate_toml_value,
    ConfigFormat.YAML: locate_yaml_value,
}


def _leaf_name(field: str) -> str:
    leaf = field.rsplit(".", 1)[-1]
    return leaf.split("[", 1)[0]


class PositionTracker:
    """Locate fields inside the raw bytes of one configuration file.

    Parameters
    ----------
    content : bytes
        Raw file contents.
    file_path : str
        Path reported alongside positions.
    fmt : ConfigFormat, optional
        Format of ``content``; detected from ``file_path`` when omitted.
    """

    def __init__(
        self,
        content: bytes,
        file_path: str = "",
        fmt: ConfigFormat | None = None,
    ) -> None:
        self._text = content.decode("utf-8", errors="replace")
        self._lines = self._text.split("\n")
        self._file_path = file_path
        if fmt is None and file_path:
            fmt = ConfigFormat.from_path(file_path)
        self._format = fmt

    @property
    def file_path(self) -> str:
        """Return the path this tracker reports."""
        return self._file_path

    def find(self, field: str) -> FieldPosition:
        """Return the position of ``field``'s value.

        Parameters
        ----------
        field : str
            Key path relative to the namespace, for example
            ``feeds[0].items_per_page``.

        Returns
        -------
        FieldPosition
            Position of the value, or ``UNKNOWN_POSITION``.
        """
        position = self._find_structural(field)
        if position is not None:
            return position
        return self._find_by_leaf(field)

    def _find_structural(self, field: str) -> FieldPosition | None:
        locator = _LOCATORS.get(self._format) if self._format else None
        if locator is None:
            return None
        try:
            span = locator(self._text, normalize_config_path(field))
        except (ConfigParseError, KeyPathError) as exc:
            logger.debug("Structural lookup of %s failed: %s", field, exc)
            return None
        if span is None:
            return None
        return FieldPosition(*line_column(self._text, span.start))

    def _find_by_leaf(self, field: str) -> FieldPosition:
        leaf = _leaf_name(field)
        pattern = re.compile(
            rf"^\s*[\"']?{re.escape(leaf)}[\"']?\s*[=:]", re.IGNORECASE
        )
        for number, line in enumerate(self._lines, start=1):
            if pattern.search(line) is None:
                continue
            column = min(
                (index for index in (line.find("="), line.find(":")) if index >= 0)
            )
            column += 1
            while column < len(line) and line[column] in " \t":
                column += 1
            return FieldPosition(number, column + 1)
        return UNKNOWN_POSITION

    def extract_context(self, line: int, context_lines: int = 2) -> list[str]:
        """Return numbered source lines around ``line``.

        The target line is prefixed with ``>``.

        Examples
        --------
        >>> tracker = PositionTracker(b"a = 1\\nb = 2\\nc = 3\\n")
        >>> tracker.extract_context(2, 1)
        ['     1 | a = 1', '>    2 | b = 2', '     3 | c = 3']
        """
        if line <= 0 or not self._lines:
            return []
        start = max(line - context_lines - 1, 0)
        end = min(line + context_lines, len(self._lines))
        return [
            f"{'> ' if number == line else '  '}{number:4d} | {self._lines[number - 1]}"
            for number in range(start + 1, end + 1)
        ]

    def get_line(self, line: int) -> str:
        """Return the text of a 1-based line, or ``""`` when out of range."""
        if line <= 0 or line > len(self._lines):
            return ""
        return self._lines[line - 1]


__all__ = ["UNKNOWN_POSITION", "FieldPosition", "PositionTracker"]
