"""Structural get/set on TOML documents that preserves unrelated formatting.

The document is scanned into a light concrete syntax tree of top-level
statements: table headers (``[a.b]`` and ``[[a.b]]``) and key/value entries
with the character span of each value. Array-of-table headers carry a
per-path occurrence counter, so ``[[markata-go.feeds]]`` sections resolve to
``feeds[0]``, ``feeds[1]``, and so on. Values are read back through
``tomllib`` and written with ``tomlkit`` so every edit round-trips through
the same decoder used for loading.

Examples
--------
>>> from markata_config.keypath import parse_key_path
>>> source = b'[markata-go]\\ntitle = "Old"  # keep\\n'
>>> set_toml_value(source, parse_key_path("markata-go.title"), "New")
b'[markata-go]\\ntitle = "New"  # keep\\n'
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import dataclasses as dc
import datetime as dt
import logging
import re
import tomllib
import typing as typ

import tomlkit

from ..formats import ConfigFormat, ConfigParseError
from ..keypath import KeyPath, KeySegment
from .edits import (
    Edit,
    EditError,
    InsertionPointError,
    KeyNotFoundError,
    Span,
    char_edit,
    decode_text,
)

logger = logging.getLogger(__name__)

_BARE_KEY_RE = re.compile(r"[A-Za-z0-9_-]+")
_BARE_VALUE_STOP = frozenset(",]}#\n\r")

Step = str | int


@dc.dataclass(slots=True)
class TomlEntry:
    """A ``key = value`` statement and where its value sits."""

    path: KeyPath
    value: Span
    line_end: int


@dc.dataclass(slots=True)
class TomlTable:
    """A table header and the entries that belong to it."""

    path: KeyPath
    header: Span
    line_end: int
    is_array: bool
    entries: list[TomlEntry] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class TomlDocument:
    """Scanned statements of a TOML document."""

    text: str
    root: list[TomlEntry]
    tables: list[TomlTable]
    newline: str = "\n"

    def owned_entries(self) -> cabc.Iterator[tuple[KeyPath, TomlEntry]]:
        """Yield ``(table path, entry)`` pairs in document order."""
        for entry in self.root:
            yield KeyPath(), entry
        for table in self.tables:
            for entry in table.entries:
                yield table.path, entry

    def entries(self) -> cabc.Iterator[TomlEntry]:
        """Yield every entry in document order."""
        for _, entry in self.owned_entries():
            yield entry

    def find_entry(self, path: KeyPath) -> TomlEntry | None:
        """Return the entry assigned at exactly ``path``."""
        return next((entry for entry in self.entries() if entry.path == path), None)

    def find_table(self, path: KeyPath) -> TomlTable | None:
        """Return the table whose header resolves to ``path``."""
        return next((table for table in self.tables if table.path == path), None)

    def defines_by_header(self, path: KeyPath) -> bool:
        """Return ``True`` when a table header opens ``path`` or a table below it."""
        depth = len(path)
        for table in self.tables:
            if len(table.path) < depth or table.path[: depth - 1] != path[:-1]:
                continue
            segment = table.path[depth - 1]
            if segment.name == path.leaf.name and path.leaf.index in (
                None,
                segment.index,
            ):
                return True
        return False

    def find_enclosing_entry(
        self, path: KeyPath
    ) -> tuple[TomlEntry, list[Step]] | None:
        """Find an entry whose inline value contains ``path``.

        Returns the entry and the remaining steps (keys and indexes) from the
        entry's value down to the target.
        """
        for entry in self.entries():
            steps = _steps_below(entry.path, path)
            if steps:
                return entry, steps
        return None


def _steps_below(owner: KeyPath, target: KeyPath) -> list[Step] | None:
    depth = len(owner)
    if depth == 0 or depth > len(target):
        return None
    if owner[:-1] != target[: depth - 1]:
        return None
    last, matching = owner[-1], target[depth - 1]
    if last.index is not None or last.name != matching.name:
        return None
    steps: list[Step] = []
    if matching.index is not None:
        steps.append(matching.index)
    for segment in target[depth:]:
        steps.append(segment.name)
        if segment.index is not None:
            steps.append(segment.index)
    return steps or None


class _Scanner:
    """Single pass over the document text producing :class:`TomlDocument`."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.size = len(text)
        self.pos = 0
        self.counters: dict[KeyPath, int] = {}

    def scan(self) -> TomlDocument:
        root: list[TomlEntry] = []
        tables: list[TomlTable] = []
        current_path = KeyPath()
        current_entries = root
        while self.pos < self.size:
            char = self.text[self.pos]
            if char in " \t\r\n":
                self.pos += 1
            elif char == "#":
                self.pos = self._line_end(self.pos)
            elif char == "[":
                table = self._header()
                tables.append(table)
                current_path = table.path
                current_entries = table.entries
            else:
                current_entries.append(self._entry(current_path))
        newline = "\r\n" if "\r\n" in self.text else "\n"
        return TomlDocument(self.text, root, tables, newline)

    def _line_end(self, pos: int) -> int:
        end = self.text.find("\n", pos)
        if end == -1:
            return self.size
        if end > pos and self.text[end - 1] == "\r":
            return end - 1
        return end

    def _skip_blanks(self) -> None:
        while self.pos < self.size and self.text[self.pos] in " \t":
            self.pos += 1

    def _statement_end(self, pos: int) -> int:
        self.pos = pos
        self._skip_blanks()
        return self._line_end(self.pos)

    def _key(self) -> list[str]:
        names: list[str] = []
        while True:
            self._skip_blanks()
            char = self.text[self.pos]
            if char in "\"'":
                end = self._string_end(self.pos)
                raw = self.text[self.pos : end]
                names.append(tomllib.loads(f"k = {raw}")["k"])
                self.pos = end
            else:
                match = _BARE_KEY_RE.match(self.text, self.pos)
                if match is None:
                    msg = f"Unexpected character {char!r} at offset {self.pos}."
                    raise EditError(msg)
                names.append(match.group())
                self.pos = match.end()
            self._skip_blanks()
            if self.pos < self.size and self.text[self.pos] == ".":
                self.pos += 1
                continue
            return names

    def _header(self) -> TomlTable:
        start = self.pos
        is_array = self.text.startswith("[[", self.pos)
        self.pos += 2 if is_array else 1
        names = self._key()
        self.pos += 2 if is_array else 1
        header = Span(start, self.pos)
        return TomlTable(
            path=self._resolve_header(names, is_array=is_array),
            header=header,
            line_end=self._statement_end(self.pos),
            is_array=is_array,
        )

    def _resolve_header(self, names: list[str], *, is_array: bool) -> KeyPath:
        path = KeyPath()
        for position, name in enumerate(names):
            plain = path.child(name)
            if is_array and position == len(names) - 1:
                index = self.counters.get(plain, 0)
                self.counters[plain] = index + 1
                path = path.child(name, index)
            elif plain in self.counters:
                path = path.child(name, self.counters[plain] - 1)
            else:
                path = plain
        return path

    def _entry(self, table_path: KeyPath) -> TomlEntry:
        names = self._key()
        # Skip "=" and the blanks that follow it.
        self.pos += 1
        self._skip_blanks()
        start = self.pos
        end = self._value_end(start)
        path = KeyPath((*table_path.segments, *(KeySegment(name) for name in names)))
        return TomlEntry(
            path=path, value=Span(start, end), line_end=self._statement_end(end)
        )

    def _string_end(self, pos: int) -> int:
        text = self.text
        for quote in ('"""', "'''"):
            if text.startswith(quote, pos):
                return self._multiline_end(pos, quote)
        quote = text[pos]
        cursor = pos + 1
        while text[cursor] != quote:
            cursor += 2 if quote == '"' and text[cursor] == "\\" else 1
        return cursor + 1

    def _multiline_end(self, pos: int, quote: str) -> int:
        text = self.text
        cursor = pos + 3
        while True:
            if quote == '"""' and text[cursor] == "\\":
                cursor += 2
                continue
            if text.startswith(quote, cursor):
                end = cursor + 3
                # Up to two quotes may directly precede the closing delimiter.
                while end < self.size and text[end] == quote[0] and end - cursor < 5:
                    end += 1
                return end
            cursor += 1

    def _value_end(self, pos: int) -> int:
        char = self.text[pos]
        if char in "\"'":
            return self._string_end(pos)
        if char in "[{":
            return self._bracketed_end(pos)
        cursor = pos
        while cursor < self.size and self.text[cursor] not in _BARE_VALUE_STOP:
            cursor += 1
        while cursor > pos and self.text[cursor - 1] in " \t":
            cursor -= 1
        return cursor

    def _bracketed_end(self, pos: int) -> int:
        depth = 0
        cursor = pos
        while True:
            char = self.text[cursor]
            if char in "[{":
                depth += 1
                cursor += 1
            elif char in "]}":
                depth -= 1
                cursor += 1
                if depth == 0:
                    return cursor
            elif char in "\"'":
                cursor = self._string_end(cursor)
            elif char == "#":
                cursor = self._line_end(cursor)
            else:
                cursor += 1


def scan_toml(text: str) -> TomlDocument:
    """Validate ``text`` with ``tomllib`` and scan its statements.

    Raises
    ------
    ConfigParseError
        If ``text`` is not valid TOML.
    """
    try:
        tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigParseError(ConfigFormat.TOML, exc) from exc
    return _Scanner(text).scan()


def format_toml_key(name: str) -> str:
    """Render a key bare when possible, quoted otherwise."""
    if _BARE_KEY_RE.fullmatch(name):
        return name
    return tomlkit.string(name).as_string()


def encode_toml_value(value: typ.Any) -> str:
    """Encode ``value`` as an inline TOML value.

    Examples
    --------
    >>> encode_toml_value({"html": True, "tags": ["a", "b"]})
    '{html = true, tags = ["a", "b"]}'

    Raises
    ------
    EditError
        If ``value`` has no TOML representation (for example ``None``).
    """
    match value:
        case None:
            msg = "TOML has no null value."
            raise EditError(msg)
        case bool() | int() | float() | str() | dt.date() | dt.time():
            return tomlkit.item(value).as_string()
        case cabc.Mapping():
            pairs = ", ".join(
                f"{format_toml_key(str(key))} = {encode_toml_value(item)}"
                for key, item in value.items()
            )
            return f"{{{pairs}}}"
        case list() | tuple():
            return "[" + ", ".join(encode_toml_value(item) for item in value) + "]"
        case _:
            msg = f"Cannot encode {type(value).__name__} as TOML."
            raise EditError(msg)


def decode_toml_value(raw: str) -> typ.Any:
    """Decode the text of a single TOML value."""
    return tomllib.loads(f"value = {raw}")["value"]


def _navigate(value: typ.Any, steps: cabc.Sequence[Step]) -> typ.Any:
    for step in steps:
        match step, value:
            case str(), dict() if step in value:
                value = value[step]
            case int(), list() if step < len(value):
                value = value[step]
            case _:
                raise KeyError(step)
    return value


def _assign(container: typ.Any, steps: cabc.Sequence[Step], new: typ.Any) -> None:
    """Set ``new`` at ``steps`` below ``container``, creating missing tables."""
    target = container
    for step in steps[:-1]:
        match step, target:
            case str(), dict():
                target = target.setdefault(step, {})
            case int(), list() if step < len(target):
                target = target[step]
            case _:
                raise KeyError(step)
    leaf = steps[-1]
    match leaf, target:
        case str(), dict():
            target[leaf] = new
        case int(), list() if leaf < len(target):
            target[leaf] = new
        case int(), list() if leaf == len(target):
            target.append(new)
        case _:
            raise KeyError(leaf)


def locate_toml_value(text: str, path: KeyPath) -> Span | None:
    """Return the span that assigns ``path``, or ``None`` when absent."""
    document = scan_toml(text)
    entry = document.find_entry(path)
    if entry is not None:
        return entry.value
    table = document.find_table(path)
    if table is not None:
        return table.header
    enclosing = document.find_enclosing_entry(path)
    if enclosing is not None:
        return enclosing[0].value
    return None


def get_toml_value(data: bytes, path: KeyPath) -> typ.Any:
    """Return the native value stored at ``path``.

    Raises
    ------
    KeyNotFoundError
        If no value exists at ``path``.
    ConfigParseError
        If ``data`` is not valid TOML.
    """
    text = decode_text(data, ConfigFormat.TOML)
    document = scan_toml(text)
    entry = document.find_entry(path)
    if entry is not None:
        return decode_toml_value(text[entry.value.start : entry.value.end])
    steps: list[Step] = []
    for segment in path:
        steps.append(segment.name)
        if segment.index is not None:
            steps.append(segment.index)
    try:
        return _navigate(tomllib.loads(text), steps)
    except KeyError as exc:
        msg = f"Key {str(path)!r} not found."
        raise KeyNotFoundError(msg) from exc


def _header_text(path: KeyPath) -> str:
    return "[" + ".".join(format_toml_key(segment.name) for segment in path) + "]"


def _can_open_table(document: TomlDocument, path: KeyPath) -> bool:
    """A new header at end of file only reaches the last array-table element."""
    prefix = KeyPath()
    for segment in path:
        if segment.index is not None:
            indexes = [
                table.path[-1].index
                for table in document.tables
                if table.is_array
                and table.path[:-1] == prefix
                and table.path[-1].name == segment.name
            ]
            if not indexes or segment.index != max(indexes):
                return False
        prefix = prefix.child(segment.name, segment.index)
    return True


def plan_toml_edit(data: bytes, path: KeyPath, value: typ.Any) -> Edit:
    """Compute the minimal edit that stores ``value`` at ``path``.

    Parameters
    ----------
    data : bytes
        Source TOML document.
    path : KeyPath
        Fully-qualified key path, including the namespace segment.
    value : Any
        New value; must be representable in TOML.

    Returns
    -------
    Edit
        Replacement of an existing value span, or an insertion of a new
        ``key = value`` line or section.

    Raises
    ------
    InsertionPointError
        If ``path`` is empty or names an array element that does not exist.
    ConfigParseError
        If ``data`` is not valid TOML.
    EditError
        If ``value`` cannot be encoded.
    """
    if not path:
        msg = "Cannot set a value at an empty key path."
        raise InsertionPointError(msg)
    text = decode_text(data, ConfigFormat.TOML)
    document = scan_toml(text)
    newline = document.newline

    entry = document.find_entry(path)
    if entry is not None:
        encoded = encode_toml_value(value)
        return char_edit(text, entry.value.start, entry.value.end, encoded)

    enclosing = document.find_enclosing_entry(path)
    if enclosing is not None:
        owner, steps = enclosing
        current = decode_toml_value(text[owner.value.start : owner.value.end])
        updated = copy.deepcopy(current)
        try:
            _assign(updated, steps, value)
        except KeyError as exc:
            msg = f"Cannot resolve {str(path)!r} inside {str(owner.path)!r}."
            raise InsertionPointError(msg) from exc
        logger.debug("Rewriting inline value of %s to set %s", owner.path, path)
        return char_edit(
            text, owner.value.start, owner.value.end, encode_toml_value(updated)
        )

    if document.defines_by_header(path):
        msg = (
            f"Cannot replace {str(path)!r}: it is defined by table headers; "
            "set its keys individually."
        )
        raise InsertionPointError(msg)

    leaf = path.leaf
    if leaf.index is not None:
        msg = f"Cannot create array element {str(path)!r}."
        raise InsertionPointError(msg)
    line = f"{format_toml_key(leaf.name)} = {encode_toml_value(value)}"
    container = path.parent

    if not container:
        if document.root:
            anchor = document.root[-1].line_end
            return char_edit(text, anchor, anchor, newline + line)
        return Edit(0, 0, line + newline)

    table = document.find_table(container)
    if table is not None:
        anchor = table.entries[-1].line_end if table.entries else table.line_end
        return char_edit(text, anchor, anchor, newline + line)

    dotted = [
        (table_path, candidate)
        for table_path, candidate in document.owned_entries()
        if len(table_path) < len(container)
        and container.startswith(table_path)
        and len(candidate.path) > len(container)
        and candidate.path.startswith(container)
    ]
    if dotted:
        table_path, anchor_entry = dotted[-1]
        key_text = ".".join(
            format_toml_key(segment.name) for segment in path[len(table_path) :]
        )
        anchor = anchor_entry.line_end
        return char_edit(
            text, anchor, anchor, f"{newline}{key_text} = {encode_toml_value(value)}"
        )

    if not _can_open_table(document, container):
        msg = f"Cannot open a table for {str(container)!r}."
        raise InsertionPointError(msg)
    section = f"{_header_text(container)}{newline}{line}{newline}"
    end = len(data)
    if not text:
        return Edit(0, 0, section)
    if text.endswith("\n"):
        return Edit(end, end, newline + section)
    return Edit(end, end, newline + newline + section)


def set_toml_value(data: bytes, path: KeyPath, value: typ.Any) -> bytes:
    """Return ``data`` with ``value`` stored at ``path``."""
    return plan_toml_edit(data, path, value).apply(data)


__all__ = [
    "TomlDocument",
    "TomlEntry",
    "TomlTable",
    "decode_toml_value",
    "encode_toml_value",
    "format_toml_key",
    "get_toml_value",
    "locate_toml_value",
    "plan_toml_edit",
    "scan_toml",
    "set_toml_value",
]
