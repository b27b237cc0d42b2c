"""Byte-range edits and the errors shared by the structural editors."""

from __future__ import annotations

import dataclasses as dc

from ..formats import ConfigFormat, ConfigParseError


class EditError(ValueError):
    """Base class for structural edit failures."""


class KeyNotFoundError(EditError, LookupError):
    """Raised by ``get`` when the key path does not exist in the document."""


class InsertionPointError(EditError):
    """Raised by ``set`` when no container can receive the new key."""


@dc.dataclass(frozen=True, slots=True)
class Edit:
    """Replace ``buffer[start:end]`` with ``text`` (UTF-8 encoded).

    ``start == end`` is a pure insertion.

    Examples
    --------
    >>> Edit(6, 11, "there").apply(b"hello world")
    b'hello there'
    >>> Edit(5, 5, ",").apply(b"hello world")
    b'hello, world'
    """

    start: int
    end: int
    text: str

    @property
    def is_insertion(self) -> bool:
        """Return ``True`` when the edit removes nothing."""
        return self.start == self.end

    def apply(self, buffer: bytes) -> bytes:
        """Return a new buffer with the edit applied.

        Raises
        ------
        EditError
            If the byte range does not satisfy
            ``0 <= start <= end <= len(buffer)``.
        """
        if not 0 <= self.start <= self.end <= len(buffer):
            msg = (
                f"Edit range {self.start}:{self.end} is outside a "
                f"{len(buffer)}-byte buffer."
            )
            raise EditError(msg)
        return buffer[: self.start] + self.text.encode("utf-8") + buffer[self.end :]


@dc.dataclass(frozen=True, slots=True)
class Span:
    """Character offsets of a value inside decoded text."""

    start: int
    end: int


def char_edit(text: str, start: int, end: int, replacement: str) -> Edit:
    """Build a byte-offset :class:`Edit` from character offsets into ``text``."""
    byte_start = len(text[:start].encode("utf-8"))
    byte_end = byte_start + len(text[start:end].encode("utf-8"))
    return Edit(byte_start, byte_end, replacement)


def decode_text(data: bytes, fmt: ConfigFormat) -> str:
    """Decode UTF-8 ``data``, reporting bad bytes as a ``fmt`` parse error."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigParseError(fmt, exc) from exc


def line_column(text: str, offset: int) -> tuple[int, int]:
    """Return the 1-based line and column of a character offset.

    Examples
    --------
    >>> line_column("a = 1\\nb = 2\\n", 10)
    (2, 5)
    """
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


__all__ = [
    "Edit",
    "EditError",
    "InsertionPointError",
    "KeyNotFoundError",
    "Span",
    "char_edit",
    "decode_text",
    "line_column",
]
