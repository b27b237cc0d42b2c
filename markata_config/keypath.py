"""Dotted key paths addressing fields inside a configuration document.

A key path such as ``feeds[0].formats.html`` is an ordered sequence of
segments. Each segment carries a name and an optional array index. Paths are
case-sensitive and their external string form is dot-delimited.

Examples
--------
>>> from markata_config.keypath import parse_key_path
>>> path = parse_key_path("feeds[0].formats.html")
>>> [segment.name for segment in path]
['feeds', 'formats', 'html']
>>> path[0].index
0
>>> str(path)
'feeds[0].formats.html'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import re
import typing as typ

from ._constants import NAMESPACE_KEY

_SEGMENT_RE = re.compile(r"^(?P<name>[^\[\]]+)(?:\[(?P<index>[^\]]*)\])?$")


class KeyPathError(ValueError):
    """Raised when a key path string cannot be parsed."""


@dc.dataclass(frozen=True, slots=True)
class KeySegment:
    """One step of a key path: a mapping key with an optional array index."""

    name: str
    index: int | None = None

    def __str__(self) -> str:
        """Render the segment in ``name[index]`` form."""
        if self.index is None:
            return self.name
        return f"{self.name}[{self.index}]"


@dc.dataclass(frozen=True, slots=True)
class KeyPath(cabc.Sequence[KeySegment]):
    """Immutable ordered sequence of :class:`KeySegment` values."""

    segments: tuple[KeySegment, ...] = ()

    @typ.overload
    def __getitem__(self, item: int) -> KeySegment: ...

    @typ.overload
    def __getitem__(self, item: slice) -> KeyPath: ...

    def __getitem__(self, item: int | slice) -> KeySegment | KeyPath:
        """Return a segment, or a sub-path when sliced."""
        if isinstance(item, slice):
            return KeyPath(self.segments[item])
        return self.segments[item]

    def __len__(self) -> int:
        """Return the number of segments."""
        return len(self.segments)

    def __str__(self) -> str:
        """Render the dotted external form."""
        return ".".join(str(segment) for segment in self.segments)

    @property
    def leaf(self) -> KeySegment:
        """Return the final segment."""
        if not self.segments:
            msg = "Empty key path has no leaf segment."
            raise KeyPathError(msg)
        return self.segments[-1]

    @property
    def parent(self) -> KeyPath:
        """Return the path without its final segment."""
        return KeyPath(self.segments[:-1])

    def child(self, name: str, index: int | None = None) -> KeyPath:
        """Return a new path extended by one segment."""
        return KeyPath((*self.segments, KeySegment(name, index)))

    def startswith(self, prefix: KeyPath) -> bool:
        """Return ``True`` when ``prefix`` matches the leading segments."""
        return self.segments[: len(prefix)] == prefix.segments


def _parse_segment(raw: str, text: str) -> KeySegment:
    match = _SEGMENT_RE.match(raw.strip())
    if match is None:
        msg = f"Invalid key path segment {raw!r} in {text!r}."
        raise KeyPathError(msg)
    index_text = match.group("index")
    if index_text is None:
        return KeySegment(match.group("name"))
    if not index_text.isascii() or not index_text.isdigit():
        msg = f"Invalid array index {index_text!r} in key path {text!r}."
        raise KeyPathError(msg)
    return KeySegment(match.group("name"), int(index_text))


def parse_key_path(text: str) -> KeyPath:
    """Parse the dotted external form of a key path.

    Parameters
    ----------
    text : str
        Dot-delimited path where any segment may carry an ``[N]`` suffix, for
        example ``feeds[0].items_per_page``.

    Returns
    -------
    KeyPath
        The parsed path. An empty string yields an empty path.

    Raises
    ------
    KeyPathError
        If a segment is empty or its index is not a non-negative integer.

    Examples
    --------
    >>> parse_key_path("theme.palette").leaf.name
    'palette'
    """
    if not text:
        return KeyPath()
    return KeyPath(tuple(_parse_segment(raw, text) for raw in text.split(".")))


def normalize_config_path(key: str | KeyPath) -> KeyPath:
    """Prefix ``key`` with the namespace segment unless it already has one.

    The namespace comparison ignores case so ``Markata-Go.title`` is treated
    as already namespaced.

    Examples
    --------
    >>> str(normalize_config_path("theme.palette"))
    'markata-go.theme.palette'
    >>> str(normalize_config_path("markata-go.title"))
    'markata-go.title'
    """
    path = key if isinstance(key, KeyPath) else parse_key_path(key)
    if path and path[0].index is None and path[0].name.lower() == NAMESPACE_KEY:
        return KeyPath((KeySegment(NAMESPACE_KEY), *path.segments[1:]))
    return KeyPath((KeySegment(NAMESPACE_KEY), *path.segments))


__all__ = [
    "KeyPath",
    "KeyPathError",
    "KeySegment",
    "normalize_config_path",
    "parse_key_path",
]
