"""Semantic validation of a resolved :class:`SiteConfig`.

Checks run in a fixed order and report every finding; errors are listed
before warnings with discovery order kept inside each group. The
position-aware variant runs the same checks and decorates each finding with
its file position, surrounding source lines, and a suggested fix.

Examples
--------
>>> from markata_config.config.models import default_config
>>> config = default_config()
>>> config.url = "example.com"
>>> [issue.short() for issue in validate(config)]
['config error: url: URL must include a scheme (e.g., https://)']
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ
import urllib.parse

from .issues import Severity, ValidationIssue, ValidationReport

if typ.TYPE_CHECKING:
    from ..config.models import FeedFormats, SiteConfig
    from .positions import PositionTracker

CONTEXT_LINES = 2

# Sitemap entries alone do not make a feed produce output.
_OUTPUT_FORMATS = ("html", "rss", "atom", "json", "markdown", "text")


def _https(value: str) -> str:
    return f'url = "https://{value}"'


def _fix_invalid_scheme(_field: str, value: str) -> str:
    _, sep, rest = value.partition("://")
    return _https(rest if sep else value)


FIX_SUGGESTIONS: dict[str, cabc.Callable[[str, str], str]] = {
    "url_no_scheme": lambda _field, value: _https(value.removeprefix("//")),
    "url_invalid_scheme": _fix_invalid_scheme,
    "url_no_host": lambda _field, _value: 'url = "https://example.com"',
    "negative_value": lambda field, _value: f"{field} = 0",
    "empty_patterns": lambda _field, _value: 'patterns = ["**/*.md"]',
    "no_formats": lambda _field, _value: "[formats]\nhtml = true",
}


def fix_suggestion(kind: str, field: str = "", value: str = "") -> str:
    """Return the suggested fix for a failure category, or ``""``.

    Examples
    --------
    >>> fix_suggestion("url_no_scheme", "url", "example.com")
    'url = "https://example.com"'
    >>> fix_suggestion("negative_value", "concurrency")
    'concurrency = 0'
    """
    suggest = FIX_SUGGESTIONS.get(kind)
    return suggest(field, value) if suggest else ""


@dc.dataclass(frozen=True, slots=True)
class _Finding:
    field: str
    value: str
    message: str
    severity: Severity
    fix_kind: str
    fix_field: str = ""


def _check_url(raw: str) -> _Finding | None:
    """Return the first failing URL check, if any."""
    if raw != raw.strip() or any(not char.isprintable() for char in raw):
        return _Finding(
            "url",
            raw,
            "invalid URL format: surrounding whitespace or control character",
            Severity.ERROR,
            "url_no_scheme",
        )
    try:
        parts = urllib.parse.urlsplit(raw)
    except ValueError as exc:
        return _Finding(
            "url", raw, f"invalid URL format: {exc}", Severity.ERROR, "url_no_scheme"
        )
    if not parts.scheme:
        return _Finding(
            "url",
            raw,
            "URL must include a scheme (e.g., https://)",
            Severity.ERROR,
            "url_no_scheme",
        )
    if parts.scheme not in {"http", "https"}:
        return _Finding(
            "url",
            raw,
            f'URL scheme must be http or https, got "{parts.scheme}"',
            Severity.ERROR,
            "url_invalid_scheme",
        )
    if not parts.netloc:
        return _Finding(
            "url", raw, "URL must include a host", Severity.ERROR, "url_no_host"
        )
    return None


def _negative(field: str, value: int, leaf: str) -> _Finding:
    return _Finding(
        field, str(value), "must be >= 0", Severity.ERROR, "negative_value", leaf
    )


def _has_output_format(formats: FeedFormats) -> bool:
    return any(getattr(formats, name) for name in _OUTPUT_FORMATS)


def _findings(config: SiteConfig) -> cabc.Iterator[_Finding]:
    if config.url:
        url_finding = _check_url(config.url)
        if url_finding is not None:
            yield url_finding

    if config.concurrency < 0:
        yield _Finding(
            "concurrency",
            str(config.concurrency),
            "must be >= 0 (0 means auto-detect)",
            Severity.ERROR,
            "negative_value",
            "concurrency",
        )

    if not config.glob.patterns:
        yield _Finding(
            "glob.patterns",
            "[]",
            "no glob patterns specified, no files will be processed",
            Severity.WARNING,
            "empty_patterns",
        )

    # An empty slug is the home-page feed and is valid.
    for index, feed in enumerate(config.resolved_feeds()):
        prefix = f"feeds[{index}]"
        if feed.items_per_page < 0:
            yield _negative(
                f"{prefix}.items_per_page", feed.items_per_page, "items_per_page"
            )
        if feed.orphan_threshold < 0:
            yield _negative(
                f"{prefix}.orphan_threshold", feed.orphan_threshold, "orphan_threshold"
            )
        if not _has_output_format(feed.formats):
            yield _Finding(
                f"{prefix}.formats",
                "{}",
                "no output formats enabled, feed will not produce any output",
                Severity.WARNING,
                "no_formats",
            )

    defaults = config.feed_defaults
    if defaults.items_per_page < 0:
        yield _negative(
            "feed_defaults.items_per_page", defaults.items_per_page, "items_per_page"
        )
    if defaults.orphan_threshold < 0:
        yield _negative(
            "feed_defaults.orphan_threshold",
            defaults.orphan_threshold,
            "orphan_threshold",
        )


def validate(config: SiteConfig | None) -> ValidationReport:
    """Validate a resolved configuration.

    Parameters
    ----------
    config : SiteConfig or None
        Configuration after defaults, file, and environment are applied.

    Returns
    -------
    ValidationReport
        Errors first, then warnings. Empty when the configuration is valid.
    """
    if config is None:
        return ValidationReport([ValidationIssue("config", "config is nil")])
    report = ValidationReport(
        [
            ValidationIssue(
                finding.field, finding.message, finding.severity, finding.value
            )
            for finding in _findings(config)
        ]
    )
    return report.sorted()


def _positioned(finding: _Finding, tracker: PositionTracker | None) -> ValidationIssue:
    fix = fix_suggestion(finding.fix_kind, finding.fix_field, finding.value)
    if tracker is None:
        return ValidationIssue(
            finding.field, finding.message, finding.severity, finding.value, fix=fix
        )
    line, column = tracker.find(finding.field)
    context = tracker.extract_context(line, CONTEXT_LINES) if line > 0 else []
    return ValidationIssue(
        finding.field,
        finding.message,
        finding.severity,
        finding.value,
        file=tracker.file_path,
        line=line,
        column=column,
        context=tuple(context),
        fix=fix,
    )


def validate_with_positions(
    config: SiteConfig | None, tracker: PositionTracker | None
) -> ValidationReport:
    """Validate ``config`` and attach positions, context, and fixes.

    Parameters
    ----------
    config : SiteConfig or None
        Configuration to check.
    tracker : PositionTracker or None
        Tracker for the file the configuration was loaded from. Without one
        the findings carry fixes but no location.

    Returns
    -------
    ValidationReport
        The same findings as :func:`validate`, in the same order.
    """
    if config is None:
        return ValidationReport([ValidationIssue("config", "configuration is nil")])
    report = ValidationReport(
        [_positioned(finding, tracker) for finding in _findings(config)]
    )
    return report.sorted()


__all__ = [
    "CONTEXT_LINES",
    "FIX_SUGGESTIONS",
    "fix_suggestion",
    "validate",
    "validate_with_positions",
]
