"""Unit tests for configuration validation and issue rendering."""

from __future__ import annotations

import pytest

from markata_config.config.models import (
    FeedConfig,
    FeedDefaults,
    FeedFormats,
    SiteConfig,
    default_config,
)
from markata_config.validation import (
    ConfigValidationError,
    PositionTracker,
    Severity,
    ValidationIssue,
    ValidationReport,
    fix_suggestion,
    validate,
    validate_with_positions,
)


def _with_url(url: str) -> SiteConfig:
    config = default_config()
    config.url = url
    return config


def test_defaults_are_valid() -> None:
    """The documented defaults produce no findings."""
    assert len(validate(default_config())) == 0


def test_url_without_scheme_has_fix() -> None:
    """A bare host is one error with an https suggestion."""
    source = b'[markata-go]\nurl = "example.com"\n'
    tracker = PositionTracker(source, "markata-go.toml")

    report = validate_with_positions(_with_url("example.com"), tracker)

    assert [issue.field for issue in report] == ["url"]
    (issue,) = report
    assert issue.severity is Severity.ERROR
    assert "scheme" in issue.message, issue.message
    assert issue.fix == 'url = "https://example.com"'
    assert (issue.line, issue.column) == (2, 7), "position of the value"
    assert '>    2 | url = "example.com"' in issue.context, issue.context


@pytest.mark.parametrize(
    ("url", "message", "fix"),
    [
        (
            "ftp://example.com",
            'URL scheme must be http or https, got "ftp"',
            'url = "https://example.com"',
        ),
        ("https://", "URL must include a host", 'url = "https://example.com"'),
        ("http://[::1", "invalid URL format", 'url = "https://http://[::1"'),
    ],
)
def test_url_checks_report_first_failure(url: str, message: str, fix: str) -> None:
    """Each URL problem yields a single error with its own fix."""
    report = validate_with_positions(_with_url(url), None)

    assert len(report) == 1, [str(issue) for issue in report]
    assert report.errors[0].message.startswith(message), report.errors[0].message
    assert report.errors[0].fix == fix


def test_valid_url_and_empty_url_pass() -> None:
    """An http(s) URL with a host, or no URL at all, is accepted."""
    assert not validate(_with_url("https://notes.example/blog"))
    assert not validate(_with_url(""))


def test_negative_numbers_are_errors() -> None:
    """Negative concurrency and pagination settings are rejected."""
    config = default_config()
    config.concurrency = -2
    config.feed_defaults.orphan_threshold = -1
    config.feeds = [FeedConfig(slug="blog", items_per_page=-5)]

    report = validate_with_positions(config, None)

    assert [issue.field for issue in report] == [
        "concurrency",
        "feeds[0].items_per_page",
        "feeds[0].orphan_threshold",
        "feed_defaults.orphan_threshold",
    ]
    assert report.errors[0].message == "must be >= 0 (0 means auto-detect)"
    assert report.errors[1].fix == "items_per_page = 0"
    assert report.errors[1].value == "-5"


def test_feed_without_output_formats_warns() -> None:
    """A feed rendering nothing is a warning, not an error."""
    config = SiteConfig(glob=default_config().glob)
    config.feeds = [FeedConfig(slug="blog", formats=FeedFormats())]

    report = validate(config)

    assert not report.has_errors, [str(issue) for issue in report]
    assert [issue.field for issue in report.warnings] == ["feeds[0].formats"]


def test_explicitly_disabled_formats_are_not_inherited() -> None:
    """Flags set to false stay false even when the defaults enable them."""
    config = default_config()
    config.feeds = [
        FeedConfig(slug="", formats=FeedFormats(html=False, rss=False)),
        FeedConfig(slug="tags", formats=FeedFormats()),
    ]

    report = validate(config)

    assert [issue.field for issue in report] == ["feeds[0].formats"]


def test_sitemap_alone_does_not_count_as_output() -> None:
    """A sitemap-only feed still renders no pages."""
    config = SiteConfig(glob=default_config().glob)
    config.feed_defaults = FeedDefaults(formats=FeedFormats(sitemap=True))
    config.feeds = [FeedConfig(slug="blog")]

    assert [issue.field for issue in validate(config)] == ["feeds[0].formats"]


def test_errors_are_listed_before_warnings() -> None:
    """Warnings found first still follow every error."""
    config = default_config()
    config.glob.patterns = []
    config.concurrency = -1
    config.url = "example.com"

    report = validate(config)

    assert [(issue.field, issue.severity) for issue in report] == [
        ("url", Severity.ERROR),
        ("concurrency", Severity.ERROR),
        ("glob.patterns", Severity.WARNING),
    ]
    assert report.has_warnings


def test_missing_config_is_reported() -> None:
    """Validating nothing reports the missing configuration."""
    assert validate(None).issues == [ValidationIssue("config", "config is nil")]
    assert validate_with_positions(None, None).issues[0].message == (
        "configuration is nil"
    )


def test_short_and_full_rendering() -> None:
    """Issues render on one line or as a block with context and fix."""
    issue = ValidationIssue(
        "url",
        "URL must include a host",
        file="markata-go.toml",
        line=2,
        column=7,
        context=('>    2 | url = "https://"',),
        fix='url = "https://example.com"',
    )

    assert str(issue) == "markata-go.toml:2: config error: url: URL must include a host"
    assert issue.format() == (
        "Error: configuration error in markata-go.toml:2:7\n"
        "\n"
        '>    2 | url = "https://"\n'
        "\n"
        "url: URL must include a host\n"
        "\n"
        'Fix: url = "https://example.com"\n'
    )
    warning = ValidationIssue("glob.patterns", "empty", Severity.WARNING)
    assert warning.short() == "config warning: glob.patterns: empty"
    assert warning.format().startswith("Warning: configuration error\n")


def test_report_format_and_raise() -> None:
    """Several issues render with a count and separators."""
    report = ValidationReport(
        [ValidationIssue("a", "bad"), ValidationIssue("b", "worse")]
    )

    rendered = report.format()

    assert rendered.startswith("configuration validation failed with 2 issues:\n\n")
    assert "\n" + "-" * 60 + "\n\n" in rendered
    with pytest.raises(ConfigValidationError) as excinfo:
        report.raise_for_errors()
    assert len(excinfo.value.issues) == 2


def test_warnings_alone_do_not_raise() -> None:
    """Only errors make a report raise."""
    report = ValidationReport([ValidationIssue("x", "meh", Severity.WARNING)])

    report.raise_for_errors()


def test_fix_suggestion_unknown_kind() -> None:
    """Unknown categories have no suggestion."""
    assert fix_suggestion("unknown") == ""
    assert fix_suggestion("url_invalid_scheme", "url", "ftp://x.dev") == (
        'url = "https://x.dev"'
    )


@pytest.mark.parametrize(
    "url", [" https://notes.example", "https://notes.example ", "https://x.dev/\t"]
)
def test_url_with_stray_whitespace_is_invalid(url: str) -> None:
    """Leading or trailing blanks make the URL unparseable."""
    report = validate(_with_url(url))

    assert [issue.field for issue in report.errors] == ["url"]
    assert report.errors[0].message.startswith("invalid URL format")
