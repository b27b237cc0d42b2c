"""Validation records, their terminal rendering, and batch reporting."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

SEPARATOR = "-" * 60


class Severity(enum.StrEnum):
    """How serious a validation finding is.

    Errors mean the configuration cannot safely drive a build; warnings flag
    a degraded but usable configuration.
    """

    ERROR = "error"
    WARNING = "warning"


@dc.dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One validation finding.

    ``field`` is the machine-stable key path of the offending value. The
    location attributes are only populated by the position-aware validator;
    ``line`` and ``column`` are 1-based and ``0`` when unknown.
    """

    field: str
    message: str
    severity: Severity = Severity.ERROR
    value: str = ""
    file: str = ""
    line: int = 0
    column: int = 0
    context: tuple[str, ...] = ()
    fix: str = ""

    @property
    def is_warning(self) -> bool:
        """Return ``True`` for warnings."""
        return self.severity is Severity.WARNING

    def _location(self) -> str:
        if self.file and self.line > 0 and self.column > 0:
            return f" in {self.file}:{self.line}:{self.column}"
        if self.file and self.line > 0:
            return f" in {self.file}:{self.line}"
        if self.file:
            return f" in {self.file}"
        return ""

    def format(self) -> str:
        """Render the issue for terminal display.

        The output holds a header naming the location, the surrounding source
        lines when known, the field and message, and an optional fix.

        Examples
        --------
        >>> issue = ValidationIssue("concurrency", "must be >= 0", fix="concurrency = 0")
        >>> print(issue.format())
        Error: configuration error
        <BLANKLINE>
        concurrency: must be >= 0
        <BLANKLINE>
        Fix: concurrency = 0
        <BLANKLINE>
        """
        prefix = "Warning" if self.is_warning else "Error"
        parts = [f"{prefix}: configuration error{self._location()}\n"]
        if self.context:
            parts.append("\n")
            parts.extend(f"{line}\n" for line in self.context)
        parts.append(f"\n{self.field}: {self.message}\n")
        if self.fix:
            parts.append(f"\nFix: {self.fix}\n")
        return "".join(parts)

    def short(self) -> str:
        """Render the issue on a single line.

        Examples
        --------
        >>> ValidationIssue("url", "URL must include a host", file="a.toml", line=2).short()
        'a.toml:2: config error: url: URL must include a host'
        """
        kind = self.severity.value
        if self.file and self.line > 0:
            return (
                f"{self.file}:{self.line}: config {kind}: {self.field}: {self.message}"
            )
        return f"config {kind}: {self.field}: {self.message}"

    def __str__(self) -> str:
        """Return the single-line form."""
        return self.short()


class ConfigValidationError(ValueError):
    """Raised when a validated configuration contains errors.

    Attributes
    ----------
    issues : tuple[ValidationIssue, ...]
        Every finding, warnings included, in report order.
    """

    def __init__(self, issues: typ.Sequence[ValidationIssue]) -> None:
        self.issues = tuple(issues)
        super().__init__(format_issues(self.issues))


def format_issues(issues: typ.Sequence[ValidationIssue]) -> str:
    """Render several issues as one block separated by dashed rules."""
    if not issues:
        return ""
    if len(issues) == 1:
        return issues[0].format()
    blocks = [f"configuration validation failed with {len(issues)} issues:\n\n"]
    for index, issue in enumerate(issues):
        if index:
            blocks.append(f"\n{SEPARATOR}\n\n")
        blocks.append(issue.format())
    return "".join(blocks)


@dc.dataclass(slots=True)
class ValidationReport:
    """Ordered collection of validation findings."""

    issues: list[ValidationIssue] = dc.field(default_factory=list)

    def add(self, issue: ValidationIssue) -> None:
        self.issues.append(issue)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if not issue.is_warning]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.is_warning]

    @property
    def has_errors(self) -> bool:
        return any(not issue.is_warning for issue in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(issue.is_warning for issue in self.issues)

    def sorted(self) -> ValidationReport:
        """Return a copy with errors first, keeping discovery order per group."""
        return ValidationReport([*self.errors, *self.warnings])

    def format(self) -> str:
        """Render all findings for terminal display."""
        return format_issues(self.issues)

    def raise_for_errors(self) -> None:
        """Raise :class:`ConfigValidationError` when any finding is an error."""
        if self.has_errors:
            raise ConfigValidationError(self.issues)

    def __len__(self) -> int:
        return len(self.issues)

    def __iter__(self) -> typ.Iterator[ValidationIssue]:
        return iter(self.issues)

    def __bool__(self) -> bool:
        return bool(self.issues)


__all__ = [
    "SEPARATOR",
    "ConfigValidationError",
    "Severity",
    "ValidationIssue",
    "ValidationReport",
    "format_issues",
]
