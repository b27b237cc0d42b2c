"""Validation of resolved configuration with source-position diagnostics."""

from .issues import (
    ConfigValidationError,
    Severity,
    ValidationIssue,
    ValidationReport,
    format_issues,
)
from .positions import UNKNOWN_POSITION, FieldPosition, PositionTracker
from .validator import fix_suggestion, validate, validate_with_positions

__all__ = [
    "UNKNOWN_POSITION",
    "ConfigValidationError",
    "FieldPosition",
    "PositionTracker",
    "Severity",
    "ValidationIssue",
    "ValidationReport",
    "fix_suggestion",
    "format_issues",
    "validate",
    "validate_with_positions",
]
