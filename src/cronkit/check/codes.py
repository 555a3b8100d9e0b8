"""Stable diagnostic codes with their default severity and hint."""

from __future__ import annotations

from enum import Enum

from .severity import Severity


class DiagnosticCode(str, Enum):
    """Namespaced identifier for one category of issue."""

    DOM_DOW_CONFLICT = "CRON-001"
    EMPTY_SCHEDULE = "CRON-002"
    PARSE_ERROR = "CRON-003"
    FILE_READ_ERROR = "CRON-004"
    INVALID_STRUCTURE = "CRON-005"
    REDUNDANT_PATTERN = "CRON-006"
    EXCESSIVE_RUNS = "CRON-007"
    MISSING_ABSOLUTE_PATH = "CRON-008"
    MISSING_REDIRECTION = "CRON-009"
    PERCENT_CHARACTER = "CRON-010"
    QUOTING_ISSUE = "CRON-011"
    OVERLAP_DETECTED = "CRON-012"

    def __str__(self) -> str:
        return self.value

    @property
    def severity(self) -> Severity:
        """Default severity for issues carrying this code."""
        return _SEVERITIES[self]

    @property
    def hint(self) -> str:
        """Fix suggestion shown alongside issues carrying this code."""
        return _HINTS[self]


_SEVERITIES: dict[DiagnosticCode, Severity] = {
    DiagnosticCode.DOM_DOW_CONFLICT: Severity.WARN,
    DiagnosticCode.EMPTY_SCHEDULE: Severity.ERROR,
    DiagnosticCode.PARSE_ERROR: Severity.ERROR,
    DiagnosticCode.FILE_READ_ERROR: Severity.ERROR,
    DiagnosticCode.INVALID_STRUCTURE: Severity.ERROR,
    DiagnosticCode.REDUNDANT_PATTERN: Severity.WARN,
    DiagnosticCode.EXCESSIVE_RUNS: Severity.WARN,
    DiagnosticCode.MISSING_ABSOLUTE_PATH: Severity.INFO,
    DiagnosticCode.MISSING_REDIRECTION: Severity.INFO,
    DiagnosticCode.PERCENT_CHARACTER: Severity.WARN,
    DiagnosticCode.QUOTING_ISSUE: Severity.WARN,
    DiagnosticCode.OVERLAP_DETECTED: Severity.WARN,
}

_HINTS: dict[DiagnosticCode, str] = {
    DiagnosticCode.DOM_DOW_CONFLICT: (
        "Consider using only day-of-month OR day-of-week, not both. "
        "Cron uses OR logic (runs if either condition is met)."
    ),
    DiagnosticCode.EMPTY_SCHEDULE: (
        "This expression never runs. "
        "Check for conflicting constraints or impossible date combinations."
    ),
    DiagnosticCode.PARSE_ERROR: (
        "Fix the syntax error in the cron expression. "
        "Ensure all 5 fields are present and valid."
    ),
    DiagnosticCode.FILE_READ_ERROR: (
        "Check that the file exists and is readable. Verify file permissions."
    ),
    DiagnosticCode.INVALID_STRUCTURE: (
        "Ensure the crontab file follows the correct format with valid cron expressions."
    ),
    DiagnosticCode.REDUNDANT_PATTERN: (
        "Use '*' instead of '*/1' for better readability. They are functionally equivalent."
    ),
    DiagnosticCode.EXCESSIVE_RUNS: (
        "This schedule runs very frequently. "
        "Consider if this is necessary, as it may impact system resources."
    ),
    DiagnosticCode.MISSING_ABSOLUTE_PATH: (
        "Consider using absolute paths for commands to avoid PATH-related issues. "
        "Example: /usr/bin/command instead of command"
    ),
    DiagnosticCode.MISSING_REDIRECTION: (
        "Consider redirecting stdout and stderr to log files to capture output and errors. "
        "Example: command > /var/log/command.log 2>&1"
    ),
    DiagnosticCode.PERCENT_CHARACTER: (
        "The '%' character in cron commands is interpreted as a newline. "
        "Escape it as '\\%' if you need a literal % character."
    ),
    DiagnosticCode.QUOTING_ISSUE: (
        "Check that all quotes are properly closed and escaped. "
        "Use single quotes for literal strings, double quotes for variable expansion."
    ),
    DiagnosticCode.OVERLAP_DETECTED: (
        "Multiple jobs are scheduled to run at the same time. "
        "This may cause resource contention. Consider adjusting schedules to distribute load."
    ),
}
