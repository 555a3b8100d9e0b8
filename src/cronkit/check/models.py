"""Diagnostic records produced by the checks."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .codes import DiagnosticCode
from .severity import Severity


@dataclass(frozen=True)
class Issue:
    """A single finding about an expression, a job or a job set.

    ``line_number`` is 0 and ``expression`` is empty when not applicable.
    """

    severity: Severity
    code: DiagnosticCode
    message: str
    hint: str = ""
    line_number: int = 0
    expression: str = ""

    @classmethod
    def for_code(
        cls,
        code: DiagnosticCode,
        message: str,
        *,
        expression: str = "",
        line_number: int = 0,
        hint: str | None = None,
    ) -> Issue:
        """Build an issue using the code's default severity and hint."""
        return cls(
            severity=code.severity,
            code=code,
            message=message,
            hint=code.hint if hint is None else hint,
            line_number=line_number,
            expression=expression,
        )

    def with_location(self, line_number: int, expression: str | None = None) -> Issue:
        """Return a copy stamped with a line number (and optionally an expression)."""
        if expression is None:
            return dataclasses.replace(self, line_number=line_number)
        return dataclasses.replace(self, line_number=line_number, expression=expression)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {
            "severity": str(self.severity),
            "code": str(self.code),
            "lineNumber": self.line_number,
            "expression": self.expression,
            "message": self.message,
        }
        if self.hint:
            data["hint"] = self.hint
        return data


@dataclass
class ValidationResult:
    """Outcome of validating an expression, a crontab or a set of jobs."""

    valid: bool = True
    issues: list[Issue] = field(default_factory=list)
    total_jobs: int = 0
    valid_jobs: int = 0
    invalid_jobs: int = 0

    def add_issue(self, issue: Issue) -> None:
        """Append an issue; an error-level issue makes the result invalid."""
        self.issues.append(issue)
        if issue.severity.is_error:
            self.valid = False

    def extend(self, issues: list[Issue]) -> None:
        for issue in issues:
            self.add_issue(issue)

    def shown_issues(self, verbose: bool = True) -> list[Issue]:
        """Issues to display; info-level issues only when verbose."""
        if verbose:
            return list(self.issues)
        return [issue for issue in self.issues if not issue.severity.is_info]

    def highest_severity(self, verbose: bool = True) -> Severity | None:
        """Highest severity among shown issues, or None when there are none."""
        issues = self.shown_issues(verbose)
        if not issues:
            return None
        return max(issue.severity for issue in issues)

    def exit_code(self, fail_on: Severity = Severity.ERROR, verbose: bool = True) -> int:
        """Process exit status for this result.

        Returns:
            0 when no shown issue reaches ``fail_on``, 1 when the highest
            shown severity is ERROR, 2 when it is WARN or INFO.
        """
        highest = self.highest_severity(verbose)
        if highest is None or highest < fail_on:
            return 0
        if highest is Severity.ERROR:
            return 1
        return 2

    def to_dict(self, verbose: bool = True) -> dict[str, Any]:
        """Convert to dictionary, using the shown issues only."""
        issues = self.shown_issues(verbose)
        return {
            "valid": self.valid and not issues,
            "totalJobs": self.total_jobs,
            "validJobs": self.valid_jobs,
            "invalidJobs": self.invalid_jobs,
            "issues": [issue.to_dict() for issue in issues],
        }


@dataclass
class Overlap:
    """Minute at which two or more distinct jobs are projected to run."""

    time: datetime
    count: int
    job_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "time": self.time.isoformat(),
            "count": self.count,
            "jobIds": list(self.job_ids),
        }


@dataclass
class OverlapStats:
    """Summary over every overlap in an analysis window."""

    total_windows: int = 0
    max_concurrent: int = 0
    most_problematic: list[Overlap] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "totalWindows": self.total_windows,
            "maxConcurrent": self.max_concurrent,
            "mostProblematic": [overlap.to_dict() for overlap in self.most_problematic],
        }
