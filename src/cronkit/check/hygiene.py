"""Heuristic checks on the command part of a crontab job."""

from __future__ import annotations

from .codes import DiagnosticCode
from .models import Issue

ABSOLUTE_PATH_PREFIXES = ("/usr/bin/", "/bin/", "/sbin/", "/usr/local/bin/", "/opt/")
REDIRECTION_OPERATORS = (">", ">>", "2>", "&>", "2>>")


def uses_absolute_path(command: str) -> bool:
    trimmed = command.strip()
    if not trimmed:
        return False
    if trimmed.startswith("/"):
        return True
    return any(token.startswith(ABSOLUTE_PATH_PREFIXES) for token in trimmed.split())


def redirects_output(command: str) -> bool:
    return any(operator in command for operator in REDIRECTION_OPERATORS)


def has_percent(command: str) -> bool:
    return "%" in command


class CommandHygieneChecker:
    """Stateless checks for common crontab command mistakes.

    Issues are produced without a location; the validator stamps the job's
    line number and expression onto them.
    """

    def analyze(self, command: str) -> list[Issue]:
        """Return hygiene issues for ``command`` in check order."""
        issues: list[Issue] = []

        if not uses_absolute_path(command):
            issues.append(
                Issue.for_code(
                    DiagnosticCode.MISSING_ABSOLUTE_PATH, "Command may not use absolute path"
                )
            )

        if not redirects_output(command):
            issues.append(
                Issue.for_code(
                    DiagnosticCode.MISSING_REDIRECTION, "Command may not redirect stdout/stderr"
                )
            )

        if has_percent(command):
            issues.append(
                Issue.for_code(
                    DiagnosticCode.PERCENT_CHARACTER,
                    "Command contains '%' character (cron interprets % as newline)",
                )
            )

        # parity only; escaped quotes are counted too
        if command.count("'") % 2:
            issues.append(
                Issue.for_code(
                    DiagnosticCode.QUOTING_ISSUE, "Command contains unclosed single quotes"
                )
            )
        if command.count('"') % 2:
            issues.append(
                Issue.for_code(
                    DiagnosticCode.QUOTING_ISSUE, "Command contains unclosed double quotes"
                )
            )

        return issues
