"""Crontab records consumed by the validator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EntryType(str, Enum):
    """Kind of line in a crontab."""

    JOB = "job"
    COMMENT = "comment"
    ENV_VAR = "env_var"
    EMPTY = "empty"
    INVALID = "invalid"


@dataclass
class Job:
    """A single scheduled job from a crontab."""

    line_number: int
    expression: str
    command: str = ""
    comment: str = ""
    valid: bool = True
    error: str = ""

    @property
    def job_id(self) -> str:
        """Stable identifier: ``line-N``, or the expression when there is no line.

        Two line-less jobs with the same expression therefore share an id and
        are treated as one job by overlap analysis.
        """
        if self.line_number == 0:
            return self.expression
        return f"line-{self.line_number}"


@dataclass
class Entry:
    """Any line of a crontab; ``job`` is set only for JOB entries."""

    type: EntryType
    line_number: int
    raw: str = ""
    job: Job | None = None
