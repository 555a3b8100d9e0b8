"""Error classification for Cronkit."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Classification of failures raised while analysing schedules."""

    EMPTY = "empty"
    FIELD_COUNT = "field_count"
    OUT_OF_RANGE = "out_of_range"
    UNKNOWN_ALIAS = "unknown_alias"
    UNRESOLVED_VALUE = "unresolved_value"
    SYNTAX = "syntax"
    SOURCE_READ = "source_read"


@dataclass
class CronkitError(Exception):
    """Base error with classification and context."""

    message: str
    kind: ErrorKind = ErrorKind.SYNTAX
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class ExpressionParseError(CronkitError):
    """A cron expression failed grammar or range validation."""

    pass


@dataclass
class SourceReadError(CronkitError):
    """A crontab file, stream or the user crontab could not be read."""

    kind: ErrorKind = ErrorKind.SOURCE_READ
