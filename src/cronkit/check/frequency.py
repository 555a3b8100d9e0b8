"""Run-frequency analysis over a fixed reference day."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cronkit.cronx import Schedule, Scheduler

logger = logging.getLogger(__name__)

REFERENCE_DATE = datetime(2025, 1, 1, tzinfo=UTC)

# Worst case is one run per minute: 1440 per day, 60 per hour
MAX_RUNS_FOR_DAILY_CALCULATION = 2000
MAX_RUNS_FOR_HOURLY_CALCULATION = 100

REDUNDANT_STEP_SUFFIX = "/1"


class FrequencyAnalyzer:
    """Counts how often an expression fires in a day or an hour.

    Counting always starts at ``reference`` (midnight UTC on 2025-01-01 by
    default) so results do not depend on the wall clock.
    """

    def __init__(self, oracle: Scheduler, reference: datetime = REFERENCE_DATE) -> None:
        self._oracle = oracle
        self._reference = reference

    def _runs_in_window(self, expression: str, window: timedelta, limit: int) -> list[datetime]:
        start = self._reference
        end = start + window
        # the oracle returns times strictly after its start, so begin one second early
        times = self._oracle.next(expression, start - timedelta(seconds=1), limit, until=end)

        runs: list[datetime] = []
        for fire_time in times:
            if fire_time >= end:
                break
            if fire_time >= start:
                runs.append(fire_time)
        return runs

    def runs_on_reference_day(self, expression: str) -> list[datetime]:
        """Fire times in the 24 hours after the reference instant.

        Raises:
            ExpressionParseError: If the oracle rejects the expression.
        """
        return self._runs_in_window(expression, timedelta(days=1), MAX_RUNS_FOR_DAILY_CALCULATION)

    def runs_per_day(self, expression: str) -> int:
        """Number of runs in the 24 hours after the reference instant.

        Raises:
            ExpressionParseError: If the oracle rejects the expression.
        """
        return len(self.runs_on_reference_day(expression))

    def runs_per_hour(self, expression: str) -> int:
        """Number of runs in the first hour after the reference instant.

        Raises:
            ExpressionParseError: If the oracle rejects the expression.
        """
        return len(
            self._runs_in_window(expression, timedelta(hours=1), MAX_RUNS_FOR_HOURLY_CALCULATION)
        )

    def estimate(self, expression: str) -> tuple[int, int]:
        """Return ``(runs_per_day, runs_per_hour)``."""
        runs_per_day = self.runs_per_day(expression)
        runs_per_hour = self.runs_per_hour(expression)
        logger.debug(f"'{expression}' runs {runs_per_day}/day, {runs_per_hour}/hour")
        return runs_per_day, runs_per_hour


def detect_redundant_pattern(schedule: Schedule) -> bool:
    """True when any field is written with a step of exactly 1 (``*/1``, ``0-59/1``)."""
    return any(field.raw.endswith(REDUNDANT_STEP_SUFFIX) for field in schedule.fields)


def redundant_pattern_suggestion(expression: str) -> str:
    """Rewrite every ``/1``-stepped field of a five-field expression as ``*``.

    Expressions that are not exactly five whitespace-separated fields are
    returned unchanged.
    """
    parts = expression.split()
    if len(parts) != 5:
        return expression
    return " ".join("*" if part.endswith(REDUNDANT_STEP_SUFFIX) else part for part in parts)
