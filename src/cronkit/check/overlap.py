"""Detection of minutes where several jobs are scheduled together."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from cronkit.errors import ExpressionParseError

from .models import Overlap, OverlapStats

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cronkit.crontab import Job
    from cronkit.cronx import Scheduler

logger = logging.getLogger(__name__)

DEFAULT_OVERLAP_WINDOW = timedelta(hours=24)
MOST_PROBLEMATIC_LIMIT = 10

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def truncate_to_minute(instant: datetime) -> datetime:
    return instant.replace(second=0, microsecond=0)


class OverlapAnalyzer:
    """Projects every job over a window and groups runs by minute."""

    def __init__(self, oracle: Scheduler, clock: Clock = utc_now) -> None:
        """Initialize the analyzer.

        Args:
            oracle: Source of projected fire times.
            clock: Returns "now"; the window starts at its minute.
        """
        self._oracle = oracle
        self._clock = clock

    def analyze(
        self,
        jobs: Iterable[Job],
        window: timedelta = DEFAULT_OVERLAP_WINDOW,
    ) -> tuple[list[Overlap], OverlapStats]:
        """Find overlaps among valid jobs.

        Jobs are keyed by ``Job.job_id``, so identical line-less jobs count once.

        Args:
            jobs: Jobs to project; invalid ones are ignored.
            window: Length of the projection window starting now.

        Returns:
            Overlaps sorted by time, and stats whose ``most_problematic``
            holds the top overlaps by count (earliest first on ties).
        """
        start = truncate_to_minute(self._clock())
        end = start + window
        limit = int(window.total_seconds() // 60) + 1

        # minute -> job ids, in first-seen order
        runs: dict[datetime, dict[str, None]] = {}
        for job in jobs:
            if not job.valid:
                continue
            try:
                times = self._oracle.next(job.expression, start, limit, until=end)
            except ExpressionParseError as e:
                logger.warning(f"Skipping job {job.job_id} in overlap analysis: {e}")
                continue

            for fire_time in times:
                if fire_time >= end:
                    break
                if fire_time >= start:
                    runs.setdefault(truncate_to_minute(fire_time), {})[job.job_id] = None

        overlaps = [
            Overlap(time=minute, count=len(job_ids), job_ids=list(job_ids))
            for minute, job_ids in sorted(runs.items())
            if len(job_ids) > 1
        ]

        ranked = sorted(overlaps, key=lambda overlap: (-overlap.count, overlap.time))
        stats = OverlapStats(
            total_windows=len(overlaps),
            max_concurrent=ranked[0].count if ranked else 0,
            most_problematic=ranked[:MOST_PROBLEMATIC_LIMIT],
        )

        logger.debug(
            f"Overlap analysis found {stats.total_windows} windows, "
            f"max {stats.max_concurrent} concurrent"
        )
        return overlaps, stats
