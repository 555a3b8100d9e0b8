"""Frequency statistics over a whole crontab."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cronkit.errors import ExpressionParseError

from .frequency import REFERENCE_DATE, FrequencyAnalyzer
from .overlap import truncate_to_minute

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from cronkit.crontab import Job
    from cronkit.cronx import Scheduler

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 5
MINUTES_PER_DAY = 24 * 60


@dataclass
class JobFrequency:
    """How often one job runs on the reference day."""

    job_id: str
    expression: str
    runs_per_day: int
    runs_per_hour: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "jobId": self.job_id,
            "expression": self.expression,
            "runsPerDay": self.runs_per_day,
            "runsPerHour": self.runs_per_hour,
        }


@dataclass
class HourCount:
    """Runs and distinct jobs within one hour of the reference day."""

    hour: int
    run_count: int
    job_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"hour": self.hour, "runCount": self.run_count, "jobCount": self.job_count}


@dataclass
class CrontabStats:
    """Aggregated run statistics for a set of jobs.

    ``total_jobs`` counts every job given, valid or not. Everything else only
    covers valid jobs the oracle could project.
    """

    total_jobs: int = 0
    total_runs_per_day: int = 0
    total_runs_per_hour: int = 0
    job_frequencies: list[JobFrequency] = field(default_factory=list)
    hour_histogram: list[int] = field(default_factory=lambda: [0] * 24)
    hour_jobs: list[int] = field(default_factory=lambda: [0] * 24)
    max_concurrent: int = 0
    collision_minutes: int = 0

    @property
    def collision_frequency(self) -> float:
        """Percentage of the day's minutes in which more than one job runs."""
        return self.collision_minutes / MINUTES_PER_DAY * 100.0

    def most_frequent(self, limit: int = DEFAULT_TOP_N) -> list[JobFrequency]:
        """Jobs with the most runs per day; ties keep crontab order."""
        ranked = sorted(self.job_frequencies, key=lambda freq: -freq.runs_per_day)
        return ranked[:limit]

    def least_frequent(self, limit: int = DEFAULT_TOP_N) -> list[JobFrequency]:
        """Jobs with the fewest runs per day; ties keep crontab order."""
        ranked = sorted(self.job_frequencies, key=lambda freq: freq.runs_per_day)
        return ranked[:limit]

    def busiest_hours(self, limit: int | None = None) -> list[HourCount]:
        """Hours with at least one run, busiest first (earlier hour on ties)."""
        hours = [
            HourCount(hour, runs, self.hour_jobs[hour])
            for hour, runs in enumerate(self.hour_histogram)
            if runs
        ]
        hours.sort(key=lambda count: (-count.run_count, count.hour))
        return hours if limit is None else hours[:limit]

    def to_dict(self, top: int = DEFAULT_TOP_N) -> dict[str, Any]:
        """Convert to dictionary, with ranked lists cut to ``top`` entries."""
        return {
            "totalJobs": self.total_jobs,
            "totalRunsPerDay": self.total_runs_per_day,
            "totalRunsPerHour": self.total_runs_per_hour,
            "jobFrequencies": [freq.to_dict() for freq in self.job_frequencies],
            "mostFrequent": [freq.to_dict() for freq in self.most_frequent(top)],
            "leastFrequent": [freq.to_dict() for freq in self.least_frequent(top)],
            "hourHistogram": list(self.hour_histogram),
            "busiestHours": [hour.to_dict() for hour in self.busiest_hours(top)],
            "maxConcurrent": self.max_concurrent,
            "collisionFrequency": round(self.collision_frequency, 2),
        }


class StatsCalculator:
    """Computes CrontabStats on the same fixed reference day as frequency checks."""

    def __init__(self, oracle: Scheduler, reference: datetime = REFERENCE_DATE) -> None:
        self.frequency = FrequencyAnalyzer(oracle, reference)

    def calculate(self, jobs: Iterable[Job]) -> CrontabStats:
        """Compute statistics for ``jobs``.

        Invalid jobs are counted in ``total_jobs`` only. A job the oracle
        rejects is logged and left out of every other figure.
        """
        stats = CrontabStats()
        per_minute: Counter[datetime] = Counter()

        for job in jobs:
            stats.total_jobs += 1
            if not job.valid:
                continue

            try:
                runs_per_day, runs_per_hour = self.frequency.estimate(job.expression)
                day_runs = self.frequency.runs_on_reference_day(job.expression)
            except ExpressionParseError as e:
                logger.warning(f"Skipping job {job.job_id} in statistics: {e}")
                continue

            stats.job_frequencies.append(
                JobFrequency(job.job_id, job.expression, runs_per_day, runs_per_hour)
            )
            stats.total_runs_per_day += runs_per_day
            stats.total_runs_per_hour += runs_per_hour

            for hour in {fire_time.hour for fire_time in day_runs}:
                stats.hour_jobs[hour] += 1
            for fire_time in day_runs:
                stats.hour_histogram[fire_time.hour] += 1
                per_minute[truncate_to_minute(fire_time)] += 1

        stats.max_concurrent = max(per_minute.values(), default=0)
        stats.collision_minutes = sum(1 for count in per_minute.values() if count > 1)

        logger.debug(
            f"Statistics for {stats.total_jobs} jobs: {stats.total_runs_per_day} runs/day, "
            f"max {stats.max_concurrent} concurrent"
        )
        return stats
