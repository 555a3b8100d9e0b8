"""Validation of expressions, crontab files, job lists and the user crontab."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from cronkit.crontab import EntryType
from cronkit.cronx import ScheduleParser
from cronkit.errors import ExpressionParseError, SourceReadError

from .codes import DiagnosticCode
from .frequency import FrequencyAnalyzer, detect_redundant_pattern, redundant_pattern_suggestion
from .hygiene import CommandHygieneChecker
from .models import Issue, Overlap, OverlapStats, ValidationResult
from .overlap import DEFAULT_OVERLAP_WINDOW, Clock, OverlapAnalyzer, utc_now

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from cronkit.config import CheckSettings
    from cronkit.crontab import Entry, Job, Reader
    from cronkit.cronx import Schedule, Scheduler

logger = logging.getLogger(__name__)

DEFAULT_MAX_RUNS_PER_DAY = 1000
EMPTY_SCHEDULE_HORIZON_YEARS = 2
OVERLAP_ISSUE_LIMIT = 5


def add_years(instant: datetime, years: int) -> datetime:
    """Shift by calendar years; Feb 29 rolls over to Mar 1."""
    try:
        return instant.replace(year=instant.year + years)
    except ValueError:
        return instant.replace(year=instant.year + years, month=3, day=1)


def detect_dom_dow_conflict(schedule: Schedule) -> bool:
    """True when both day-of-month and day-of-week are restricted."""
    return not schedule.day_of_month.is_every and not schedule.day_of_week.is_every


class Validator:
    """Runs every schedule check and collects the findings.

    Each job goes through the same sequence of checks regardless of where it
    came from: day-field conflict, empty schedule, frequency (optional) and
    command hygiene (optional). Overlap analysis runs once over the whole
    job set when enabled.
    """

    def __init__(
        self,
        parser: ScheduleParser | None = None,
        oracle: Scheduler | None = None,
        *,
        enable_frequency: bool = True,
        max_runs_per_day: int = DEFAULT_MAX_RUNS_PER_DAY,
        enable_hygiene: bool = False,
        warn_on_overlap: bool = False,
        overlap_window: timedelta = DEFAULT_OVERLAP_WINDOW,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the validator.

        Args:
            parser: Schedule parser (English, APScheduler-backed by default).
            oracle: Fire-time oracle; defaults to the parser's oracle.
            enable_frequency: Report redundant steps and excessive runs.
            max_runs_per_day: Runs per day above which CRON-007 is reported.
            enable_hygiene: Report command hygiene issues.
            warn_on_overlap: Report minutes where several jobs run together.
            overlap_window: How far ahead overlap analysis projects.
            clock: Returns "now" for empty-schedule and overlap checks.
        """
        self.parser = parser or ScheduleParser(oracle=oracle)
        self.oracle = oracle or self.parser.oracle
        self.enable_frequency = enable_frequency
        self.max_runs_per_day = max_runs_per_day
        self.enable_hygiene = enable_hygiene
        self.warn_on_overlap = warn_on_overlap
        self.overlap_window = overlap_window
        self._clock = clock

        self.frequency = FrequencyAnalyzer(self.oracle)
        self.hygiene = CommandHygieneChecker()
        self.overlaps = OverlapAnalyzer(self.oracle, clock=clock)

    @classmethod
    def from_settings(
        cls,
        settings: CheckSettings,
        oracle: Scheduler | None = None,
        clock: Clock = utc_now,
    ) -> Validator:
        """Create a validator configured from CheckSettings."""
        parser = ScheduleParser.for_locale(settings.locale, oracle=oracle)
        return cls(
            parser=parser,
            oracle=oracle,
            enable_frequency=settings.enable_frequency,
            max_runs_per_day=settings.max_runs_per_day,
            enable_hygiene=settings.enable_hygiene,
            warn_on_overlap=settings.warn_on_overlap,
            overlap_window=timedelta(minutes=settings.overlap_window_minutes),
            clock=clock,
        )

    # Entry points

    def validate_expression(self, expression: str) -> ValidationResult:
        """Validate one ad-hoc expression (no line number, no command)."""
        result = ValidationResult(total_jobs=1)

        try:
            schedule = self.parser.parse(expression)
        except ExpressionParseError as e:
            result.invalid_jobs = 1
            result.add_issue(
                Issue.for_code(
                    DiagnosticCode.PARSE_ERROR,
                    f"Invalid cron expression: {e}",
                    expression=expression,
                )
            )
            return result

        result.valid_jobs = 1
        self._check_schedule(result, schedule, expression)
        return result

    def validate_crontab(self, reader: Reader, path: Path | str) -> ValidationResult:
        """Validate every job in a crontab file.

        A file that cannot be read yields a single CRON-004 issue.
        """
        try:
            entries = reader.parse_file(path)
        except SourceReadError as e:
            return self._read_failure(f"Failed to read crontab file: {e}")

        logger.info(f"Validating crontab {path}")
        return self.validate_entries(entries)

    def validate_entries(self, entries: Iterable[Entry]) -> ValidationResult:
        """Validate already-parsed crontab entries (e.g. from stdin).

        Overlap analysis keys jobs by ``Job.job_id``. Entries without a line
        number that share an expression are one job there.
        """
        jobs = [
            entry.job
            for entry in entries
            if entry.type == EntryType.JOB and entry.job is not None
        ]
        return self._validate_jobs(jobs)

    def validate_user_crontab(self, reader: Reader) -> ValidationResult:
        """Validate the current user's crontab.

        An inaccessible crontab yields a single CRON-004 issue.
        """
        try:
            jobs = reader.read_user()
        except SourceReadError as e:
            return self._read_failure(f"Failed to read user crontab: {e}")

        return self._validate_jobs(jobs)

    def analyze_overlaps(self, jobs: Iterable[Job]) -> tuple[list[Overlap], OverlapStats]:
        """Overlap list and stats for ``jobs`` over the configured window."""
        return self.overlaps.analyze(jobs, self.overlap_window)

    def is_empty_schedule(self, expression: str) -> bool:
        """True when the oracle finds no run within the next two years.

        The horizon is a heuristic: a schedule whose next run is further out
        is reported as empty.
        """
        now = self._clock()
        horizon = add_years(now, EMPTY_SCHEDULE_HORIZON_YEARS)
        try:
            times = self.oracle.next(expression, now, 1, until=horizon)
        except ExpressionParseError as e:
            logger.debug(f"Oracle rejected '{expression}': {e}")
            return True
        return not times or times[0] > horizon

    # Shared checks

    def _read_failure(self, message: str) -> ValidationResult:
        logger.info(message)
        result = ValidationResult()
        result.add_issue(Issue.for_code(DiagnosticCode.FILE_READ_ERROR, message))
        return result

    def _validate_jobs(self, jobs: list[Job]) -> ValidationResult:
        result = ValidationResult()
        for job in jobs:
            self._check_job(result, job)

        if self.warn_on_overlap:
            result.extend(self._overlap_issues(jobs))

        logger.debug(
            f"Validated {result.total_jobs} jobs: {result.valid_jobs} valid, "
            f"{result.invalid_jobs} invalid, {len(result.issues)} issues"
        )
        return result

    def _check_job(self, result: ValidationResult, job: Job) -> None:
        result.total_jobs += 1

        if not job.valid:
            result.invalid_jobs += 1
            result.add_issue(
                Issue.for_code(
                    DiagnosticCode.PARSE_ERROR,
                    f"Invalid cron expression: {job.error}",
                    expression=job.expression,
                    line_number=job.line_number,
                )
            )
            return

        try:
            schedule = self.parser.parse(job.expression)
        except ExpressionParseError as e:
            # the reader accepted this job, so the parse failure demotes it
            result.invalid_jobs += 1
            result.valid_jobs -= 1
            result.add_issue(
                Issue.for_code(
                    DiagnosticCode.PARSE_ERROR,
                    f"Failed to parse expression: {e}",
                    expression=job.expression,
                    line_number=job.line_number,
                )
            )
            return

        result.valid_jobs += 1
        self._check_schedule(
            result, schedule, job.expression, line_number=job.line_number, command=job.command
        )

    def _check_schedule(
        self,
        result: ValidationResult,
        schedule: Schedule,
        expression: str,
        line_number: int = 0,
        command: str = "",
    ) -> None:
        if detect_dom_dow_conflict(schedule):
            result.add_issue(
                Issue.for_code(
                    DiagnosticCode.DOM_DOW_CONFLICT,
                    "Both day-of-month and day-of-week specified "
                    "(runs if either condition is met)",
                    expression=expression,
                    line_number=line_number,
                )
            )

        if self.is_empty_schedule(expression):
            result.invalid_jobs += 1
            result.valid_jobs -= 1
            result.add_issue(
                Issue.for_code(
                    DiagnosticCode.EMPTY_SCHEDULE,
                    "Schedule never runs (empty schedule)",
                    expression=expression,
                    line_number=line_number,
                )
            )

        if self.enable_frequency:
            for issue in self._frequency_issues(schedule, expression):
                result.add_issue(issue.with_location(line_number))

        if self.enable_hygiene and command:
            for issue in self.hygiene.analyze(command):
                result.add_issue(issue.with_location(line_number, expression))

    def _frequency_issues(self, schedule: Schedule, expression: str) -> list[Issue]:
        issues: list[Issue] = []

        if detect_redundant_pattern(schedule):
            code = DiagnosticCode.REDUNDANT_PATTERN
            suggestion = redundant_pattern_suggestion(expression)
            issues.append(
                Issue.for_code(
                    code,
                    "Redundant step pattern detected (e.g., */1 can be simplified to *)",
                    expression=expression,
                    hint=f"{code.hint} Consider using: {suggestion}",
                )
            )

        try:
            runs_per_day = self.frequency.runs_per_day(expression)
        except ExpressionParseError as e:
            logger.debug(f"Could not count runs for '{expression}': {e}")
            return issues

        if runs_per_day > self.max_runs_per_day:
            issues.append(
                Issue.for_code(
                    DiagnosticCode.EXCESSIVE_RUNS,
                    f"Schedule runs {runs_per_day} times per day "
                    f"(exceeds threshold of {self.max_runs_per_day})",
                    expression=expression,
                )
            )

        return issues

    def _overlap_issues(self, jobs: list[Job]) -> list[Issue]:
        candidates = [job for job in jobs if job.valid]
        if len(candidates) < 2:
            return []

        _, stats = self.analyze_overlaps(candidates)
        if stats.max_concurrent <= 1:
            return []

        return [
            Issue.for_code(
                DiagnosticCode.OVERLAP_DETECTED,
                f"Overlap detected: {overlap.count} jobs scheduled at "
                f"{overlap.time:%Y-%m-%d %H:%M}",
            )
            for overlap in stats.most_problematic[:OVERLAP_ISSUE_LIMIT]
        ]
