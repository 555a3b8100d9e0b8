"""Tests for the Validator."""

from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from conftest import FakeOracle

from cronkit.check import DiagnosticCode, Severity, Validator
from cronkit.config import CheckSettings
from cronkit.crontab import CrontabReader, Entry, EntryType, Job
from cronkit.cronx import ScheduleParser
from cronkit.errors import SourceReadError


def codes(result) -> list[str]:
    return [str(issue.code) for issue in result.issues]


class FakeReader:
    """Reader double serving canned jobs or failing."""

    def __init__(self, jobs: list[Job] | None = None, error: str | None = None) -> None:
        self.jobs = jobs or []
        self.error = error

    def parse_file(self, path: Path | str) -> list[Entry]:
        if self.error:
            raise SourceReadError(self.error)
        return [Entry(EntryType.JOB, job.line_number, job=job) for job in self.jobs]

    def read_file(self, path: Path | str) -> list[Job]:
        return [entry.job for entry in self.parse_file(path) if entry.job]

    def read_user(self) -> list[Job]:
        if self.error:
            raise SourceReadError(self.error)
        return list(self.jobs)


class TestValidateExpression:
    """Tests for Validator.validate_expression."""

    def test_clean_expression(self, validator: Validator) -> None:
        """Test a plain hourly expression has no issues."""
        result = validator.validate_expression("0 * * * *")

        assert result.valid
        assert result.issues == []
        assert (result.total_jobs, result.valid_jobs, result.invalid_jobs) == (1, 1, 0)

    def test_dom_dow_conflict(self, validator: Validator) -> None:
        """Test both day fields restricted is a single warning."""
        result = validator.validate_expression("0 0 1 * 1")

        assert result.valid
        assert codes(result) == ["CRON-001"]
        assert result.issues[0].severity is Severity.WARN
        assert result.issues[0].expression == "0 0 1 * 1"

    def test_out_of_range(self, validator: Validator) -> None:
        """Test an out-of-range value is a parse error."""
        result = validator.validate_expression("60 0 * * *")

        assert not result.valid
        assert codes(result) == ["CRON-003"]
        assert result.issues[0].severity is Severity.ERROR
        assert result.issues[0].message.startswith("Invalid cron expression: value out of range")
        assert (result.total_jobs, result.valid_jobs, result.invalid_jobs) == (1, 0, 1)

    def test_unknown_alias(self, validator: Validator) -> None:
        """Test unsupported aliases are parse errors."""
        result = validator.validate_expression("@reboot")

        assert codes(result) == ["CRON-003"]
        assert "unrecognized alias: @reboot" in result.issues[0].message

    def test_empty_schedule(self, validator: Validator) -> None:
        """Test an impossible date never runs."""
        result = validator.validate_expression("0 0 30 2 *")

        assert not result.valid
        assert codes(result) == ["CRON-002"]
        assert result.issues[0].message == "Schedule never runs (empty schedule)"
        assert (result.valid_jobs, result.invalid_jobs) == (0, 1)

    def test_leap_day_beyond_horizon_reported_empty(self, validator: Validator) -> None:
        """Test the two-year horizon misses the next Feb 29."""
        result = validator.validate_expression("0 0 29 2 *")

        assert codes(result) == ["CRON-002"]

    def test_empty_when_oracle_returns_nothing(
        self, fixed_clock: Callable[[], datetime]
    ) -> None:
        """Test a schedule with no projected runs is empty."""
        oracle = FakeOracle()
        validator = Validator(ScheduleParser(oracle=oracle), clock=fixed_clock)

        result = validator.validate_expression("1 2 3 4 5")

        assert codes(result) == ["CRON-001", "CRON-002"]
        _, from_instant, count, until = oracle.next_calls[0]
        assert from_instant == fixed_clock()
        assert count == 1
        assert until == fixed_clock().replace(year=2027)

    def test_redundant_step(self, validator: Validator) -> None:
        """Test */1 is redundant and every-minute is excessive."""
        result = validator.validate_expression("*/1 * * * *")

        assert result.valid
        assert codes(result) == ["CRON-006", "CRON-007"]
        redundant, excessive = result.issues
        assert redundant.hint.endswith("Consider using: * * * * *")
        assert excessive.message == (
            "Schedule runs 1440 times per day (exceeds threshold of 1000)"
        )

    def test_every_redundant_field_is_rewritten(self, validator: Validator) -> None:
        """Test the suggestion rewrites each /1 field."""
        result = validator.validate_expression("0 */1 * * */1")

        assert result.issues[0].hint.endswith("Consider using: 0 * * * *")

    def test_step_fifteen_is_not_redundant(self, validator: Validator) -> None:
        """Test */15 is fine."""
        assert validator.validate_expression("*/15 * * * *").issues == []

    def test_custom_threshold(self, parser: ScheduleParser) -> None:
        """Test the excessive runs threshold is configurable."""
        validator = Validator(parser, max_runs_per_day=10)

        result = validator.validate_expression("0 * * * *")

        assert codes(result) == ["CRON-007"]
        assert "24 times per day" in result.issues[0].message

    def test_frequency_checks_disabled(self, parser: ScheduleParser) -> None:
        """Test disabling frequency checks."""
        validator = Validator(parser, enable_frequency=False)

        assert validator.validate_expression("*/1 * * * *").issues == []


class TestValidateCrontab:
    """Tests for Validator.validate_crontab with real files."""

    def test_mixed_crontab(
        self,
        validator: Validator,
        reader: CrontabReader,
        crontab_file: Callable[[str], Path],
    ) -> None:
        """Test counts and line numbers across a file."""
        path = crontab_file(
            "# nightly jobs\n"
            "SHELL=/bin/bash\n"
            "0 * * * * /usr/bin/a > /dev/null\n"
            "60 * * * * /usr/bin/b > /dev/null\n"
            "0 0 1 * 1 /usr/bin/c > /dev/null\n"
        )

        result = validator.validate_crontab(reader, path)

        assert not result.valid
        assert (result.total_jobs, result.valid_jobs, result.invalid_jobs) == (3, 2, 1)
        assert codes(result) == ["CRON-003", "CRON-001"]
        assert [issue.line_number for issue in result.issues] == [4, 5]
        assert result.issues[0].message.startswith("Invalid cron expression: ")

    def test_unreadable_file(
        self, validator: Validator, reader: CrontabReader, tmp_path: Path
    ) -> None:
        """Test a missing file yields one read error."""
        result = validator.validate_crontab(reader, tmp_path / "missing")

        assert not result.valid
        assert len(result.issues) == 1
        issue = result.issues[0]
        assert issue.code is DiagnosticCode.FILE_READ_ERROR
        assert issue.severity is Severity.ERROR
        assert "Failed to read" in issue.message
        assert result.total_jobs == 0

    def test_frequency_issues_get_line_numbers(
        self,
        validator: Validator,
        reader: CrontabReader,
        crontab_file: Callable[[str], Path],
    ) -> None:
        """Test frequency issues are stamped with the job's line."""
        path = crontab_file("\n*/1 * * * * /bin/x > /dev/null\n")

        result = validator.validate_crontab(reader, path)

        assert [(str(i.code), i.line_number) for i in result.issues] == [
            ("CRON-006", 2),
            ("CRON-007", 2),
        ]

    def test_hygiene_checks(
        self,
        parser: ScheduleParser,
        reader: CrontabReader,
        crontab_file: Callable[[str], Path],
        fixed_clock: Callable[[], datetime],
    ) -> None:
        """Test hygiene issues carry line and expression."""
        validator = Validator(parser, enable_hygiene=True, clock=fixed_clock)
        path = crontab_file("0 * * * * backup.sh\n")

        result = validator.validate_crontab(reader, path)

        assert result.valid
        assert codes(result) == ["CRON-008", "CRON-009"]
        assert all(i.line_number == 1 and i.expression == "0 * * * *" for i in result.issues)

    def test_hygiene_disabled_by_default(
        self,
        validator: Validator,
        reader: CrontabReader,
        crontab_file: Callable[[str], Path],
    ) -> None:
        """Test hygiene checks are opt-in."""
        path = crontab_file("0 * * * * backup.sh\n")

        assert validator.validate_crontab(reader, path).issues == []

    def test_overlaps(
        self,
        parser: ScheduleParser,
        reader: CrontabReader,
        crontab_file: Callable[[str], Path],
        fixed_clock: Callable[[], datetime],
    ) -> None:
        """Test overlapping jobs report the top five windows."""
        validator = Validator(parser, warn_on_overlap=True, clock=fixed_clock)
        path = crontab_file("0 * * * * /bin/a > /dev/null\n0 * * * * /bin/b > /dev/null\n")

        result = validator.validate_crontab(reader, path)

        assert result.valid
        assert codes(result) == ["CRON-012"] * 5
        first = result.issues[0]
        assert first.message == "Overlap detected: 2 jobs scheduled at 2025-01-01 11:00"
        assert first.line_number == 0
        assert first.expression == ""

    def test_overlap_window(
        self,
        parser: ScheduleParser,
        reader: CrontabReader,
        crontab_file: Callable[[str], Path],
        fixed_clock: Callable[[], datetime],
    ) -> None:
        """Test a short window can miss overlaps."""
        validator = Validator(
            parser, warn_on_overlap=True, overlap_window=timedelta(minutes=20), clock=fixed_clock
        )
        path = crontab_file("0 * * * * /bin/a > /dev/null\n0 * * * * /bin/b > /dev/null\n")

        assert validator.validate_crontab(reader, path).issues == []

    def test_overlap_needs_two_valid_jobs(
        self,
        parser: ScheduleParser,
        reader: CrontabReader,
        crontab_file: Callable[[str], Path],
        fixed_clock: Callable[[], datetime],
    ) -> None:
        """Test one valid job cannot overlap."""
        validator = Validator(parser, warn_on_overlap=True, clock=fixed_clock)
        path = crontab_file("0 * * * * /bin/a > /dev/null\n0 99 * * * /bin/b > /dev/null\n")

        assert codes(validator.validate_crontab(reader, path)) == ["CRON-003"]


class TestValidateEntries:
    """Tests for Validator.validate_entries."""

    def test_only_job_entries_count(self, validator: Validator) -> None:
        """Test non-job entries are skipped."""
        entries = [
            Entry(EntryType.COMMENT, 1, "# hi"),
            Entry(EntryType.ENV_VAR, 2, "A=b"),
            Entry(EntryType.JOB, 3, job=Job(3, "0 * * * *", "/bin/x")),
            Entry(EntryType.JOB, 4, job=None),
        ]

        result = validator.validate_entries(entries)

        assert result.total_jobs == 1
        assert result.issues == []

    def test_reader_rejected_job(self, validator: Validator) -> None:
        """Test the reader's error text is reported."""
        job = Job(7, "bad", valid=False, error="boom")

        result = validator.validate_entries([Entry(EntryType.JOB, 7, job=job)])

        assert result.issues[0].message == "Invalid cron expression: boom"
        assert result.issues[0].line_number == 7
        assert (result.valid_jobs, result.invalid_jobs) == (0, 1)

    def test_reparse_failure_demotes_job(self, validator: Validator) -> None:
        """Test a job marked valid that fails to parse is still caught."""
        job = Job(2, "61 * * * *")

        result = validator.validate_entries([Entry(EntryType.JOB, 2, job=job)])

        assert not result.valid
        assert result.issues[0].message.startswith("Failed to parse expression: ")
        # counts are adjusted as checks run, so the demotion goes below zero
        assert (result.total_jobs, result.valid_jobs, result.invalid_jobs) == (1, -1, 1)

    def test_empty_schedule_demotes_job(self, validator: Validator) -> None:
        """Test an empty schedule moves the job to invalid."""
        jobs = [Job(1, "0 0 30 2 *"), Job(2, "0 0 * * *")]

        entries = [Entry(EntryType.JOB, j.line_number, job=j) for j in jobs]

        result = validator.validate_entries(entries)

        assert (result.total_jobs, result.valid_jobs, result.invalid_jobs) == (2, 1, 1)
        assert result.issues[0].line_number == 1

    def test_identical_jobs_without_lines_share_an_id(
        self, parser: ScheduleParser, fixed_clock: Callable[[], datetime]
    ) -> None:
        """Test line-less jobs with one expression are a single job for overlaps."""
        validator = Validator(parser, warn_on_overlap=True, clock=fixed_clock)
        unnumbered = [Job(0, "0 * * * *", "/bin/a > /dev/null") for _ in range(2)]
        numbered = [Job(n, "0 * * * *", "/bin/a > /dev/null") for n in (1, 2)]

        collapsed = validator.validate_entries(
            [Entry(EntryType.JOB, 0, job=job) for job in unnumbered]
        )
        distinct = validator.validate_entries(
            [Entry(EntryType.JOB, job.line_number, job=job) for job in numbered]
        )

        assert unnumbered[0].job_id == unnumbered[1].job_id == "0 * * * *"
        assert "CRON-012" not in codes(collapsed)
        assert "CRON-012" in codes(distinct)


class TestValidateUserCrontab:
    """Tests for Validator.validate_user_crontab."""

    def test_user_jobs(self, validator: Validator) -> None:
        """Test jobs from the user crontab are checked like any other."""
        reader = FakeReader([Job(1, "0 0 1 * 1", "/bin/x"), Job(2, "0 * * * *", "/bin/y")])

        result = validator.validate_user_crontab(reader)

        assert result.total_jobs == 2
        assert codes(result) == ["CRON-001"]
        assert result.issues[0].line_number == 1

    def test_read_failure(self, validator: Validator) -> None:
        """Test an inaccessible crontab is one read error."""
        result = validator.validate_user_crontab(FakeReader(error="permission denied"))

        assert not result.valid
        assert [i.message for i in result.issues] == [
            "Failed to read user crontab: permission denied"
        ]

    def test_same_checks_as_file(
        self,
        validator: Validator,
        reader: CrontabReader,
        crontab_file: Callable[[str], Path],
    ) -> None:
        """Test identical jobs give identical issues from either source."""
        jobs = [Job(1, "*/1 * * * *", "/bin/x > /dev/null"), Job(2, "0 0 1 * 1", "/bin/y")]
        path = crontab_file("*/1 * * * * /bin/x > /dev/null\n0 0 1 * 1 /bin/y\n")

        from_user = validator.validate_user_crontab(FakeReader(jobs))
        from_file = validator.validate_crontab(reader, path)

        assert from_user.issues == from_file.issues


class TestFromSettings:
    """Tests for Validator.from_settings."""

    def test_settings_are_applied(self) -> None:
        """Test every setting reaches the validator."""
        settings = CheckSettings(
            locale="zz",
            enable_frequency=False,
            max_runs_per_day=5,
            enable_hygiene=True,
            warn_on_overlap=True,
            overlap_window_minutes=60,
        )

        validator = Validator.from_settings(settings)

        assert validator.parser.registry.locale == "en"
        assert validator.enable_frequency is False
        assert validator.max_runs_per_day == 5
        assert validator.enable_hygiene is True
        assert validator.warn_on_overlap is True
        assert validator.overlap_window == timedelta(hours=1)

    @pytest.mark.parametrize("expression", ["0 0 1 * 1", "60 * * * *", "@daily"])
    def test_defaults_match_constructor(self, expression: str) -> None:
        """Test default settings behave like a default validator."""
        from_settings = Validator.from_settings(CheckSettings()).validate_expression(expression)
        default = Validator().validate_expression(expression)

        assert from_settings.issues == default.issues
