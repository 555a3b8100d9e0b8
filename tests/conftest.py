"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from cronkit.check import Validator
from cronkit.crontab import CrontabReader
from cronkit.cronx import APSchedulerOracle, ScheduleParser
from cronkit.errors import ErrorKind, ExpressionParseError

FIXED_NOW = datetime(2025, 1, 1, 10, 30, tzinfo=UTC)


class FakeOracle:
    """Scheduler double returning canned fire times.

    ``runs`` maps an expression to its fire times; expressions in ``reject``
    fail both validation and projection.
    """

    def __init__(
        self,
        runs: dict[str, list[datetime]] | None = None,
        reject: set[str] | None = None,
    ) -> None:
        self.runs = runs or {}
        self.reject = reject or set()
        self.validate_calls: list[str] = []
        self.next_calls: list[tuple[str, datetime, int, datetime | None]] = []

    def validate(self, expression: str) -> None:
        self.validate_calls.append(expression)
        if expression in self.reject:
            raise ExpressionParseError(f"rejected {expression}", kind=ErrorKind.SYNTAX)

    def next(
        self,
        expression: str,
        from_instant: datetime,
        count: int,
        until: datetime | None = None,
    ) -> list[datetime]:
        self.next_calls.append((expression, from_instant, count, until))
        if expression in self.reject:
            raise ExpressionParseError(f"rejected {expression}", kind=ErrorKind.SYNTAX)
        times = [
            t
            for t in sorted(self.runs.get(expression, []))
            if t > from_instant and (until is None or t <= until)
        ]
        return times[:count]


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock frozen at 2025-01-01 10:30 UTC."""
    return lambda: FIXED_NOW


@pytest.fixture
def oracle() -> APSchedulerOracle:
    """Real APScheduler-backed oracle."""
    return APSchedulerOracle()


@pytest.fixture
def parser(oracle: APSchedulerOracle) -> ScheduleParser:
    """English parser using the real oracle."""
    return ScheduleParser(oracle=oracle)


@pytest.fixture
def reader(parser: ScheduleParser) -> CrontabReader:
    """Crontab reader sharing the parser fixture."""
    return CrontabReader(parser)


@pytest.fixture
def validator(parser: ScheduleParser, fixed_clock: Callable[[], datetime]) -> Validator:
    """Validator with default settings and a frozen clock."""
    return Validator(parser=parser, clock=fixed_clock)


@pytest.fixture
def crontab_file(tmp_path: Path) -> Callable[[str], Path]:
    """Factory writing crontab content to a temporary file."""

    def _write(content: str) -> Path:
        path = tmp_path / "crontab"
        path.write_text(content)
        return path

    return _write
