"""Occurrence oracle backed by APScheduler.

This is the only module that talks to APScheduler. Everything else asks a
``Scheduler`` for validation and upcoming fire times, so tests can swap in a
fake without doing any calendar arithmetic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from apscheduler.triggers.combining import OrTrigger
from apscheduler.triggers.cron import CronTrigger

from cronkit.errors import ErrorKind, ExpressionParseError

from .constants import ALIASES

if TYPE_CHECKING:
    from collections.abc import Mapping

    from apscheduler.triggers.base import BaseTrigger

logger = logging.getLogger(__name__)

_MONTH_NAMES = {
    name: number
    for number, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}
_WEEKDAY_NAMES = {
    name: number
    for number, name in enumerate(("sun", "mon", "tue", "wed", "thu", "fri", "sat"))
}
# APScheduler numbers weekdays from Monday, so day-of-week is passed by name
_APS_WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


@runtime_checkable
class Scheduler(Protocol):
    """Validates cron expressions and projects their fire times."""

    def validate(self, expression: str) -> None:
        """Raise ExpressionParseError if the expression is malformed."""
        ...

    def next(
        self,
        expression: str,
        from_instant: datetime,
        count: int,
        until: datetime | None = None,
    ) -> list[datetime]:
        """Return up to ``count`` fire times strictly after ``from_instant``."""
        ...


@dataclass(frozen=True)
class _FieldSpec:
    name: str
    low: int
    high: int
    names: Mapping[str, int] | None = None


_FIELD_SPECS = (
    _FieldSpec("minute", 0, 59),
    _FieldSpec("hour", 0, 23),
    _FieldSpec("day", 1, 31),
    _FieldSpec("month", 1, 12, _MONTH_NAMES),
    _FieldSpec("day_of_week", 0, 6, _WEEKDAY_NAMES),
)


@dataclass(frozen=True)
class _CompiledExpression:
    """Expanded field values ready to hand to APScheduler."""

    minute: str
    hour: str
    day: str
    month: str
    day_of_week: str
    day_or_weekday: bool  # both day fields restricted: cron matches either


def _syntax_error(message: str, kind: ErrorKind = ErrorKind.SYNTAX) -> ExpressionParseError:
    return ExpressionParseError(message, kind=kind)


def _parse_number(text: str, spec: _FieldSpec) -> int:
    if spec.names is not None and text.lower() in spec.names:
        return spec.names[text.lower()]
    try:
        value = int(text)
    except ValueError as e:
        raise _syntax_error(f"failed to parse int from {text!r} in {spec.name}") from e
    if value < 0:
        raise _syntax_error(f"negative number ({value}) not allowed: {text}")
    return value


def _expand_part(text: str, spec: _FieldSpec) -> tuple[set[int], bool]:
    range_text, has_step, step_text = text.partition("/")
    if "/" in step_text:
        raise _syntax_error(f"too many slashes: {text}")

    is_star = range_text == "*"
    has_range = False
    if is_star:
        first, last = spec.low, spec.high
    else:
        low_text, dash, high_text = range_text.partition("-")
        if "-" in high_text:
            raise _syntax_error(f"too many hyphens: {text}")
        has_range = bool(dash)
        first = _parse_number(low_text, spec)
        last = _parse_number(high_text, spec) if has_range else first

    step = 1
    if has_step:
        try:
            step = int(step_text)
        except ValueError as e:
            raise _syntax_error(f"failed to parse int from {step_text!r}: {text}") from e
        if step <= 0:
            raise _syntax_error(f"step of range should be a positive number: {text}")
        if not is_star and not has_range:
            # N/S means N-max/S
            last = spec.high

    if first < spec.low:
        raise _syntax_error(
            f"beginning of range ({first}) below minimum ({spec.low}): {text}",
            ErrorKind.OUT_OF_RANGE,
        )
    if last > spec.high:
        raise _syntax_error(
            f"end of range ({last}) above maximum ({spec.high}): {text}",
            ErrorKind.OUT_OF_RANGE,
        )
    if first > last:
        raise _syntax_error(f"beginning of range ({first}) beyond end of range ({last}): {text}")

    return set(range(first, last + 1, step)), is_star and step == 1


def _expand_field(raw: str, spec: _FieldSpec) -> tuple[str, bool]:
    values: set[int] = set()
    star = False
    for part in raw.split(","):
        part_values, part_star = _expand_part(part, spec)
        values |= part_values
        star = star or part_star

    if len(values) == spec.high - spec.low + 1:
        return "*", star
    if spec.name == "day_of_week":
        return ",".join(_APS_WEEKDAYS[v] for v in sorted(values)), star
    return ",".join(str(v) for v in sorted(values)), star


def split_expression(expression: str) -> tuple[str, ...]:
    """Split an expression (or expand an alias) into five raw fields.

    Raises:
        ExpressionParseError: For unknown aliases or a wrong field count.
    """
    if expression.startswith("@"):
        alias = expression.strip()
        if alias not in ALIASES:
            raise _syntax_error(f"unrecognized descriptor: {alias}", ErrorKind.UNKNOWN_ALIAS)
        return ALIASES[alias]

    fields = tuple(expression.split())
    if len(fields) != 5:
        raise _syntax_error(
            f"expected exactly 5 fields, found {len(fields)}: {list(fields)}",
            ErrorKind.FIELD_COUNT,
        )
    return fields


@lru_cache(maxsize=1024)
def _compile(expression: str) -> _CompiledExpression:
    fields = split_expression(expression)
    expanded = [_expand_field(raw, spec) for raw, spec in zip(fields, _FIELD_SPECS, strict=True)]
    (minute, _), (hour, _), (day, day_star), (month, _), (day_of_week, weekday_star) = expanded
    logger.debug(f"Compiled cron expression '{expression}'")
    return _CompiledExpression(
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=day_of_week,
        day_or_weekday=not day_star and not weekday_star,
    )


def _build_trigger(compiled: _CompiledExpression, end_date: datetime | None) -> BaseTrigger:
    common = {
        "month": compiled.month,
        "hour": compiled.hour,
        "minute": compiled.minute,
        "second": "0",
        "end_date": end_date,
        "timezone": UTC,
    }
    if compiled.day_or_weekday:
        return OrTrigger(
            [
                CronTrigger(day=compiled.day, day_of_week="*", **common),
                CronTrigger(day="*", day_of_week=compiled.day_of_week, **common),
            ]
        )
    return CronTrigger(day=compiled.day, day_of_week=compiled.day_of_week, **common)


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


class APSchedulerOracle:
    """Scheduler implementation using APScheduler cron triggers.

    Fields are expanded with POSIX cron semantics before APScheduler sees
    them: ``N/S`` runs from N to the field maximum, names are only accepted
    in their own field, day-of-week 0 is Sunday, and when both day fields are
    restricted a day matches if either matches.
    """

    def validate(self, expression: str) -> None:
        """Validate an expression.

        Raises:
            ExpressionParseError: If the expression is malformed.
        """
        _compile(expression)

    def next(
        self,
        expression: str,
        from_instant: datetime,
        count: int,
        until: datetime | None = None,
    ) -> list[datetime]:
        """Project upcoming fire times.

        Args:
            expression: Cron expression or alias.
            from_instant: Results are strictly later than this instant.
            count: Maximum number of fire times to return.
            until: Optional inclusive horizon; nothing later is returned.

        Returns:
            Ascending UTC fire times. Fewer than ``count`` are returned when
            the horizon is reached or the schedule has no further runs.

        Raises:
            ExpressionParseError: If the expression is malformed.
        """
        compiled = _compile(expression)
        if count <= 0:
            return []

        end_date = _as_utc(until) if until is not None else None
        trigger = _build_trigger(compiled, end_date)

        times: list[datetime] = []
        current = _as_utc(from_instant)
        while len(times) < count:
            fire_time = trigger.get_next_fire_time(None, current + timedelta(microseconds=1))
            if fire_time is None:
                break
            times.append(fire_time)
            current = fire_time
        return times
