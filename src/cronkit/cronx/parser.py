"""Cron expression parser producing five-field Schedules."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from cronkit.errors import ErrorKind, ExpressionParseError

from .constants import ALIASES, FIELD_BOUNDS
from .field import Field, parse_field
from .scheduler import APSchedulerOracle, Scheduler
from .symbols import DEFAULT_LOCALE, DEFAULT_SYMBOL_TABLE, SymbolRegistry, SymbolRegistryTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Schedule:
    """A parsed cron expression with its five fields in fixed order."""

    original: str
    minute: Field
    hour: Field
    day_of_month: Field
    month: Field
    day_of_week: Field

    @property
    def fields(self) -> tuple[Field, Field, Field, Field, Field]:
        """Fields in cron order (minute, hour, day-of-month, month, day-of-week)."""
        return (self.minute, self.hour, self.day_of_month, self.month, self.day_of_week)


@runtime_checkable
class ScheduleCache(Protocol):
    """Memo of parsed schedules keyed by the original expression string."""

    def get(self, expression: str) -> Schedule | None:
        """Return the cached schedule or None."""
        ...

    def put(self, expression: str, schedule: Schedule) -> None:
        """Store a schedule; storing an identical key twice is harmless."""
        ...


class ReadWriteLock:
    """Lock allowing many concurrent readers or one writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold a shared lock for the duration of the block."""
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the exclusive lock for the duration of the block."""
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class LockedScheduleCache:
    """Unbounded cache guarded by a reader/writer lock."""

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._entries: dict[str, Schedule] = {}

    def get(self, expression: str) -> Schedule | None:
        with self._lock.read_locked():
            return self._entries.get(expression)

    def put(self, expression: str, schedule: Schedule) -> None:
        with self._lock.write_locked():
            self._entries[expression] = schedule

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)

    def clear(self) -> None:
        """Drop every cached schedule."""
        with self._lock.write_locked():
            self._entries.clear()


class NullScheduleCache:
    """Cache that never stores anything."""

    def get(self, expression: str) -> Schedule | None:
        return None

    def put(self, expression: str, schedule: Schedule) -> None:
        return None


def _normalize_oracle_error(error: ExpressionParseError) -> ExpressionParseError:
    if error.kind == ErrorKind.FIELD_COUNT:
        message = "expected 5 fields"
    elif error.kind == ErrorKind.OUT_OF_RANGE:
        message = f"value out of range: {error.message}"
    elif error.kind == ErrorKind.UNKNOWN_ALIAS:
        message = error.message
    else:
        message = f"failed to parse expression: {error.message}"
    return ExpressionParseError(message, kind=error.kind, context=dict(error.context))


class ScheduleParser:
    """Parses 5-field cron expressions and @aliases into Schedules.

    Grammar and range checking is delegated to the oracle; field
    decomposition only happens once the oracle accepts the expression.
    Results are memoized by the exact input string.
    """

    def __init__(
        self,
        registry: SymbolRegistry | None = None,
        oracle: Scheduler | None = None,
        cache: ScheduleCache | None = None,
        locale_fallback: bool = False,
    ) -> None:
        """Initialize the parser.

        Args:
            registry: Symbol registry for day/month names (English by default).
            oracle: Validity oracle (APScheduler-backed by default).
            cache: Schedule memo (reader/writer-locked dict by default).
            locale_fallback: The registry replaces an unknown requested locale.
        """
        self._registry = registry or DEFAULT_SYMBOL_TABLE.default
        self._locale_fallback = locale_fallback
        self._oracle = oracle or APSchedulerOracle()
        self._cache = cache if cache is not None else LockedScheduleCache()

    @classmethod
    def for_locale(
        cls,
        locale: str = DEFAULT_LOCALE,
        table: SymbolRegistryTable = DEFAULT_SYMBOL_TABLE,
        oracle: Scheduler | None = None,
        cache: ScheduleCache | None = None,
    ) -> ScheduleParser:
        """Create a parser using the registry for ``locale``.

        Unknown locales fall back to the table's default registry and the
        parser's ``locale_fallback`` is set.
        """
        registry, fallback = table.lookup(locale)
        return cls(registry=registry, oracle=oracle, cache=cache, locale_fallback=fallback)

    @property
    def registry(self) -> SymbolRegistry:
        """Symbol registry used for names."""
        return self._registry

    @property
    def locale(self) -> str:
        """Locale of the registry actually in use."""
        return self._registry.locale

    @property
    def locale_fallback(self) -> bool:
        """True when the requested locale was unknown and the default was used."""
        return self._locale_fallback

    @property
    def oracle(self) -> Scheduler:
        """Oracle used for validation."""
        return self._oracle

    def parse(self, expression: str) -> Schedule:
        """Parse an expression.

        Args:
            expression: Five whitespace-separated fields or one of the
                ``@yearly``/``@annually``/``@monthly``/``@weekly``/``@daily``/
                ``@hourly`` aliases.

        Returns:
            The parsed Schedule.

        Raises:
            ExpressionParseError: If the expression is empty, has the wrong
                number of fields, uses an unknown alias, is out of range or
                contains an unresolvable value.
        """
        if not expression:
            raise ExpressionParseError("empty expression", kind=ErrorKind.EMPTY)

        cached = self._cache.get(expression)
        if cached is not None:
            logger.debug(f"Schedule cache hit for '{expression}'")
            return cached

        if expression.startswith("@"):
            if expression not in ALIASES:
                raise ExpressionParseError(
                    f"unrecognized alias: {expression}",
                    kind=ErrorKind.UNKNOWN_ALIAS,
                    context={"alias": expression},
                )
            normalized = expression
            raw_fields: tuple[str, ...] = ALIASES[expression]
        else:
            normalized = expression.upper()
            raw_fields = tuple(normalized.split())
            if len(raw_fields) != 5:
                raise ExpressionParseError(
                    f"expected 5 fields, got {len(raw_fields)}",
                    kind=ErrorKind.FIELD_COUNT,
                    context={"fields": len(raw_fields)},
                )

        try:
            self._oracle.validate(normalized)
        except ExpressionParseError as e:
            raise _normalize_oracle_error(e) from e

        fields = [
            parse_field(raw, low, high, self._registry)
            for raw, (low, high) in zip(raw_fields, FIELD_BOUNDS, strict=True)
        ]
        schedule = Schedule(expression, *fields)

        self._cache.put(expression, schedule)
        logger.debug(f"Parsed and cached schedule for '{expression}'")
        return schedule
