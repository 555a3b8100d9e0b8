"""Cron expression model: symbols, field grammar, schedules and the oracle."""

from .constants import ALIASES, FIELD_BOUNDS, FIELD_NAMES
from .field import EveryPart, Field, Part, RangePart, SinglePart, parse_field, parse_value
from .parser import (
    LockedScheduleCache,
    NullScheduleCache,
    ReadWriteLock,
    Schedule,
    ScheduleCache,
    ScheduleParser,
)
from .scheduler import APSchedulerOracle, Scheduler, split_expression
from .symbols import (
    DEFAULT_LOCALE,
    DEFAULT_SYMBOL_TABLE,
    ENGLISH,
    SymbolLookup,
    SymbolRegistry,
    SymbolRegistryTable,
)

__all__ = [
    "ALIASES",
    "APSchedulerOracle",
    "DEFAULT_LOCALE",
    "DEFAULT_SYMBOL_TABLE",
    "ENGLISH",
    "EveryPart",
    "FIELD_BOUNDS",
    "FIELD_NAMES",
    "Field",
    "LockedScheduleCache",
    "NullScheduleCache",
    "Part",
    "RangePart",
    "ReadWriteLock",
    "Schedule",
    "ScheduleCache",
    "ScheduleParser",
    "Scheduler",
    "SinglePart",
    "SymbolLookup",
    "SymbolRegistry",
    "SymbolRegistryTable",
    "parse_field",
    "parse_value",
    "split_expression",
]
