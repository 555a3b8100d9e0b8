"""Locale-scoped day and month name tables."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import NamedTuple

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"


class SymbolRegistry:
    """Maps day and month abbreviations to their cron integer values.

    Lookup is case-insensitive. Day names are consulted before month names,
    so a locale whose tables collide resolves the symbol as a day.
    """

    def __init__(
        self,
        locale: str,
        day_names: Mapping[str, int],
        month_names: Mapping[str, int],
    ) -> None:
        self._locale = locale
        self._day_names = MappingProxyType({k.upper(): v for k, v in day_names.items()})
        self._month_names = MappingProxyType({k.upper(): v for k, v in month_names.items()})

    @property
    def locale(self) -> str:
        """Locale identifier (e.g. "en")."""
        return self._locale

    def resolve(self, name: str) -> int | None:
        """Resolve a symbol to its numeric value.

        Args:
            name: Symbol such as "MON" or "jan".

        Returns:
            The integer value, or None when the symbol is unknown. Full names,
            partial names and names with surrounding whitespace are unknown.
        """
        key = name.upper()
        if key in self._day_names:
            return self._day_names[key]
        return self._month_names.get(key)

    def __repr__(self) -> str:
        return f"SymbolRegistry(locale={self._locale!r})"


ENGLISH = SymbolRegistry(
    DEFAULT_LOCALE,
    day_names={"SUN": 0, "MON": 1, "TUE": 2, "WED": 3, "THU": 4, "FRI": 5, "SAT": 6},
    month_names={
        "JAN": 1,
        "FEB": 2,
        "MAR": 3,
        "APR": 4,
        "MAY": 5,
        "JUN": 6,
        "JUL": 7,
        "AUG": 8,
        "SEP": 9,
        "OCT": 10,
        "NOV": 11,
        "DEC": 12,
    },
)


class SymbolLookup(NamedTuple):
    """Result of resolving a locale to a registry."""

    registry: SymbolRegistry
    fallback: bool


class SymbolRegistryTable:
    """Read-only table of symbol registries keyed by locale."""

    def __init__(
        self,
        registries: Mapping[str, SymbolRegistry],
        default: SymbolRegistry = ENGLISH,
    ) -> None:
        self._registries = MappingProxyType(dict(registries))
        self._default = default

    @property
    def default(self) -> SymbolRegistry:
        """Registry used when a locale is unknown."""
        return self._default

    @property
    def locales(self) -> list[str]:
        """Known locale identifiers, sorted."""
        return sorted(self._registries)

    def lookup(self, locale: str) -> SymbolLookup:
        """Resolve a locale to its registry.

        Args:
            locale: Locale identifier.

        Returns:
            SymbolLookup whose ``fallback`` flag is True when the locale was
            unknown and the default registry was returned instead.
        """
        registry = self._registries.get(locale)
        if registry is not None:
            return SymbolLookup(registry, fallback=False)

        logger.warning(f"Unknown locale '{locale}', falling back to '{self._default.locale}'")
        return SymbolLookup(self._default, fallback=True)


DEFAULT_SYMBOL_TABLE = SymbolRegistryTable({DEFAULT_LOCALE: ENGLISH})
