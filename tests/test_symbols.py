"""Tests for symbol registries."""

import pytest

from cronkit.cronx import DEFAULT_SYMBOL_TABLE, ENGLISH, SymbolRegistry, SymbolRegistryTable


class TestSymbolRegistry:
    """Tests for SymbolRegistry.resolve."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("SUN", 0), ("mon", 1), ("Sat", 6), ("JAN", 1), ("dec", 12), ("May", 5)],
    )
    def test_resolves_names_case_insensitively(self, name: str, expected: int) -> None:
        """Test day and month abbreviations resolve in any case."""
        assert ENGLISH.resolve(name) == expected

    @pytest.mark.parametrize("name", ["MONDAY", "MO", " MON", "JANUARY", "", "FOO"])
    def test_unknown_symbols_are_not_guessed(self, name: str) -> None:
        """Test full names, partial names and padded names are unknown."""
        assert ENGLISH.resolve(name) is None

    def test_days_take_precedence_over_months(self) -> None:
        """Test a colliding symbol resolves as a day."""
        registry = SymbolRegistry("xx", day_names={"ABC": 3}, month_names={"abc": 9})

        assert registry.resolve("abc") == 3

    def test_locale(self) -> None:
        """Test the locale identifier is exposed."""
        assert ENGLISH.locale == "en"


class TestSymbolRegistryTable:
    """Tests for locale lookup."""

    def test_known_locale(self) -> None:
        """Test English is found without fallback."""
        registry, fallback = DEFAULT_SYMBOL_TABLE.lookup("en")

        assert registry is ENGLISH
        assert fallback is False

    def test_unknown_locale_falls_back(self) -> None:
        """Test unknown locales return the default and signal fallback."""
        lookup = DEFAULT_SYMBOL_TABLE.lookup("tlh")

        assert lookup.registry is ENGLISH
        assert lookup.fallback is True

    def test_custom_table(self) -> None:
        """Test a table built with custom registries."""
        french = SymbolRegistry("fr", day_names={"LUN": 1}, month_names={"JANV": 1})
        table = SymbolRegistryTable({"en": ENGLISH, "fr": french})

        registry, fallback = table.lookup("fr")

        assert registry.resolve("lun") == 1
        assert fallback is False
        assert table.locales == ["en", "fr"]
        assert table.default is ENGLISH
