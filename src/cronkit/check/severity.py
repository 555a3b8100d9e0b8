"""Issue severity levels."""

from __future__ import annotations

from enum import IntEnum

_SYNONYMS = {
    "info": "INFO",
    "warn": "WARN",
    "warning": "WARN",
    "error": "ERROR",
}


class Severity(IntEnum):
    """Ordered severity of a diagnostic: INFO < WARN < ERROR."""

    INFO = 0
    WARN = 1
    ERROR = 2

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def from_string(cls, value: str) -> Severity:
        """Parse a severity name, case-insensitively.

        ``warning`` is accepted as a synonym for ``warn``.

        Raises:
            ValueError: If the name is not a known severity.
        """
        name = _SYNONYMS.get(value.strip().lower())
        if name is None:
            msg = f"invalid severity: {value}"
            raise ValueError(msg)
        return cls[name]

    @property
    def is_error(self) -> bool:
        return self is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self is Severity.WARN

    @property
    def is_info(self) -> bool:
        return self is Severity.INFO


def parse_fail_on_level(level: str) -> Severity:
    """Parse the ``--fail-on`` threshold.

    Raises:
        ValueError: If ``level`` is not error, warn (warning) or info.
    """
    try:
        return Severity.from_string(level)
    except ValueError:
        msg = f"invalid fail-on level: {level} (must be 'error', 'warn', or 'info')"
        raise ValueError(msg) from None
