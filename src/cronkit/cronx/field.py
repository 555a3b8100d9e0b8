"""Field grammar: decomposes one raw cron field into typed parts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from cronkit.errors import ErrorKind, ExpressionParseError

if TYPE_CHECKING:
    from .symbols import SymbolRegistry


@dataclass(frozen=True)
class EveryPart:
    """Wildcard atom (``*`` or ``*/N``)."""

    step: int = 1


@dataclass(frozen=True)
class SinglePart:
    """Single value atom (``5``, ``MON``, or ``5/10``)."""

    value: int
    step: int = 1


@dataclass(frozen=True)
class RangePart:
    """Inclusive range atom (``1-5`` or ``1-5/2``)."""

    start: int
    end: int
    step: int = 1


Part = EveryPart | SinglePart | RangePart


@dataclass(frozen=True)
class Field:
    """One parsed cron field: a non-empty, ordered tuple of parts."""

    raw: str
    parts: tuple[Part, ...]
    low: int
    high: int

    def __post_init__(self) -> None:
        if not self.parts:
            msg = f"Field '{self.raw}' has no parts"
            raise ValueError(msg)

    @property
    def is_every(self) -> bool:
        """True for a bare wildcard (``*``, or ``*/1``)."""
        return (
            len(self.parts) == 1
            and isinstance(self.parts[0], EveryPart)
            and self.parts[0].step <= 1
        )

    @property
    def is_step(self) -> bool:
        """True when any part carries an explicit step greater than 1."""
        return any(part.step > 1 for part in self.parts)

    @property
    def step_value(self) -> int:
        """Step of the first stepped part, or 1 when there is none."""
        for part in self.parts:
            if part.step > 1:
                return part.step
        return 1

    @property
    def is_range(self) -> bool:
        """True when the field is exactly one range."""
        return len(self.parts) == 1 and isinstance(self.parts[0], RangePart)

    @property
    def range_bounds(self) -> tuple[int, int] | None:
        """(start, end) of the single range, or None."""
        part = self.parts[0]
        if self.is_range and isinstance(part, RangePart):
            return part.start, part.end
        return None

    @property
    def is_list(self) -> bool:
        """True for a comma-separated list."""
        return len(self.parts) > 1

    @property
    def is_single(self) -> bool:
        """True when the field is exactly one unstepped value."""
        part = self.parts[0]
        return len(self.parts) == 1 and isinstance(part, SinglePart) and part.step <= 1

    @property
    def value(self) -> int | None:
        """Value of a single-value field, or None."""
        part = self.parts[0]
        if self.is_single and isinstance(part, SinglePart):
            return part.value
        return None

    def expanded_values(self) -> list[int]:
        """Every integer this field matches, sorted and de-duplicated.

        Used for diagnostics only; occurrence computation is the oracle's job.
        """
        values: set[int] = set()
        for part in self.parts:
            step = max(part.step, 1)
            if isinstance(part, EveryPart):
                values.update(range(self.low, self.high + 1, step))
            elif isinstance(part, RangePart):
                values.update(range(part.start, part.end + 1, step))
            elif part.step > 1:
                # N/S runs from N to the field maximum
                values.update(range(part.value, self.high + 1, step))
            else:
                values.add(part.value)
        return sorted(values)


def parse_value(token: str, registry: SymbolRegistry) -> int:
    """Resolve one token to an integer.

    Integers are tried first, then symbolic names.

    Raises:
        ExpressionParseError: If the token is neither.
    """
    try:
        return int(token)
    except ValueError:
        pass

    value = registry.resolve(token)
    if value is None:
        raise ExpressionParseError(
            f"unresolved value '{token}'",
            kind=ErrorKind.UNRESOLVED_VALUE,
            context={"token": token, "locale": registry.locale},
        )
    return value


def _parse_part(text: str, registry: SymbolRegistry) -> Part:
    base, sep, step_text = text.partition("/")
    step = 1
    if sep:
        try:
            step = int(step_text)
        except ValueError as e:
            raise ExpressionParseError(
                f"invalid step '{step_text}' in '{text}'",
                kind=ErrorKind.SYNTAX,
                context={"part": text},
            ) from e

    if base == "*":
        return EveryPart(step=step)

    if "-" in base:
        start_text, _, end_text = base.partition("-")
        return RangePart(
            start=parse_value(start_text, registry),
            end=parse_value(end_text, registry),
            step=step,
        )

    return SinglePart(value=parse_value(base, registry), step=step)


def parse_field(raw: str, min_value: int, max_value: int, registry: SymbolRegistry) -> Field:
    """Parse one raw field substring into a Field.

    Args:
        raw: Field text such as ``*/15``, ``1-5``, ``MON,WED`` or ``1-10/2,20``.
        min_value: Lowest legal value for the field.
        max_value: Highest legal value for the field.
        registry: Symbol registry for day and month names.

    Returns:
        The parsed Field; ``field.raw == raw`` always holds.

    Raises:
        ExpressionParseError: If a value or step cannot be resolved.
    """
    parts = tuple(_parse_part(text, registry) for text in raw.split(","))
    return Field(raw=raw, parts=parts, low=min_value, high=max_value)
