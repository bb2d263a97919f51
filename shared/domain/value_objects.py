"""
Common Value Objects

Value objects used across multiple domains:
- TimeRange: Half-open interval between two timestamps
- Percentage: A number between 0 and 100 applied to amounts
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from shared.domain.base import ValueObject
from shared.domain.errors import IntegrityViolation


def to_decimal(value) -> Decimal:
    """Coerce ints, floats and strings to Decimal without float artefacts"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Time range value object

    Represents a range from start (inclusive) to end (exclusive).
    Used for session slots and availability checks.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise IntegrityViolation(
                f"Start ({self.start}) must be before end ({self.end})",
                field='end',
            )

    def overlaps_with(self, other: 'TimeRange') -> bool:
        """
        Check if this range overlaps with another

        Note: end is exclusive, so adjacent ranges don't overlap.

        Examples:
            - 10:00-11:00 overlaps with 10:30-11:30 -> True
            - 10:00-11:00 overlaps with 11:00-12:00 -> False (adjacent)
        """
        if not isinstance(other, TimeRange):
            raise TypeError("Can only check overlap with another TimeRange")

        # Overlap formula: start1 < end2 AND start2 < end1
        return self.start < other.end and other.start < self.end

    @property
    def duration_minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60

    def __str__(self):
        return f"{self.start:%d.%m.%Y %H:%M} - {self.end:%H:%M}"


@dataclass(frozen=True)
class Percentage(ValueObject):
    """
    Percentage value object

    Accepts any number within [0, 100]; anything else is malformed input.
    """
    value: Decimal

    def __post_init__(self):
        try:
            value = to_decimal(self.value)
        except (ArithmeticError, ValueError):
            raise IntegrityViolation(f"Percentage must be a number, got {self.value!r}")
        if not value.is_finite() or value < 0 or value > 100:
            raise IntegrityViolation(f"Percentage must be between 0 and 100, got {self.value}")
        object.__setattr__(self, 'value', value)

    def of(self, amount) -> Decimal:
        """Apply this percentage to an amount"""
        return to_decimal(amount) * self.value / Decimal(100)

    def __str__(self):
        return f"{self.value}%"
