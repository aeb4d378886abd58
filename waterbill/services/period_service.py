"""Bimonthly billing period identifiers and their sequencing.

A year has six billing periods, "<year>-1" (January-February) through
"<year>-6" (November-December). Period 1 of a year follows period 6 of the
previous year.
"""

import re
from dataclasses import dataclass

from waterbill.services.errors import InvalidPeriodError

PERIODS_PER_YEAR = 6

# ASCII digits only, no padding or surrounding whitespace
_PERIOD_PATTERN = re.compile(r"([0-9]{1,4})-([1-6])")


@dataclass(frozen=True, order=True)
class Period:
    """A billing period, ordered by (year, number)."""

    year: int
    number: int

    def __post_init__(self) -> None:
        if not 1 <= self.number <= PERIODS_PER_YEAR:
            raise InvalidPeriodError(
                f"Period number must be between 1 and {PERIODS_PER_YEAR}, got {self.number}",
                period=f"{self.year}-{self.number}",
            )

    @classmethod
    def parse(cls, value: "str | Period") -> "Period":
        """Parse a "<year>-<n>" identifier.

        Raises:
            InvalidPeriodError: If the identifier is malformed or n is outside 1..6
        """
        if isinstance(value, Period):
            return value
        if not isinstance(value, str):
            raise InvalidPeriodError(f"Period identifier must be a string, got {value!r}")

        match = _PERIOD_PATTERN.fullmatch(value)
        if not match:
            raise InvalidPeriodError(
                f"Malformed period identifier {value!r}, expected '<year>-<n>' with n in 1..6"
            )
        return cls(year=int(match.group(1)), number=int(match.group(2)))

    @property
    def first_month(self) -> int:
        """Calendar month the period starts in (1, 3, 5, 7, 9 or 11)."""
        return 2 * self.number - 1

    def previous(self) -> "Period":
        if self.number == 1:
            return Period(self.year - 1, PERIODS_PER_YEAR)
        return Period(self.year, self.number - 1)

    def __str__(self) -> str:
        return f"{self.year}-{self.number}"


def previous(period: "str | Period") -> Period:
    """Return the period preceding ``period``.

    >>> str(previous("2024-1"))
    '2023-6'
    >>> str(previous("2024-4"))
    '2024-3'
    """
    return Period.parse(period).previous()


__all__ = ["PERIODS_PER_YEAR", "Period", "previous"]
