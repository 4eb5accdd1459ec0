"""
SubTrack Backend: Period Value Type
===================================

What:  A month/year calendar value used for subscription start and end bounds.
Why:   Subscriptions are billed per month, so day-of-month never matters.
       A dedicated type keeps the arithmetic (carry/borrow across years) in
       one tested place instead of scattered datetime juggling.
How:   Immutable dataclass with pure arithmetic helpers and two text encodings:
         compact  "MM-YYYY"     used by the HTTP API
         ISO      "YYYY-MM-01"  used by the storage backends

Invariant:
    A Period stands for the first day of its month. The month is NOT range
    checked on construction or parsing; the storage check constraints are the
    only place an out-of-range month (e.g. 13) is rejected.
"""

import re
from dataclasses import dataclass
from enum import Enum

_INT_TOKEN = re.compile(r"[+-]?\d+")


class PeriodErrorKind(str, Enum):
    """Why a period string could not be parsed."""

    INVALID_FORMAT = "invalid_format"
    INVALID_MONTH = "invalid_month"
    INVALID_YEAR = "invalid_year"


_KIND_MESSAGES = {
    PeriodErrorKind.INVALID_FORMAT: "invalid date string format",
    PeriodErrorKind.INVALID_MONTH: "invalid month",
    PeriodErrorKind.INVALID_YEAR: "invalid year",
}


class PeriodParseError(ValueError):
    """
    Raised by Period.parse_compact / Period.parse_iso.

    Attributes:
        kind:  PeriodErrorKind telling which segment was wrong
        value: The raw string that failed to parse
    """

    def __init__(self, kind: PeriodErrorKind, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"{_KIND_MESSAGES[kind]}: {value!r}")


def _parse_int(token: str, kind: PeriodErrorKind, value: str) -> int:
    if not _INT_TOKEN.fullmatch(token):
        raise PeriodParseError(kind, value)
    return int(token)


@dataclass(frozen=True)
class Period:
    """A calendar month. Equality and hashing come from the (month, year) pair."""

    month: int
    year: int

    @property
    def ordinal(self) -> int:
        """Total-month index used for comparisons and month differences."""
        return self.year * 12 + self.month

    def add_months(self, years: int, months: int) -> "Period":
        """
        Return a new Period shifted by `years` and `months`.

        The month is normalized into 1..12 with floor division, so negative
        deltas borrow from the year and deltas beyond +/-12 carry several years:

            Period(10, 2023).add_months(0, 5)   -> Period(3, 2024)
            Period(1, 2023).add_months(0, -15)  -> Period(10, 2021)
            Period(1, 2023).add_months(0, -1)   -> Period(12, 2022)
        """
        zero_based = (self.year + years) * 12 + (self.month - 1) + months
        year, month_index = divmod(zero_based, 12)
        return Period(month=month_index + 1, year=year)

    def greater_than(self, other: "Period") -> bool:
        """Strict comparison: year first, then month within the same year."""
        if self.year != other.year:
            return self.year > other.year
        return self.month > other.month

    def equal_to(self, other: "Period") -> bool:
        return self.month == other.month and self.year == other.year

    def to_compact_string(self) -> str:
        return f"{self.month:02d}-{self.year:04d}"

    def to_iso_string(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-01"

    @classmethod
    def parse_compact(cls, value: str) -> "Period":
        """Parse "MM-YYYY". Raises PeriodParseError."""
        items = value.split("-")
        if len(items) != 2:
            raise PeriodParseError(PeriodErrorKind.INVALID_FORMAT, value)
        month = _parse_int(items[0], PeriodErrorKind.INVALID_MONTH, value)
        year = _parse_int(items[1], PeriodErrorKind.INVALID_YEAR, value)
        return cls(month=month, year=year)

    @classmethod
    def parse_iso(cls, value: str) -> "Period":
        """Parse "YYYY-MM-DD"; the day segment is ignored. Raises PeriodParseError."""
        items = value.split("-")
        if len(items) != 3:
            raise PeriodParseError(PeriodErrorKind.INVALID_FORMAT, value)
        month = _parse_int(items[1], PeriodErrorKind.INVALID_MONTH, value)
        year = _parse_int(items[0], PeriodErrorKind.INVALID_YEAR, value)
        return cls(month=month, year=year)

    def __str__(self) -> str:
        return self.to_compact_string()


def months_between(a: Period, b: Period) -> int:
    """Absolute number of calendar months separating two periods (order-independent)."""
    return abs(a.ordinal - b.ordinal)
