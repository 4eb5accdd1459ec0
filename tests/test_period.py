"""
SubTrack Backend: Period Value Type Tests
=========================================

What:  Tests for Period arithmetic, comparisons, encodings and parsing.
Why:   Every stored date and every cost calculation goes through Period.

What we test:
    ✅ add_months carry, borrow and multi-year deltas
    ✅ add_months never mutates the receiver
    ✅ greater_than / equal_to
    ✅ compact and ISO encodings (zero padding)
    ✅ parse failures tagged by kind
    ✅ months_between is commutative
"""

import pytest

from subtrack.domain import Period, PeriodErrorKind, PeriodParseError, months_between


class TestAddMonths:
    """Month arithmetic with year carry and borrow."""

    @pytest.mark.parametrize(
        "start, years, months, expected",
        [
            (Period(10, 2023), 0, 5, Period(3, 2024)),
            (Period(1, 2023), 0, -1, Period(12, 2022)),
            (Period(1, 2023), 0, -15, Period(10, 2021)),
            (Period(6, 2023), 0, 30, Period(12, 2025)),
            (Period(12, 2023), 0, 1, Period(1, 2024)),
            (Period(5, 2023), 2, 0, Period(5, 2025)),
            (Period(5, 2023), -1, -5, Period(12, 2021)),
            (Period(3, 2024), 0, 0, Period(3, 2024)),
        ],
    )
    def test_add_months(self, start, years, months, expected):
        assert start.add_months(years, months) == expected

    def test_add_months_returns_new_value(self):
        """The receiver is immutable; arithmetic produces a new Period."""
        original = Period(10, 2023)
        shifted = original.add_months(0, 5)
        assert original == Period(10, 2023)
        assert shifted is not original

    def test_period_is_frozen(self):
        with pytest.raises(AttributeError):
            Period(1, 2024).month = 2


class TestComparisons:

    def test_greater_than_by_year(self):
        assert Period(1, 2025).greater_than(Period(12, 2024))
        assert not Period(12, 2024).greater_than(Period(1, 2025))

    def test_greater_than_by_month(self):
        assert Period(5, 2024).greater_than(Period(4, 2024))
        assert not Period(4, 2024).greater_than(Period(5, 2024))

    def test_greater_than_is_strict(self):
        assert not Period(4, 2024).greater_than(Period(4, 2024))

    def test_equal_to(self):
        assert Period(4, 2024).equal_to(Period(4, 2024))
        assert not Period(4, 2024).equal_to(Period(4, 2025))
        assert Period(4, 2024) == Period(4, 2024)


class TestEncodings:

    def test_compact_string_is_zero_padded(self):
        assert Period(7, 2025).to_compact_string() == "07-2025"
        assert str(Period(11, 2025)) == "11-2025"

    def test_iso_string_uses_first_day(self):
        assert Period(7, 2025).to_iso_string() == "2025-07-01"

    def test_parse_compact(self):
        assert Period.parse_compact("07-2025") == Period(7, 2025)
        assert Period.parse_compact("7-2025") == Period(7, 2025)

    def test_parse_iso_ignores_day(self):
        assert Period.parse_iso("2025-07-15") == Period(7, 2025)

    def test_round_trip_through_iso(self):
        period = Period(2, 2030)
        assert Period.parse_iso(period.to_iso_string()) == period

    def test_month_is_not_range_checked(self):
        """Range checks belong to storage, not to parsing."""
        assert Period.parse_compact("13-2025") == Period(13, 2025)


class TestParseErrors:

    @pytest.mark.parametrize(
        "value, kind",
        [
            ("2025", PeriodErrorKind.INVALID_FORMAT),
            ("07-2025-01", PeriodErrorKind.INVALID_FORMAT),
            ("", PeriodErrorKind.INVALID_FORMAT),
            ("ab-2025", PeriodErrorKind.INVALID_MONTH),
            ("07-20x5", PeriodErrorKind.INVALID_YEAR),
        ],
    )
    def test_parse_compact_failures(self, value, kind):
        with pytest.raises(PeriodParseError) as exc_info:
            Period.parse_compact(value)
        assert exc_info.value.kind == kind
        assert exc_info.value.value == value

    @pytest.mark.parametrize(
        "value, kind",
        [
            ("07-2025", PeriodErrorKind.INVALID_FORMAT),
            ("2025-xx-01", PeriodErrorKind.INVALID_MONTH),
            ("year-07-01", PeriodErrorKind.INVALID_YEAR),
        ],
    )
    def test_parse_iso_failures(self, value, kind):
        with pytest.raises(PeriodParseError) as exc_info:
            Period.parse_iso(value)
        assert exc_info.value.kind == kind

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            Period.parse_compact("nonsense")


class TestMonthsBetween:

    def test_same_period_is_zero(self):
        assert months_between(Period(3, 2024), Period(3, 2024)) == 0

    def test_across_years(self):
        assert months_between(Period(11, 2023), Period(2, 2024)) == 3

    def test_commutative(self):
        a, b = Period(1, 2020), Period(6, 2025)
        assert months_between(a, b) == months_between(b, a) == 65


class TestArithmeticProperties:
    """Laws that hold for every period, checked over a grid of values."""

    PERIODS = [Period(m, y) for y in (1999, 2024, 2100) for m in range(1, 13)]

    @pytest.mark.parametrize("delta", [-37, -12, -1, 0, 1, 11, 12, 18, 25])
    def test_add_then_subtract_is_identity(self, delta):
        for period in self.PERIODS:
            assert period.add_months(0, delta).add_months(0, -delta) == period

    def test_known_carries(self):
        assert Period(7, 2021).add_months(0, 18) == Period(1, 2023)
        assert months_between(Period(12, 2025), Period(8, 2026)) == 8

    def test_encodings_round_trip(self):
        for period in self.PERIODS:
            assert Period.parse_compact(period.to_compact_string()) == period
            assert Period.parse_iso(period.to_iso_string()) == period
