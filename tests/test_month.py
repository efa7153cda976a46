"""Tests for reference month arithmetic."""

from datetime import date

import pytest

from event_calendar.models.month import Month

ALL_MONTHS = [Month(year=y, month=m) for y in (1999, 2000, 2023, 2024, 2100) for m in range(1, 13)]


class TestNavigation:
    def test_previous_of_january_is_december_of_previous_year(self):
        assert Month(year=2024, month=1).previous() == Month(year=2023, month=12)

    def test_next_of_december_is_january_of_next_year(self):
        assert Month(year=2023, month=12).next() == Month(year=2024, month=1)

    def test_mid_year_steps(self):
        assert Month(year=2024, month=3).previous() == Month(year=2024, month=2)
        assert Month(year=2024, month=3).next() == Month(year=2024, month=4)

    @pytest.mark.parametrize("month", ALL_MONTHS, ids=str)
    def test_round_trip(self, month):
        assert month.next().previous() == month
        assert month.previous().next() == month

    def test_shift_by_many_months(self):
        assert Month(year=2024, month=11).shift(14) == Month(year=2026, month=1)
        assert Month(year=2024, month=2).shift(-26) == Month(year=2021, month=12)

    def test_always_day_one(self):
        # March 31 minus one month must land in February, not March
        month = Month.current(date(2024, 3, 31)).previous()
        assert month.first_day == date(2024, 2, 1)

    def test_navigation_stops_at_supported_years(self):
        with pytest.raises(ValueError, match="9999"):
            Month(year=9999, month=12).next()
        with pytest.raises(ValueError, match="years run"):
            Month(year=1, month=1).previous()
        assert Month(year=9999, month=11).next() == Month(year=9999, month=12)


class TestCalendarArithmetic:
    def test_leap_february(self):
        assert Month(year=2024, month=2).days_in_month == 29

    def test_common_february(self):
        assert Month(year=2023, month=2).days_in_month == 28

    def test_century_years(self):
        assert Month(year=2000, month=2).days_in_month == 29
        assert Month(year=2100, month=2).days_in_month == 28

    def test_first_weekday_is_sunday_based(self):
        assert Month(year=2024, month=3).first_weekday == 5  # Friday
        assert Month(year=2024, month=9).first_weekday == 0  # Sunday
        assert Month(year=2024, month=4).first_weekday == 1  # Monday

    def test_day_key_is_zero_padded(self):
        assert Month(year=2024, month=3).day_key(5) == "2024-03-05"


class TestConstruction:
    def test_current_uses_given_date(self):
        assert Month.current(date(2025, 7, 19)) == Month(year=2025, month=7)

    def test_parse(self):
        assert Month.parse("2024-03") == Month(year=2024, month=3)

    @pytest.mark.parametrize("value", ["2024", "2024-13", "march", "2024-03-05"])
    def test_parse_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            Month.parse(value)

    def test_label_and_str(self):
        month = Month(year=2024, month=3)
        assert month.label == "March 2024"
        assert str(month) == "2024-03"

    def test_hashable(self):
        assert len({Month(year=2024, month=3), Month(year=2024, month=3)}) == 1
