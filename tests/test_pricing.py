"""
Unit tests for slot and reservation pricing.
"""

from datetime import date, datetime, time, timezone

import pytest

from courtside.models.facility import DayType, FacilityPricing
from courtside.services.reservation.pricing import (
    day_type_for,
    parse_time_of_day,
    price_for_slot,
    to_hhmmss,
    total_price,
)


def rule(day_type, start, end, price):
    return FacilityPricing(day_type=day_type.value, start_hour=start, end_hour=end, price_per_hour=price)


WEEKDAY_RULES = [
    rule(DayType.WEEKDAY, "08:00:00", "18:00:00", 10.0),
    rule(DayType.WEEKDAY, "18:00:00", "22:00:00", 15.0),
    rule(DayType.WEEKEND, "09:00:00", "20:00:00", 18.0),
]


class TestDayType:
    """Test weekday/weekend classification."""

    def test_saturday_and_sunday_are_weekend(self):
        assert day_type_for(date(2030, 1, 5)) == DayType.WEEKEND
        assert day_type_for(date(2030, 1, 6)) == DayType.WEEKEND

    def test_monday_to_friday_are_weekdays(self):
        for day in range(7, 12):
            assert day_type_for(date(2030, 1, day)) == DayType.WEEKDAY


class TestTimeFormatting:
    """Test normalisation of time-of-day values."""

    def test_hhmm_gets_seconds_appended(self):
        assert to_hhmmss("08:30") == "08:30:00"

    def test_hhmmss_is_unchanged(self):
        assert to_hhmmss("08:30:15") == "08:30:15"

    def test_malformed_string_is_left_alone(self):
        assert to_hhmmss("8:00") == "8:00"

    def test_time_and_datetime(self):
        assert to_hhmmss(time(7, 5)) == "07:05:00"
        assert to_hhmmss(datetime(2030, 1, 1, 19, 0, tzinfo=timezone.utc)) == "19:00:00"

    def test_parse_accepts_both_formats(self):
        assert parse_time_of_day("08:00") == time(8, 0)
        assert parse_time_of_day("22:00:00") == time(22, 0)

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError, match="invalid time format"):
            parse_time_of_day("8am")


class TestPriceForSlot:
    """Test hourly rate lookup."""

    def test_rate_inside_interval(self):
        assert price_for_slot(DayType.WEEKDAY, "09:00", WEEKDAY_RULES) == 10.0
        assert price_for_slot(DayType.WEEKDAY, "18:00", WEEKDAY_RULES) == 15.0

    def test_end_hour_is_exclusive(self):
        assert price_for_slot(DayType.WEEKDAY, "17:59:59", WEEKDAY_RULES) == 10.0
        assert price_for_slot(DayType.WEEKDAY, "22:00:00", WEEKDAY_RULES) == 0.0

    def test_day_type_must_match(self):
        assert price_for_slot(DayType.WEEKEND, "08:00", WEEKDAY_RULES) == 0.0
        assert price_for_slot(DayType.WEEKEND, "09:00", WEEKDAY_RULES) == 18.0

    def test_no_matching_rule_is_free(self):
        assert price_for_slot(DayType.WEEKDAY, "06:00", WEEKDAY_RULES) == 0.0
        assert price_for_slot(DayType.WEEKDAY, "06:00", []) == 0.0

    def test_first_matching_rule_wins(self):
        """Overlapping rules resolve to whichever comes first."""
        rules = [
            rule(DayType.WEEKDAY, "08:00:00", "20:00:00", 12.0),
            rule(DayType.WEEKDAY, "10:00:00", "12:00:00", 30.0),
        ]
        assert price_for_slot(DayType.WEEKDAY, "11:00", rules) == 12.0

    def test_hhmm_rules_are_normalised(self):
        rules = [rule(DayType.WEEKDAY, "08:00", "12:00", 11.0)]
        assert price_for_slot(DayType.WEEKDAY, "11:00:00", rules) == 11.0


class TestTotalPrice:
    """Test reservation totals."""

    def test_whole_interval_charged_at_start_rate(self):
        """17:00-19:00 crosses into the evening rate but is charged 2h at 10.0."""
        start = datetime(2030, 1, 1, 17, 0, tzinfo=timezone.utc)
        end = datetime(2030, 1, 1, 19, 0, tzinfo=timezone.utc)
        assert total_price(start, end, WEEKDAY_RULES) == 20.0

    def test_fractional_hours(self):
        start = datetime(2030, 1, 1, 18, 0, tzinfo=timezone.utc)
        end = datetime(2030, 1, 1, 19, 30, tzinfo=timezone.utc)
        assert total_price(start, end, WEEKDAY_RULES) == 22.5

    def test_rounded_to_cents(self):
        rules = [rule(DayType.WEEKDAY, "08:00:00", "18:00:00", 10.0)]
        start = datetime(2030, 1, 1, 9, 0, tzinfo=timezone.utc)
        end = datetime(2030, 1, 1, 9, 20, tzinfo=timezone.utc)
        assert total_price(start, end, rules) == 3.33

    def test_naive_datetimes_read_as_utc(self):
        assert total_price(datetime(2030, 1, 5, 10, 0), datetime(2030, 1, 5, 11, 0), WEEKDAY_RULES) == 18.0

    def test_uncovered_start_is_free(self):
        start = datetime(2030, 1, 1, 6, 0, tzinfo=timezone.utc)
        end = datetime(2030, 1, 1, 9, 0, tzinfo=timezone.utc)
        assert total_price(start, end, WEEKDAY_RULES) == 0.0
