from datetime import datetime

import pytest

from workday_calculator.timemath import (
    MINUTES_PER_DAY,
    clock_minutes,
    format_12,
    format_24,
    format_clock,
    format_duration,
    normalize,
    parse_clock,
    parse_duration,
    to_minutes,
)


class TestToMinutes:
    def test_numbers_and_strings(self):
        assert to_minutes(8, 15) == 495
        assert to_minutes("8", "15") == 495

    @pytest.mark.parametrize("hours, minutes", [(None, None), ("", ""), ("abc", "x"), ([], {})])
    def test_non_numeric_is_zero(self, hours, minutes):
        assert to_minutes(hours, minutes) == 0

    def test_partial_input(self):
        assert to_minutes("2", None) == 120
        assert to_minutes(None, "45") == 45

    def test_not_a_number_is_zero(self):
        assert to_minutes(float("nan"), 5) == 5


class TestNormalize:
    def test_in_range_and_idempotent(self):
        for m in range(-5000, 5000, 7):
            n = normalize(m)
            assert 0 <= n < MINUTES_PER_DAY
            assert normalize(n) == n

    def test_large_negative(self):
        assert normalize(-1) == 1439
        assert normalize(-1440 * 10 - 30) == 1410

    def test_rollover(self):
        assert normalize(1440 + 75) == 75


class TestFormatting:
    def test_format_24(self):
        assert format_24(0) == "00:00"
        assert format_24(17 * 60 + 45) == "17:45"
        assert format_24(1440 + 5) == "00:05"

    def test_format_12(self):
        assert format_12(0) == "12:00 AM"
        assert format_12(9 * 60 + 5) == "9:05 AM"
        assert format_12(12 * 60) == "12:00 PM"
        assert format_12(18 * 60 + 30) == "6:30 PM"

    def test_format_clock_switch(self):
        assert format_clock(18 * 60, use_24_hour=True) == "18:00"
        assert format_clock(18 * 60, use_24_hour=False) == "6:00 PM"

    def test_format_24_round_trips_through_parse(self):
        for t in range(MINUTES_PER_DAY):
            assert parse_clock(format_24(t)) == t

    def test_format_12_names_same_instant(self):
        for t in range(0, MINUTES_PER_DAY, 13):
            clock, suffix = format_12(t).split(" ")
            hours, minutes = (int(part) for part in clock.split(":"))
            hours = hours % 12 + (12 if suffix == "PM" else 0)
            assert hours * 60 + minutes == t


class TestParseClock:
    @pytest.mark.parametrize("value", [None, "", "nonsense", "24:00", "12:60", "9", 930])
    def test_absent(self, value):
        assert parse_clock(value) is None

    def test_accepts_seconds_and_single_digit_hour(self):
        assert parse_clock("9:05") == 545
        assert parse_clock("09:05:30") == 545


class TestDurations:
    def test_format(self):
        assert format_duration(0) == "0h 0m"
        assert format_duration(495) == "8h 15m"
        assert format_duration(-5) == "-0h 5m"
        assert format_duration(29.6) == "0h 30m"
        assert format_duration(0.5) == "0h 1m"

    def test_round_trip(self):
        for d in range(0, 2000, 3):
            assert parse_duration(format_duration(d)) == d

    def test_negative_round_trip(self):
        assert parse_duration(format_duration(-95)) == -95

    @pytest.mark.parametrize("value", [None, "", "8h", "eight hours", "8.0h 0m"])
    def test_unparsable(self, value):
        assert parse_duration(value) is None


def test_clock_minutes_ignores_seconds():
    assert clock_minutes(datetime(2024, 1, 1, 17, 50, 59)) == 17 * 60 + 50
