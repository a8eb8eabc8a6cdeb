"""Tests for time utilities."""

from datetime import date, datetime, time, timedelta

import pytest

from flowdo.utils.time_utils import (
    clip_day,
    date_range,
    days_in_month,
    format_duration,
    months_between,
    parse_iso_datetime,
    parse_notify_at,
    sunday_weekday,
    weeks_between,
)


def test_parse_notify_at():
    """Test parsing HH:MM times of day."""
    assert parse_notify_at("09:00") == time(9, 0)
    assert parse_notify_at("23:59") == time(23, 59)
    assert parse_notify_at("00:00") == time(0, 0)


def test_parse_notify_at_rejects_bad_input():
    """Test that malformed times of day are rejected."""
    for value in ("24:00", "9:00", "12:60", "noon", ""):
        with pytest.raises(ValueError):
            parse_notify_at(value)


def test_parse_iso_datetime_drops_offset():
    """Test that a UTC suffix keeps the wall-clock reading."""
    assert parse_iso_datetime("2026-01-21T09:00:00Z") == datetime(2026, 1, 21, 9, 0)
    assert parse_iso_datetime("2026-01-21") == datetime(2026, 1, 21)


def test_leap_years():
    """Test the Gregorian leap year rule for February."""
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2000, 2) == 29
    assert days_in_month(1900, 2) == 28
    assert days_in_month(2026, 2) == 28


def test_clip_day():
    """Test clipping a day-of-month to short months."""
    assert clip_day(2024, 2, 31) == 29
    assert clip_day(2026, 2, 31) == 28
    assert clip_day(2026, 4, 31) == 30
    assert clip_day(2026, 1, 31) == 31
    assert clip_day(2026, 2, 15) == 15


def test_sunday_weekday():
    """Test Sunday-based weekday numbering."""
    assert sunday_weekday(date(2026, 1, 18)) == 0  # Sunday
    assert sunday_weekday(date(2026, 1, 21)) == 3  # Wednesday
    assert sunday_weekday(datetime(2026, 1, 24, 12, 0)) == 6  # Saturday


def test_weeks_between_uses_sunday_start():
    """Test that week boundaries fall between Saturday and Sunday."""
    assert weeks_between(date(2026, 1, 17), date(2026, 1, 18)) == 1
    assert weeks_between(date(2026, 1, 18), date(2026, 1, 24)) == 0
    assert weeks_between(date(2026, 1, 21), date(2026, 2, 4)) == 2


def test_months_between():
    """Test month distance across a year boundary."""
    assert months_between(date(2025, 11, 30), date(2026, 2, 1)) == 3
    assert months_between(date(2026, 1, 1), date(2026, 1, 31)) == 0


def test_date_range_inclusive():
    """Test that both ends of a day range are included."""
    days = list(date_range(date(2024, 2, 27), date(2024, 3, 1)))

    assert days == [date(2024, 2, 27), date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]
    assert list(date_range(date(2024, 3, 2), date(2024, 3, 1))) == []


def test_format_duration():
    """Test duration formatting."""
    assert format_duration(timedelta(seconds=30)) == "30 seconds"
    assert format_duration(timedelta(minutes=1)) == "1 minute"
    assert format_duration(timedelta(minutes=15)) == "15 minutes"
    assert format_duration(timedelta(minutes=60)) == "1 hour"
    assert format_duration(timedelta(minutes=90)) == "1.5 hours"
    assert format_duration(timedelta(minutes=1440)) == "1 day"
    assert format_duration(timedelta(minutes=2880)) == "2 days"
