"""Calendar and wall-clock time utilities.

All datetimes are naive local wall-clock values; no timezone conversion happens
anywhere in flowdo.
"""

import calendar
import re
from datetime import date, datetime, time, timedelta
from typing import Iterator

from dateutil.parser import isoparse
from dateutil.rrule import DAILY, rrule

_NOTIFY_AT_RE = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime string into a naive datetime.

    Offsets such as a trailing "Z" are dropped, keeping the wall-clock reading.

    Raises:
        ValueError: If the string is not ISO-8601
    """
    return isoparse(value).replace(tzinfo=None)


def parse_notify_at(value: str) -> time:
    """Parse a 24-hour "HH:MM" string into a time.

    Raises:
        ValueError: If the string is not exactly HH:MM
    """
    match = _NOTIFY_AT_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM)")
    return time(int(match.group(1)), int(match.group(2)))


def format_notify_at(value: time) -> str:
    """Format a time of day as "HH:MM"."""
    return value.strftime("%H:%M")


def to_date(value: date | datetime) -> date:
    """Drop the time part of a datetime; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def at_time(day: date, time_of_day: time) -> datetime:
    """Combine a calendar day with a time of day."""
    return datetime.combine(day, time_of_day)


def days_in_month(year: int, month: int) -> int:
    """Number of days in a month.

    February has 29 days in years divisible by 4, except centuries not
    divisible by 400.
    """
    return calendar.monthrange(year, month)[1]


def clip_day(year: int, month: int, day: int) -> int:
    """Clip a requested day-of-month to the month's last day.

    Examples:
        clip_day(2024, 2, 31) -> 29
        clip_day(2026, 2, 31) -> 28
        clip_day(2026, 4, 31) -> 30
    """
    return min(day, days_in_month(year, month))


def sunday_weekday(day: date | datetime) -> int:
    """Weekday index with Sunday=0 ... Saturday=6."""
    return (day.weekday() + 1) % 7


def start_of_week(day: date) -> date:
    """The Sunday starting the week that contains day."""
    return day - timedelta(days=sunday_weekday(day))


def weeks_between(start: date, end: date) -> int:
    """Whole Sunday-start calendar weeks from start's week to end's week."""
    return (start_of_week(end) - start_of_week(start)).days // 7


def months_between(start: date, end: date) -> int:
    """Calendar months from start's month to end's month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def date_range(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end, both inclusive."""
    if end < start:
        return
    for dt in rrule(DAILY, dtstart=at_time(start, time.min), until=at_time(end, time.min)):
        yield dt.date()


def format_duration(delta: timedelta) -> str:
    """Format a duration into a human-readable string.

    Examples:
        30 seconds -> "30 seconds"
        15 minutes -> "15 minutes"
        60 minutes -> "1 hour"
        1440 minutes -> "1 day"
    """
    seconds = int(delta.total_seconds())
    if seconds < 60:
        return f"{seconds} second{'s' if seconds != 1 else ''}"

    minutes = seconds / 60
    if minutes < 60:
        if minutes == int(minutes):
            return f"{int(minutes)} minute{'s' if minutes != 1 else ''}"
        return f"{minutes:.1f} minutes"
    elif minutes < 1440:
        hours = minutes / 60
        if hours == int(hours):
            return f"{int(hours)} hour{'s' if hours != 1 else ''}"
        return f"{hours:.1f} hours"
    else:
        days = minutes / 1440
        if days == int(days):
            return f"{int(days)} day{'s' if days != 1 else ''}"
        return f"{days:.1f} days"
