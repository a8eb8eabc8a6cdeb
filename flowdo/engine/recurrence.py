"""Recurrence rule matching and occurrence computation."""

from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from flowdo.db.models import (
    DailyPattern,
    MonthlyPattern,
    RecurringPattern,
    WeeklyPattern,
    YearlyPattern,
)
from flowdo.utils.constants import DEFAULT_TOLERANCE, MAX_SEARCH_DAYS_PER_INTERVAL
from flowdo.utils.time_utils import (
    at_time,
    clip_day,
    months_between,
    sunday_weekday,
    to_date,
    weeks_between,
)


def matches(pattern: RecurringPattern, day: date | datetime) -> bool:
    """Check if a calendar day satisfies a pattern.

    Intervals are not considered here; see is_scheduled_on. A day can only
    equal day_of_month if that day exists in its month.
    """
    if isinstance(pattern, DailyPattern):
        return True

    # Weekly and custom
    if isinstance(pattern, WeeklyPattern):
        if pattern.days_of_week:
            return sunday_weekday(day) in pattern.days_of_week
        return True

    if isinstance(pattern, MonthlyPattern):
        if pattern.day_of_month is not None:
            return day.day == pattern.day_of_month
        return True

    if isinstance(pattern, YearlyPattern):
        if pattern.month_of_year is not None and day.month != pattern.month_of_year:
            return False
        if pattern.day_of_month is not None and day.day != pattern.day_of_month:
            return False
        return True

    # Unrecognised kind
    return True


def is_scheduled_on(
    pattern: RecurringPattern, day: date | datetime, anchor: date | datetime
) -> bool:
    """Check if a pattern has an occurrence on a day.

    Adds interval alignment and month-end clipping to matches(). Intervals
    count from the anchor (the item's original due date):
    - daily: every `interval` days from the anchor
    - weekly/custom: listed weekdays of every `interval`-th Sunday-start week
    - monthly: every `interval`-th month, on day_of_month (or the anchor's day)
    - yearly: every `interval`-th year, on month_of_year / day_of_month,
      falling back to the anchor's month and day when both are omitted

    Days before the anchor are never scheduled.
    """
    day = to_date(day)
    anchor = to_date(anchor)

    if day < anchor:
        return False

    interval = pattern.interval

    if isinstance(pattern, DailyPattern):
        return (day - anchor).days % interval == 0

    if isinstance(pattern, WeeklyPattern):
        return weeks_between(anchor, day) % interval == 0 and matches(pattern, day)

    if isinstance(pattern, MonthlyPattern):
        if months_between(anchor, day) % interval:
            return False
        target_day = pattern.day_of_month or anchor.day
        return day.day == clip_day(day.year, day.month, target_day)

    if isinstance(pattern, YearlyPattern):
        if (day.year - anchor.year) % interval:
            return False

        if pattern.month_of_year is None and pattern.day_of_month is None:
            target_month, target_day = anchor.month, anchor.day
        else:
            # Only day_of_month given: that day in every month
            target_month = pattern.month_of_year
            target_day = pattern.day_of_month or anchor.day

        if target_month is not None and day.month != target_month:
            return False
        return day.day == clip_day(day.year, day.month, target_day)

    return matches(pattern, day)


def is_past_end(pattern: RecurringPattern, day: date | datetime) -> bool:
    """Check if a day is on or after the pattern's exclusive end date."""
    return pattern.end_date is not None and to_date(day) >= pattern.end_date


def is_pattern_expired(
    pattern: RecurringPattern, from_date: date | datetime, completed_occurrences: int = 0
) -> bool:
    """Check if a pattern has reached its end condition.

    Either from_date has reached end_date, or the completed occurrences have
    used up the allowed count.
    """
    if is_past_end(pattern, from_date):
        return True

    if pattern.occurrences is not None and completed_occurrences >= pattern.occurrences:
        return True

    return False


def next_occurrence(
    pattern: RecurringPattern,
    now: datetime,
    *,
    anchor: date | datetime | None = None,
    tolerance: timedelta = DEFAULT_TOLERANCE,
    completed_occurrences: int = 0,
) -> datetime | None:
    """Compute the next notification instant for a pattern.

    A trigger at today's notify_at that passed no more than `tolerance` ago is
    still returned, so it registers as due on this check. Otherwise the first
    scheduled day whose notify_at instant is after now is used.

    Args:
        pattern: The recurrence rule
        now: Current local time
        anchor: Date intervals count from; defaults to now's date
        tolerance: How late a trigger may be and still count
        completed_occurrences: Occurrences already completed, for the count limit

    Returns:
        The trigger instant, or None when the rule carries no notify_at or has
        expired
    """
    if pattern.notify_at is None:
        return None

    if pattern.occurrences is not None and completed_occurrences >= pattern.occurrences:
        return None

    anchor_day = to_date(anchor) if anchor is not None else now.date()
    candidate = _find_candidate(pattern, now, anchor_day, tolerance)

    if candidate is None or is_past_end(pattern, candidate):
        return None

    return candidate


def _find_candidate(
    pattern: RecurringPattern, now: datetime, anchor_day: date, tolerance: timedelta
) -> datetime | None:
    today = now.date()
    today_candidate = at_time(today, pattern.notify_at)

    if today_candidate <= now:
        if now - today_candidate <= tolerance and is_scheduled_on(pattern, today, anchor_day):
            return today_candidate
        day = today + timedelta(days=1)
    else:
        day = today

    day = max(day, anchor_day)
    horizon = MAX_SEARCH_DAYS_PER_INTERVAL * (pattern.interval + 1)

    for _ in range(horizon):
        if is_past_end(pattern, day):
            return None
        if is_scheduled_on(pattern, day, anchor_day):
            return at_time(day, pattern.notify_at)
        day += timedelta(days=1)

    return None


def advance_due_date(
    pattern: RecurringPattern, from_date: datetime, completed_occurrences: int = 0
) -> datetime | None:
    """Get the due date following from_date once its occurrence is completed.

    The time of day of from_date is preserved.

    Examples (from_date -> result):
        daily, interval 3:           Jan 1 -> Jan 4
        weekly on Mon/Fri, from Wed: -> Fri of the same week
        weekly on Mon, interval 2:   Mon -> Mon two weeks later
        monthly on the 31st:         Jan 31 2024 -> Feb 29 2024
        yearly on Feb 29:            Feb 29 2024 -> Feb 28 2025

    Args:
        pattern: The recurrence rule
        from_date: Current due date
        completed_occurrences: Occurrences completed so far, including this one

    Returns:
        Next due date, or None if the pattern has expired
    """
    if is_pattern_expired(pattern, from_date, completed_occurrences):
        return None

    interval = pattern.interval

    if isinstance(pattern, WeeklyPattern):
        next_date = _next_weekly(from_date, interval, pattern.days_of_week)

    elif isinstance(pattern, MonthlyPattern):
        target_day = pattern.day_of_month or from_date.day
        # relativedelta clips an absolute day to the month's length
        next_date = from_date + relativedelta(months=interval, day=target_day)

    elif isinstance(pattern, YearlyPattern):
        target_day = pattern.day_of_month or from_date.day
        if pattern.month_of_year is None and pattern.day_of_month is not None:
            # That day in every month of aligned years, as is_scheduled_on has it
            next_date = from_date + relativedelta(months=1, day=target_day)
            if next_date.year != from_date.year:
                next_date = from_date + relativedelta(years=interval, month=1, day=target_day)
        else:
            target_month = pattern.month_of_year or from_date.month
            next_date = from_date + relativedelta(
                years=interval, month=target_month, day=target_day
            )

    else:
        # Daily, and unrecognised kinds
        next_date = from_date + timedelta(days=interval)

    if is_past_end(pattern, next_date):
        return None

    return next_date


def _next_weekly(from_date: datetime, interval: int, days_of_week: frozenset[int]) -> datetime:
    if not days_of_week:
        return from_date + timedelta(weeks=interval)

    ordered = sorted(days_of_week)
    current = sunday_weekday(from_date)

    # A later listed day in the current week
    for day in ordered:
        if day > current:
            return from_date + timedelta(days=day - current)

    # First listed day of the next interval week
    days_until_next_week = 7 - current + ordered[0]
    return from_date + timedelta(days=days_until_next_week + (interval - 1) * 7)
