"""Completion analytics - totals, completion rate, streak, daily breakdown."""

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable

from flowdo.db.models import (
    AnalyticsData,
    CompletionHistoryEntry,
    DailyStats,
    RecurringOccurrence,
    TodoItem,
)
from flowdo.engine.recurrence import is_past_end, matches
from flowdo.utils.constants import STATUS_COMPLETED, STATUS_MISSED, STATUS_PENDING
from flowdo.utils.time_utils import date_range, to_date


def _completed_regular(items: Iterable[TodoItem]) -> list[TodoItem]:
    """Completed one-off items that carry a due date."""
    return [
        item
        for item in items
        if item.completed and item.recurring_pattern is None and item.due_at is not None
    ]


def completion_rate(completed: int, missed: int) -> float:
    """Percentage of expected occurrences that were completed.

    Nothing expected counts as a perfect 100.
    """
    expected = completed + missed
    if expected == 0:
        return 100.0
    return completed * 100 / expected


def current_streak(completion_days: set[date], today: date) -> int:
    """Count consecutive days with a completion, walking back from today.

    If today has no completion yet the walk starts from yesterday, so an
    unfinished day does not break the streak.
    """
    day = today if today in completion_days else today - timedelta(days=1)

    streak = 0
    while day in completion_days:
        streak += 1
        day -= timedelta(days=1)

    return streak


def compute_analytics(
    items: Iterable[TodoItem],
    history_entries: Iterable[CompletionHistoryEntry],
    start: date | datetime,
    end: date | datetime,
    now: datetime,
) -> AnalyticsData:
    """Aggregate completions between start and end (inclusive, by date).

    Args:
        items: All task records
        history_entries: Completion history of recurring items
        start: First day of the range
        end: Last day of the range
        now: Current local time; entries scheduled before it without a
            completion count as missed

    Returns:
        AnalyticsData for the range; the streak looks at all history
    """
    start, end = to_date(start), to_date(end)
    items = list(items)
    history_entries = list(history_entries)

    regular_done = _completed_regular(items)

    regular_by_day: Counter[date] = Counter()
    recurring_done_by_day: Counter[date] = Counter()
    recurring_missed_by_day: Counter[date] = Counter()

    for item in regular_done:
        day = item.due_at.date()  # type: ignore[union-attr]
        if start <= day <= end:
            regular_by_day[day] += 1

    for entry in history_entries:
        day = entry.scheduled_date.date()
        if not start <= day <= end:
            continue
        if entry.completed_at is not None:
            recurring_done_by_day[day] += 1
        elif entry.scheduled_date < now:
            recurring_missed_by_day[day] += 1

    total_regular = sum(regular_by_day.values())
    total_recurring = sum(recurring_done_by_day.values())
    total_missed = sum(recurring_missed_by_day.values())

    completion_days = {item.due_at.date() for item in regular_done}  # type: ignore[union-attr]
    completion_days.update(
        entry.completed_at.date() for entry in history_entries if entry.completed_at is not None
    )

    breakdown = [
        DailyStats(
            date=day,
            regular_completed=regular_by_day[day],
            recurring_completed=recurring_done_by_day[day],
            recurring_missed=recurring_missed_by_day[day],
        )
        for day in date_range(start, end)
    ]

    return AnalyticsData(
        total_regular_completed=total_regular,
        total_recurring_completed=total_recurring,
        total_recurring_missed=total_missed,
        completion_rate=completion_rate(total_regular + total_recurring, total_missed),
        current_streak=current_streak(completion_days, now.date()),
        daily_breakdown=breakdown,
    )


def occurrences_with_status(
    items: Iterable[TodoItem],
    history_entries: Iterable[CompletionHistoryEntry],
    start: date | datetime,
    end: date | datetime,
    today: date | datetime,
) -> list[RecurringOccurrence]:
    """List the expected occurrences of every recurring item in a range.

    Each day that matches an item's pattern, from its due date up to its end
    date, becomes one occurrence. Occurrences are merged with the history by
    (todo_id, day):
    - completed: the history records a completion time
    - missed: no completion and the day is before today
    - pending: no completion and the day is today or later

    Returns:
        Occurrences, newest first
    """
    start, end, today = to_date(start), to_date(end), to_date(today)

    by_key: dict[tuple[str, date], CompletionHistoryEntry] = {}
    for entry in history_entries:
        by_key[(entry.todo_id, entry.scheduled_date.date())] = entry

    occurrences = []

    for item in items:
        pattern = item.recurring_pattern
        if pattern is None:
            continue

        todo_id = str(item.id)
        first_day = item.due_at.date() if item.due_at else start

        for day in date_range(max(start, first_day), end):
            if is_past_end(pattern, day):
                break
            if not matches(pattern, day):
                continue

            entry = by_key.get((todo_id, day))
            completed_at = entry.completed_at if entry else None

            if completed_at is not None:
                status = STATUS_COMPLETED
            elif day < today:
                status = STATUS_MISSED
            else:
                status = STATUS_PENDING

            occurrences.append(
                RecurringOccurrence(
                    todo_id=todo_id,
                    todo_text=item.text,
                    scheduled_date=day,
                    completed_at=completed_at,
                    status=status,
                    has_completion_record=entry is not None,
                )
            )

    occurrences.sort(key=lambda o: o.scheduled_date, reverse=True)
    return occurrences
