"""Reminder due detection - which reminders fire on this check."""

from datetime import datetime, timedelta
from typing import Container, Iterable, Mapping

from flowdo.db.models import DueReminder, NotificationRecord, TodoItem
from flowdo.engine.recurrence import next_occurrence
from flowdo.utils.constants import (
    DEFAULT_NOTIFICATION_BODY,
    DEFAULT_TOLERANCE,
    NOTIFICATION_TAG_PREFIX,
)


def is_due(trigger: datetime, now: datetime, tolerance: timedelta = DEFAULT_TOLERANCE) -> bool:
    """Check if a trigger instant falls inside the tolerance window.

    Both ends are inclusive: a trigger exactly at now, or exactly `tolerance`
    ago, is due.
    """
    return trigger <= now and now - trigger <= tolerance


def get_effective_reminder_time(
    item: TodoItem,
    now: datetime,
    tolerance: timedelta = DEFAULT_TOLERANCE,
    completed_occurrences: int = 0,
) -> datetime | None:
    """Resolve when an item's reminder should fire.

    An explicit reminder_at always wins. Otherwise the item's recurrence rule
    is asked for its next occurrence, counting intervals from the item's due
    date.
    """
    if item.reminder_at is not None:
        return item.reminder_at

    pattern = item.recurring_pattern
    if pattern is None or pattern.notify_at is None:
        return None

    return next_occurrence(
        pattern,
        now,
        anchor=item.due_at,
        tolerance=tolerance,
        completed_occurrences=completed_occurrences,
    )


def get_due_reminders(
    items: Iterable[TodoItem],
    now: datetime,
    shown_ids: Container[str],
    tolerance: timedelta = DEFAULT_TOLERANCE,
    completed_counts: Mapping[str, int] | None = None,
) -> list[DueReminder]:
    """Collect the reminders that should be shown on this check.

    Args:
        items: Candidate task records
        now: Current local time
        shown_ids: Stringified ids already notified; only read
        tolerance: How late a trigger may be and still count
        completed_counts: Completed occurrences per stringified item id, for
            rules with an occurrence limit

    Returns:
        Due reminders, in item order
    """
    due = []

    for item in items:
        if item.completed:
            continue

        if str(item.id) in shown_ids:
            continue

        completed = completed_counts.get(str(item.id), 0) if completed_counts else 0
        trigger = get_effective_reminder_time(item, now, tolerance, completed)
        if trigger is None or not is_due(trigger, now, tolerance):
            continue

        pattern = item.recurring_pattern
        recurring = (
            item.reminder_at is None
            and pattern is not None
            and pattern.notify_at is not None
        )

        due.append(
            DueReminder(
                todo_id=item.id,
                todo_text=item.text,
                reminder_at=trigger,
                due_at=item.due_at,
                is_recurring=recurring,
                recurring_type=pattern.type if recurring else None,
            )
        )

    return due


def format_notification_body(due_at: datetime | None, now: datetime) -> str:
    """Describe how far away a reminder's due date is."""
    if due_at is None:
        return DEFAULT_NOTIFICATION_BODY

    remaining = due_at - now
    if remaining < timedelta(0):
        return "This task is overdue!"

    # Half-up rounding, so 1.5 hours reads as 2
    hours = int(remaining / timedelta(hours=1) + 0.5)
    if hours < 1:
        return "Due in less than an hour"
    if hours == 1:
        return "Due in 1 hour"
    if hours < 24:
        return f"Due in {hours} hours"

    days = int(hours / 24 + 0.5)
    if days == 1:
        return "Due tomorrow"
    return f"Due in {days} days"


def build_notification(reminder: DueReminder, now: datetime) -> NotificationRecord:
    """Build the record handed to the notification provider."""
    return NotificationRecord(
        title=reminder.todo_text,
        body=format_notification_body(reminder.due_at, now),
        tag=f"{NOTIFICATION_TAG_PREFIX}{reminder.todo_id}",
        data={"todoId": reminder.todo_id},
    )
