"""Completion history for recurring items."""

import logging
from collections import Counter
from datetime import date, datetime
from typing import Any, Iterable

from flowdo.db.models import CompletionHistoryEntry, TodoItem
from flowdo.engine.recurrence import advance_due_date
from flowdo.utils.time_utils import parse_iso_datetime, to_date

logger = logging.getLogger(__name__)


class CompletionHistory:
    """Ordered log of scheduled occurrences and their completion times.

    Entries are keyed by (todo_id, scheduled_date); lookups match that pair
    exactly.
    """

    def __init__(self, entries: Iterable[CompletionHistoryEntry] = ()):
        self._entries: list[CompletionHistoryEntry] = list(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> list[CompletionHistoryEntry]:
        return list(self._entries)

    def add_entry(self, entry: CompletionHistoryEntry) -> None:
        """Record an occurrence, replacing any entry with the same key."""
        for index, existing in enumerate(self._entries):
            if existing.key == entry.key:
                self._entries[index] = entry
                return
        self._entries.append(entry)

    def find_entry(
        self, todo_id: str | int, scheduled_date: datetime
    ) -> CompletionHistoryEntry | None:
        key = (str(todo_id), scheduled_date)
        for entry in self._entries:
            if entry.key == key:
                return entry
        return None

    def update_entry(
        self, todo_id: str | int, scheduled_date: datetime, completed_at: datetime | None
    ) -> bool:
        """Set the completion time of an existing entry.

        Returns:
            True if an entry matched, False otherwise
        """
        key = (str(todo_id), scheduled_date)
        for index, entry in enumerate(self._entries):
            if entry.key == key:
                self._entries[index] = CompletionHistoryEntry(
                    todo_id=entry.todo_id,
                    scheduled_date=entry.scheduled_date,
                    completed_at=completed_at,
                )
                return True
        return False

    def delete_entry(self, todo_id: str | int, scheduled_date: datetime) -> bool:
        key = (str(todo_id), scheduled_date)
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.key != key]
        return len(self._entries) < before

    def delete_all_for_todo(self, todo_id: str | int) -> int:
        """Remove every entry of an item; returns how many were removed."""
        todo_id = str(todo_id)
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.todo_id != todo_id]
        return before - len(self._entries)

    def entries_for_todo(self, todo_id: str | int) -> list[CompletionHistoryEntry]:
        todo_id = str(todo_id)
        return [e for e in self._entries if e.todo_id == todo_id]

    def entries_in_range(self, start: date, end: date) -> list[CompletionHistoryEntry]:
        """Entries scheduled between start and end, both inclusive by date."""
        start, end = to_date(start), to_date(end)
        return [e for e in self._entries if start <= e.scheduled_date.date() <= end]

    def completed_count(self, todo_id: str | int) -> int:
        return sum(1 for e in self.entries_for_todo(todo_id) if e.completed_at is not None)

    def completed_counts(self) -> Counter[str]:
        """Completed occurrences per item id."""
        return Counter(e.todo_id for e in self._entries if e.completed_at is not None)

    def update_past_completion(
        self, todo_id: str | int, scheduled_date: datetime, completed: bool, now: datetime
    ) -> CompletionHistoryEntry:
        """Mark a past occurrence as completed or not completed.

        Updates the matching entry, or records a new one when the occurrence
        was never tracked.
        """
        completed_at = now if completed else None

        if not self.update_entry(todo_id, scheduled_date, completed_at):
            self.add_entry(
                CompletionHistoryEntry(
                    todo_id=str(todo_id),
                    scheduled_date=scheduled_date,
                    completed_at=completed_at,
                )
            )

        return self.find_entry(todo_id, scheduled_date)  # type: ignore


def complete_recurring_item(
    history: CompletionHistory, item: TodoItem, now: datetime
) -> datetime | None:
    """Record the completion of a recurring item's current occurrence.

    Args:
        history: Completion history to append to
        item: The recurring item being completed
        now: Completion time

    Returns:
        The item's next due date, or None when the series is finished
    """
    if item.recurring_pattern is None:
        raise ValueError(f"Item {item.id} is not recurring")

    scheduled = item.due_at or now
    history.add_entry(
        CompletionHistoryEntry(todo_id=str(item.id), scheduled_date=scheduled, completed_at=now)
    )

    next_due = advance_due_date(
        item.recurring_pattern, scheduled, history.completed_count(item.id)
    )

    if next_due is None:
        logger.info(f"Recurring item {item.id} finished its series")
    else:
        logger.debug(f"Recurring item {item.id} next due {next_due.isoformat()}")

    return next_due


def entry_to_dict(entry: CompletionHistoryEntry) -> dict[str, Any]:
    """Serialize an entry to its persisted shape."""
    return {
        "todoId": entry.todo_id,
        "scheduledDate": entry.scheduled_date.isoformat(),
        "completedAt": entry.completed_at.isoformat() if entry.completed_at else None,
    }


def entry_from_dict(raw: Any) -> CompletionHistoryEntry:
    """Build an entry from its persisted shape.

    Raises:
        ValueError: If the record is malformed
    """
    if not isinstance(raw, dict):
        raise ValueError(f"History entry must be an object, got {type(raw).__name__}")

    todo_id = raw.get("todoId")
    scheduled = raw.get("scheduledDate")
    completed = raw.get("completedAt")

    if not isinstance(todo_id, (str, int)) or isinstance(todo_id, bool):
        raise ValueError(f"Invalid todoId: {todo_id!r}")
    if not isinstance(scheduled, str):
        raise ValueError(f"Invalid scheduledDate: {scheduled!r}")
    if completed is not None and not isinstance(completed, str):
        raise ValueError(f"Invalid completedAt: {completed!r}")

    return CompletionHistoryEntry(
        todo_id=str(todo_id),
        scheduled_date=parse_iso_datetime(scheduled),
        completed_at=parse_iso_datetime(completed) if completed else None,
    )
