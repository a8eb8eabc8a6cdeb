"""Shown-reminder set - notification dedup across polling cycles."""

import logging
from datetime import datetime, timedelta
from typing import Iterable

from flowdo.db.models import TodoItem
from flowdo.utils.constants import DEFAULT_SHOWN_REMINDER_TTL

logger = logging.getLogger(__name__)


class ShownReminderSet:
    """Ids of items whose reminder has already been shown.

    Ids are stringified on the way in, so 1 and "1" are the same entry. Each
    entry remembers when it was shown; prune() drops entries whose item is gone
    or completed, and entries older than the TTL so a recurring item can fire
    again on its next occurrence.
    """

    def __init__(self, ttl: timedelta | None = DEFAULT_SHOWN_REMINDER_TTL):
        self.ttl = ttl
        self._shown_at: dict[str, datetime] = {}

    @classmethod
    def from_ids(
        cls,
        ids: Iterable[str | int],
        now: datetime,
        ttl: timedelta | None = DEFAULT_SHOWN_REMINDER_TTL,
    ) -> "ShownReminderSet":
        """Rebuild a set from persisted ids; they count as shown at `now`."""
        shown = cls(ttl)
        for todo_id in ids:
            shown.add(todo_id, now)
        return shown

    def contains(self, todo_id: str | int) -> bool:
        return str(todo_id) in self._shown_at

    def __contains__(self, todo_id: object) -> bool:
        if not isinstance(todo_id, (str, int)):
            return False
        return self.contains(todo_id)

    def __len__(self) -> int:
        return len(self._shown_at)

    def add(self, todo_id: str | int, now: datetime) -> None:
        """Mark an item's reminder as shown."""
        self._shown_at[str(todo_id)] = now

    def ids(self) -> list[str]:
        """Shown ids, in insertion order."""
        return list(self._shown_at)

    def prune(self, still_valid_ids: Iterable[str | int], now: datetime) -> int:
        """Drop stale entries.

        Args:
            still_valid_ids: Ids of items that exist and are not completed
            now: Current local time, for TTL expiry

        Returns:
            Number of entries removed
        """
        valid = {str(i) for i in still_valid_ids}
        stale = [
            todo_id
            for todo_id, shown_at in self._shown_at.items()
            if todo_id not in valid or (self.ttl is not None and now - shown_at > self.ttl)
        ]

        for todo_id in stale:
            del self._shown_at[todo_id]

        if stale:
            logger.debug(f"Pruned {len(stale)} shown reminders")

        return len(stale)


def still_valid_ids(items: Iterable[TodoItem]) -> set[str]:
    """Ids of items that still exist and are not completed."""
    return {str(item.id) for item in items if not item.completed}
