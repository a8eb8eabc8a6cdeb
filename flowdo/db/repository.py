"""Database repository - key-value persistence for items, shown ids and history."""

import json
import logging
from pathlib import Path
from typing import Any, List

import aiosqlite

from flowdo.db.models import (
    CompletionHistoryEntry,
    InvalidPatternError,
    TodoItem,
    pattern_from_dict,
    pattern_to_dict,
)
from flowdo.engine.history import entry_from_dict, entry_to_dict
from flowdo.utils.constants import (
    COMPLETION_HISTORY_STORAGE_KEY,
    SHOWN_REMINDERS_STORAGE_KEY,
    TODOS_STORAGE_KEY,
)
from flowdo.utils.time_utils import parse_iso_datetime

logger = logging.getLogger(__name__)


class Repository:
    """Database access layer.

    Reads never raise on bad stored data: a value that is not valid JSON, or
    does not have the expected shape, reads back as an empty collection. Writes
    are best effort: failures are logged and reported as False.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open database connection."""
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        logger.info(f"Connected to database at {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("Database connection closed")

    @property
    def db(self) -> aiosqlite.Connection:
        """Get the database connection."""
        if self._db is None:
            raise RuntimeError("Database not connected")
        return self._db

    # Raw key-value operations

    async def get_value(self, key: str) -> Any:
        """Read and decode the JSON value stored under a key.

        Returns:
            The decoded value, or None if the key is missing or undecodable
        """
        async with self.db.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None

        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding undecodable value for {key!r}: {e}")
            return None

    async def set_value(self, key: str, value: Any) -> bool:
        """Encode and store a value under a key.

        Returns:
            True if the write was committed, False if it failed
        """
        try:
            await self.db.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, datetime('now'))
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, json.dumps(value)),
            )
            await self.db.commit()
            return True
        except aiosqlite.Error as e:
            logger.error(f"Failed to save {key!r}: {e}")
            return False

    # Shown reminder ids

    async def load_shown_ids(self) -> List[str]:
        """Load the ids of reminders already shown."""
        raw = await self.get_value(SHOWN_REMINDERS_STORAGE_KEY)
        if raw is None:
            return []

        if not isinstance(raw, list) or not all(isinstance(i, str) for i in raw):
            logger.warning("Discarding malformed shown reminder ids")
            return []

        return raw

    async def save_shown_ids(self, ids: List[str]) -> bool:
        """Persist the ids of reminders already shown."""
        return await self.set_value(SHOWN_REMINDERS_STORAGE_KEY, [str(i) for i in ids])

    # Completion history

    async def load_completion_history(self) -> List[CompletionHistoryEntry]:
        """Load the completion history of recurring items."""
        raw = await self.get_value(COMPLETION_HISTORY_STORAGE_KEY)
        if raw is None:
            return []

        if not isinstance(raw, list):
            logger.warning("Discarding malformed completion history")
            return []

        try:
            return [entry_from_dict(record) for record in raw]
        except ValueError as e:
            logger.warning(f"Discarding malformed completion history: {e}")
            return []

    async def save_completion_history(self, entries: List[CompletionHistoryEntry]) -> bool:
        """Persist the completion history of recurring items."""
        return await self.set_value(
            COMPLETION_HISTORY_STORAGE_KEY, [entry_to_dict(e) for e in entries]
        )

    # Items

    async def load_items(self) -> List[TodoItem]:
        """Load the task records the reminder engine watches."""
        raw = await self.get_value(TODOS_STORAGE_KEY)
        if raw is None:
            return []

        if not isinstance(raw, list):
            logger.warning("Discarding malformed todo collection")
            return []

        try:
            return [self._record_to_item(record) for record in raw]
        except ValueError as e:
            logger.warning(f"Discarding malformed todo collection: {e}")
            return []

    async def save_items(self, items: List[TodoItem]) -> bool:
        """Persist task records (used to seed the store)."""
        return await self.set_value(
            TODOS_STORAGE_KEY, [self._item_to_record(item) for item in items]
        )

    # Helper methods

    def _record_to_item(self, record: Any) -> TodoItem:
        """Convert a stored record to a TodoItem.

        Raises:
            ValueError: If the record is malformed (InvalidPatternError included)
        """
        if not isinstance(record, dict):
            raise ValueError(f"Todo must be an object, got {type(record).__name__}")

        todo_id = record.get("id")
        if not isinstance(todo_id, (str, int)) or isinstance(todo_id, bool):
            raise ValueError(f"Invalid todo id: {todo_id!r}")
        if not isinstance(record.get("text"), str):
            raise ValueError(f"Invalid text for todo {todo_id}")
        if not isinstance(record.get("completed"), bool):
            raise ValueError(f"Invalid completed flag for todo {todo_id}")

        pattern = record.get("recurringPattern")

        try:
            return TodoItem(
                id=todo_id,
                text=record["text"],
                completed=record["completed"],
                due_at=self._parse_optional(record.get("dueDate")),
                reminder_at=self._parse_optional(record.get("reminderAt")),
                recurring_pattern=pattern_from_dict(pattern) if pattern is not None else None,
            )
        except InvalidPatternError as e:
            raise ValueError(f"Invalid recurring pattern for todo {todo_id}: {e}") from e

    def _item_to_record(self, item: TodoItem) -> dict[str, Any]:
        """Convert a TodoItem to its stored record."""
        record: dict[str, Any] = {
            "id": item.id,
            "text": item.text,
            "completed": item.completed,
        }
        if item.due_at is not None:
            record["dueDate"] = item.due_at.isoformat()
        if item.reminder_at is not None:
            record["reminderAt"] = item.reminder_at.isoformat()
        if item.recurring_pattern is not None:
            record["recurringPattern"] = pattern_to_dict(item.recurring_pattern)
        return record

    @staticmethod
    def _parse_optional(value: Any):
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError(f"Expected an ISO-8601 string, got {value!r}")
        return parse_iso_datetime(value)
