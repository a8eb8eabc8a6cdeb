"""Tests for completion history."""

from datetime import date, datetime, time

import pytest

from flowdo.db.models import CompletionHistoryEntry, DailyPattern, MonthlyPattern, TodoItem
from flowdo.engine.history import (
    CompletionHistory,
    complete_recurring_item,
    entry_from_dict,
    entry_to_dict,
)

NOW = datetime(2026, 1, 21, 12, 0)


def entry(todo_id, day, completed_at=None) -> CompletionHistoryEntry:
    return CompletionHistoryEntry(
        todo_id=todo_id,
        scheduled_date=datetime.combine(day, time(9, 0)),
        completed_at=completed_at,
    )


def test_todo_id_is_stringified():
    """Test that numeric item ids are stored as strings."""
    assert entry(5, date(2026, 1, 20)).todo_id == "5"


def test_update_entry_matches_exact_key():
    """Test that updates only hit the exact (todo, scheduled) pair."""
    history = CompletionHistory([entry("1", date(2026, 1, 20)), entry("1", date(2026, 1, 21))])

    assert history.update_entry("1", datetime(2026, 1, 20, 9, 0), NOW)
    assert not history.update_entry("1", datetime(2026, 1, 20, 9, 1), NOW)
    assert not history.update_entry("2", datetime(2026, 1, 20, 9, 0), NOW)

    completed = [e for e in history.entries() if e.completed_at is not None]
    assert [e.scheduled_date.day for e in completed] == [20]


def test_delete_entry_and_all_for_todo():
    """Test removing single entries and whole items."""
    history = CompletionHistory([
        entry("1", date(2026, 1, 19)),
        entry("1", date(2026, 1, 20)),
        entry("2", date(2026, 1, 20)),
    ])

    assert history.delete_entry(1, datetime(2026, 1, 19, 9, 0))
    assert not history.delete_entry(1, datetime(2026, 1, 19, 9, 0))
    assert history.delete_all_for_todo("1") == 1
    assert [e.todo_id for e in history.entries()] == ["2"]


def test_entries_in_range_inclusive():
    """Test that both range ends are included by date."""
    history = CompletionHistory([
        entry("1", date(2026, 1, 18)),
        entry("1", date(2026, 1, 19)),
        entry("1", date(2026, 1, 21)),
        entry("1", date(2026, 1, 22)),
    ])

    days = [e.scheduled_date.day for e in history.entries_in_range(date(2026, 1, 19), date(2026, 1, 21))]
    assert days == [19, 21]


def test_update_past_completion():
    """Test toggling a past occurrence on and off."""
    history = CompletionHistory([entry("1", date(2026, 1, 19))])
    scheduled = datetime(2026, 1, 19, 9, 0)

    updated = history.update_past_completion("1", scheduled, True, NOW)
    assert updated.completed_at == NOW
    assert len(history) == 1

    untracked = datetime(2026, 1, 17, 9, 0)
    added = history.update_past_completion("1", untracked, True, NOW)
    assert added.scheduled_date == untracked
    assert len(history) == 2
    assert history.completed_count("1") == 2

    history.update_past_completion("1", scheduled, False, NOW)
    assert history.completed_count("1") == 1


def test_complete_recurring_item_rolls_forward():
    """Test that completing an occurrence records it and returns the next due date."""
    history = CompletionHistory()
    item = TodoItem(
        id=1,
        text="Pay rent",
        due_at=datetime(2024, 1, 31, 9, 0),
        recurring_pattern=MonthlyPattern(day_of_month=31),
    )

    next_due = complete_recurring_item(history, item, datetime(2024, 1, 31, 18, 0))

    assert next_due == datetime(2024, 2, 29, 9, 0)
    assert history.entries() == [
        CompletionHistoryEntry(
            todo_id="1",
            scheduled_date=datetime(2024, 1, 31, 9, 0),
            completed_at=datetime(2024, 1, 31, 18, 0),
        )
    ]


def test_complete_recurring_item_finishes_series():
    """Test that the last allowed completion ends the series."""
    history = CompletionHistory()
    item = TodoItem(
        id=2,
        text="Physio exercises",
        due_at=datetime(2026, 1, 20, 8, 0),
        recurring_pattern=DailyPattern(occurrences=2),
    )

    assert complete_recurring_item(history, item, NOW) == datetime(2026, 1, 21, 8, 0)

    item.due_at = datetime(2026, 1, 21, 8, 0)
    assert complete_recurring_item(history, item, NOW) is None
    assert history.completed_count(2) == 2


def test_completing_same_occurrence_twice_counts_once():
    """Test that a repeated completion replaces the earlier entry."""
    history = CompletionHistory()
    item = TodoItem(
        id=3,
        text="Stretch",
        due_at=datetime(2026, 1, 21, 8, 0),
        recurring_pattern=DailyPattern(),
    )

    complete_recurring_item(history, item, datetime(2026, 1, 21, 8, 30))
    complete_recurring_item(history, item, datetime(2026, 1, 21, 9, 0))

    assert len(history) == 1
    assert history.completed_count(3) == 1
    assert history.completed_counts() == {"3": 1}
    entry = history.find_entry(3, datetime(2026, 1, 21, 8, 0))
    assert entry.completed_at == datetime(2026, 1, 21, 9, 0)


def test_complete_requires_recurring_item():
    """Test that one-off items are rejected."""
    with pytest.raises(ValueError):
        complete_recurring_item(CompletionHistory(), TodoItem(id=3, text="once"), NOW)


def test_entry_serialization():
    """Test the persisted record shape."""
    pending = entry("1", date(2026, 1, 22))

    assert entry_to_dict(pending) == {
        "todoId": "1",
        "scheduledDate": "2026-01-22T09:00:00",
        "completedAt": None,
    }
    assert entry_from_dict({
        "todoId": 1,
        "scheduledDate": "2026-01-22T09:00:00.000Z",
        "completedAt": "2026-01-22T10:30:00.000Z",
    }) == entry("1", date(2026, 1, 22), datetime(2026, 1, 22, 10, 30))


def test_entry_from_dict_rejects_malformed():
    """Test that malformed records raise ValueError."""
    for raw in (None, {"todoId": 1}, {"todoId": True, "scheduledDate": "2026-01-22"},
                {"todoId": 1, "scheduledDate": "not a date"}):
        with pytest.raises(ValueError):
            entry_from_dict(raw)
