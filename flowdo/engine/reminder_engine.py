"""Reminder engine - the heartbeat that detects and sends due reminders."""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import List, Protocol

from flowdo.db.models import DueReminder, NotificationRecord
from flowdo.db.repository import Repository
from flowdo.engine.history import CompletionHistory
from flowdo.engine.reminders import build_notification, get_due_reminders
from flowdo.engine.shown_set import ShownReminderSet, still_valid_ids
from flowdo.utils.constants import (
    DEFAULT_CHECK_INTERVAL,
    DEFAULT_SHOWN_REMINDER_TTL,
    DEFAULT_TOLERANCE,
)
from flowdo.utils.time_utils import format_duration

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Anything that can display a reminder notification."""

    async def notify(self, record: NotificationRecord) -> None: ...


class LoggingNotifier:
    """Notifier that writes reminders to the log."""

    async def notify(self, record: NotificationRecord) -> None:
        logger.info(f"Reminder [{record.tag}]: {record.title} - {record.body}")


async def heartbeat(
    notifier: Notifier,
    repo: Repository,
    shown: ShownReminderSet,
    now: datetime | None = None,
    tolerance: timedelta = DEFAULT_TOLERANCE,
) -> List[DueReminder]:
    """Heartbeat pass that checks for due reminders and sends them.

    Each pass:
    1. Loads the current items and their completion history
    2. Prunes shown ids whose item is gone, completed or past the TTL
    3. Detects reminders due within the tolerance window
    4. Sends each one and marks it as shown
    5. Persists the shown ids

    Returns:
        Reminders sent on this pass
    """
    now = now or datetime.now()
    sent: List[DueReminder] = []

    try:
        items = await repo.load_items()
        history = CompletionHistory(await repo.load_completion_history())

        pruned = shown.prune(still_valid_ids(items), now)
        due_reminders = get_due_reminders(
            items, now, shown, tolerance, history.completed_counts()
        )

        if not due_reminders:
            if pruned:
                await repo.save_shown_ids(shown.ids())
            return sent

        logger.info(f"Heartbeat: {len(due_reminders)} reminders due")

        for reminder in due_reminders:
            try:
                await notifier.notify(build_notification(reminder, now))
            except Exception as e:
                logger.error(f"Failed to send reminder for item {reminder.todo_id}: {e}")
                # Not marked as shown, retried next heartbeat while still due
                continue

            shown.add(reminder.todo_id, now)
            sent.append(reminder)

            kind = reminder.recurring_type if reminder.is_recurring else "one-off"
            logger.info(f"Sent reminder for item {reminder.todo_id} ({kind})")

        await repo.save_shown_ids(shown.ids())

    except Exception as e:
        logger.error(f"Heartbeat error: {e}")

    return sent


async def startup_recovery(
    repo: Repository,
    now: datetime | None = None,
    ttl: timedelta | None = DEFAULT_SHOWN_REMINDER_TTL,
) -> ShownReminderSet:
    """Recovery on startup: restore the shown ids of the previous run.

    Restored ids count as shown now, so they expire one TTL after startup.
    """
    now = now or datetime.now()

    try:
        ids = await repo.load_shown_ids()
    except Exception as e:
        logger.error(f"Startup recovery error: {e}")
        ids = []

    if ids:
        logger.info(f"Startup recovery: {len(ids)} reminders already shown")

    return ShownReminderSet.from_ids(ids, now, ttl)


async def run_reminder_loop(
    notifier: Notifier,
    repo: Repository,
    *,
    interval: timedelta = DEFAULT_CHECK_INTERVAL,
    tolerance: timedelta = DEFAULT_TOLERANCE,
    ttl: timedelta | None = DEFAULT_SHOWN_REMINDER_TTL,
) -> None:
    """Run the heartbeat on a fixed interval, starting immediately.

    Each pass completes before the next sleep, so passes never overlap. To
    stop the loop, cancel the task running it.
    """
    shown = await startup_recovery(repo, ttl=ttl)
    sleep_s = interval.total_seconds()

    logger.info(f"Reminder loop started (interval: {format_duration(interval)})")

    while True:
        await heartbeat(notifier, repo, shown, tolerance=tolerance)
        await asyncio.sleep(sleep_s)
