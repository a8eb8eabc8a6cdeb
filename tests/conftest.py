"""Shared fixtures."""

from datetime import datetime

import pytest
import pytest_asyncio

from flowdo.db.migrations import run_migrations
from flowdo.db.models import NotificationRecord
from flowdo.db.repository import Repository


class FakeNotifier:
    """Notifier that records what it was asked to show."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.records: list[NotificationRecord] = []

    async def notify(self, record: NotificationRecord) -> None:
        if self.fail:
            raise ConnectionError("notification service unavailable")
        self.records.append(record)


@pytest_asyncio.fixture
async def repo(tmp_path):
    """A migrated repository on a temporary database."""
    db_path = tmp_path / "flowdo.db"
    await run_migrations(db_path)

    repository = Repository(db_path)
    await repository.connect()
    yield repository
    await repository.close()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def wednesday_morning() -> datetime:
    """Wednesday 2026-01-21, 30 seconds after 09:00."""
    return datetime(2026, 1, 21, 9, 0, 30)
