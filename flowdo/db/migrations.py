"""Database migration runner."""

import logging
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


async def init_database(db_path: Path) -> None:
    """Create the key-value table if it does not exist yet."""
    async with aiosqlite.connect(db_path) as db:
        await db.executescript(SCHEMA_PATH.read_text())
        await db.commit()

        logger.info(f"Database initialized at {db_path}")


async def run_migrations(db_path: Path) -> None:
    """Bring the database schema up to date.

    The schema is idempotent, so this is safe to run on every start.
    """
    await init_database(db_path)
