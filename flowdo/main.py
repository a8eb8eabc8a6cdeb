"""Main entry point for the flowdo reminder service."""

import asyncio
import logging
import sys

from flowdo.config import Config
from flowdo.db.migrations import run_migrations
from flowdo.db.repository import Repository
from flowdo.engine.reminder_engine import LoggingNotifier, run_reminder_loop

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)


async def run() -> None:
    """Initialize resources and run the reminder loop until cancelled."""
    await run_migrations(Config.DATABASE_PATH)

    repo = Repository(Config.DATABASE_PATH)
    await repo.connect()

    logger.info("flowdo initialized successfully")

    try:
        await run_reminder_loop(
            LoggingNotifier(),
            repo,
            interval=Config.check_interval(),
            tolerance=Config.tolerance(),
            ttl=Config.shown_reminder_ttl(),
        )
    finally:
        await repo.close()
        logger.info("flowdo shut down")


def main() -> None:
    """Start the reminder service."""
    # Validate configuration
    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
