"""Configuration management from environment variables."""

import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Database
    DATABASE_PATH: Path = Path(os.getenv("DATABASE_PATH", "./data/flowdo.db"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Engine
    CHECK_INTERVAL: int = int(os.getenv("CHECK_INTERVAL", "30"))  # seconds
    REMINDER_TOLERANCE_MS: int = int(os.getenv("REMINDER_TOLERANCE_MS", "60000"))
    SHOWN_REMINDER_TTL: int = int(os.getenv("SHOWN_REMINDER_TTL", "3600"))  # seconds

    @classmethod
    def check_interval(cls) -> timedelta:
        return timedelta(seconds=cls.CHECK_INTERVAL)

    @classmethod
    def tolerance(cls) -> timedelta:
        return timedelta(milliseconds=cls.REMINDER_TOLERANCE_MS)

    @classmethod
    def shown_reminder_ttl(cls) -> timedelta:
        return timedelta(seconds=cls.SHOWN_REMINDER_TTL)

    @classmethod
    def validate(cls) -> None:
        """Validate configuration."""
        if cls.CHECK_INTERVAL <= 0:
            raise ValueError("CHECK_INTERVAL must be a positive number of seconds")

        if cls.REMINDER_TOLERANCE_MS <= 0:
            raise ValueError("REMINDER_TOLERANCE_MS must be a positive number of milliseconds")

        # A shorter TTL would let a reminder fire twice inside its window
        if cls.shown_reminder_ttl() <= cls.tolerance():
            raise ValueError("SHOWN_REMINDER_TTL must be longer than the reminder tolerance")

        # Ensure database directory exists
        cls.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
