"""Tests for configuration validation."""

from datetime import timedelta

import pytest

from flowdo.config import Config


def test_defaults_are_valid(monkeypatch, tmp_path):
    """Test that the defaults validate and create the database directory."""
    db_path = tmp_path / "nested" / "flowdo.db"
    monkeypatch.setattr(Config, "DATABASE_PATH", db_path)

    Config.validate()

    assert db_path.parent.is_dir()
    assert Config.tolerance() == timedelta(milliseconds=Config.REMINDER_TOLERANCE_MS)


def test_ttl_must_exceed_tolerance(monkeypatch, tmp_path):
    """Test that a TTL inside the tolerance window is rejected."""
    monkeypatch.setattr(Config, "DATABASE_PATH", tmp_path / "flowdo.db")
    monkeypatch.setattr(Config, "REMINDER_TOLERANCE_MS", 60000)
    monkeypatch.setattr(Config, "SHOWN_REMINDER_TTL", 60)

    with pytest.raises(ValueError):
        Config.validate()


def test_check_interval_must_be_positive(monkeypatch, tmp_path):
    """Test that a zero poll interval is rejected."""
    monkeypatch.setattr(Config, "DATABASE_PATH", tmp_path / "flowdo.db")
    monkeypatch.setattr(Config, "CHECK_INTERVAL", 0)

    with pytest.raises(ValueError):
        Config.validate()
