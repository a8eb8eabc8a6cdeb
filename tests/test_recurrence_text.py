"""Tests for recurrence phrase parsing."""

from flowdo.db.models import DailyPattern, MonthlyPattern, WeeklyPattern, YearlyPattern
from flowdo.parser.recurrence_text import parse_recurring_description


def test_simple_phrases():
    """Test single-word and every-unit phrases."""
    assert parse_recurring_description("daily") == DailyPattern()
    assert parse_recurring_description("Every Day") == DailyPattern()
    assert parse_recurring_description("  weekly ") == WeeklyPattern()
    assert parse_recurring_description("every month") == MonthlyPattern()
    assert parse_recurring_description("yearly") == YearlyPattern()


def test_every_n_units():
    """Test interval phrases."""
    assert parse_recurring_description("every 3 days") == DailyPattern(interval=3)
    assert parse_recurring_description("every 1 day") == DailyPattern()
    assert parse_recurring_description("every 2 weeks") == WeeklyPattern(interval=2)
    assert parse_recurring_description("every 6 months") == MonthlyPattern(interval=6)
    assert parse_recurring_description("every 4 years") == YearlyPattern(interval=4)


def test_weekday_lists():
    """Test weekday list phrases."""
    assert parse_recurring_description("every mon, wed and fri") == WeeklyPattern(
        days_of_week=frozenset({1, 3, 5})
    )
    assert parse_recurring_description("every Sunday") == WeeklyPattern(days_of_week=frozenset({0}))
    assert parse_recurring_description("every tues and thurs") == WeeklyPattern(
        days_of_week=frozenset({2, 4})
    )


def test_month_on_day():
    """Test day-of-month phrases."""
    assert parse_recurring_description("every month on the 15th") == MonthlyPattern(day_of_month=15)
    assert parse_recurring_description("every month on 1") == MonthlyPattern(day_of_month=1)
    assert parse_recurring_description("every month on the 32nd") is None


def test_unrecognised_phrases():
    """Test that unknown or invalid phrases yield None."""
    assert parse_recurring_description("sometimes") is None
    assert parse_recurring_description("every 0 days") is None
    assert parse_recurring_description("every blue moon") is None
    assert parse_recurring_description("") is None
