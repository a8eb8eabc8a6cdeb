"""Parse short recurrence phrases like "every 2 weeks" into patterns."""

import logging
import re

from flowdo.db.models import (
    DailyPattern,
    InvalidPatternError,
    MonthlyPattern,
    RecurringPattern,
    WeeklyPattern,
    YearlyPattern,
)
from flowdo.utils.constants import WEEKDAY_NAMES

logger = logging.getLogger(__name__)

# Whole-phrase keywords
SIMPLE_PHRASES = {
    'daily': DailyPattern, 'every day': DailyPattern,
    'weekly': WeeklyPattern, 'every week': WeeklyPattern,
    'monthly': MonthlyPattern, 'every month': MonthlyPattern,
    'yearly': YearlyPattern, 'every year': YearlyPattern,
}

# Every N units
EVERY_N_PATTERN = re.compile(r'^every\s+(\d+)\s+(day|week|month|year)s?$')
UNIT_CLASSES = {
    'day': DailyPattern,
    'week': WeeklyPattern,
    'month': MonthlyPattern,
    'year': YearlyPattern,
}

# Every month on the 15th
MONTH_DAY_PATTERN = re.compile(r'^every\s+month\s+on\s+(?:the\s+)?(\d+)(?:st|nd|rd|th)?$')

# Every mon, wed and fri
EVERY_DAYS_PATTERN = re.compile(r'^every\s+(.+)$')
DAY_SEPARATOR = re.compile(r'[,\s]+')


def parse_recurring_description(text: str) -> RecurringPattern | None:
    """Parse a recurrence phrase.

    Examples:
        "daily" -> DailyPattern()
        "every 3 days" -> DailyPattern(interval=3)
        "every mon, wed and fri" -> WeeklyPattern(days_of_week={1, 3, 5})
        "every month on the 15th" -> MonthlyPattern(day_of_month=15)
        "every 2 years" -> YearlyPattern(interval=2)

    Returns:
        The pattern, or None if the phrase is not recognised
    """
    normalized = ' '.join(text.lower().split())

    if normalized in SIMPLE_PHRASES:
        return SIMPLE_PHRASES[normalized]()

    try:
        match = EVERY_N_PATTERN.match(normalized)
        if match:
            interval, unit = int(match.group(1)), match.group(2)
            return UNIT_CLASSES[unit](interval=interval)

        match = MONTH_DAY_PATTERN.match(normalized)
        if match:
            return MonthlyPattern(day_of_month=int(match.group(1)))

    except InvalidPatternError as e:
        logger.debug(f"Rejected recurrence phrase {text!r}: {e}")
        return None

    match = EVERY_DAYS_PATTERN.match(normalized)
    if match:
        days = {
            WEEKDAY_NAMES[part]
            for part in DAY_SEPARATOR.split(match.group(1))
            if part in WEEKDAY_NAMES
        }
        if days:
            return WeeklyPattern(days_of_week=frozenset(days))

    return None
