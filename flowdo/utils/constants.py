"""Constants and default values."""

from datetime import timedelta

# Reminder checking
DEFAULT_CHECK_INTERVAL = timedelta(milliseconds=30000)  # Poll cadence
DEFAULT_TOLERANCE = timedelta(milliseconds=60000)  # Max lateness still "due"
DEFAULT_SHOWN_REMINDER_TTL = timedelta(hours=1)

# Persisted keys (bit-exact contracts with stored data)
TODOS_STORAGE_KEY = "todos"
SHOWN_REMINDERS_STORAGE_KEY = "flowdo_shown_reminders"
COMPLETION_HISTORY_STORAGE_KEY = "flowdo_completion_history"

# Weekday indices, Sunday=0
SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(7)

WEEKDAY_NAMES = {
    'sunday': SUNDAY, 'sun': SUNDAY,
    'monday': MONDAY, 'mon': MONDAY,
    'tuesday': TUESDAY, 'tue': TUESDAY, 'tues': TUESDAY,
    'wednesday': WEDNESDAY, 'wed': WEDNESDAY,
    'thursday': THURSDAY, 'thu': THURSDAY, 'thur': THURSDAY, 'thurs': THURSDAY,
    'friday': FRIDAY, 'fri': FRIDAY,
    'saturday': SATURDAY, 'sat': SATURDAY,
}

# Occurrence search horizon: one leap year per interval step, plus slack
MAX_SEARCH_DAYS_PER_INTERVAL = 366

# Notification text
NOTIFICATION_TAG_PREFIX = "reminder-"
DEFAULT_NOTIFICATION_BODY = "Reminder for your task"

# Occurrence status values
STATUS_COMPLETED = "completed"
STATUS_MISSED = "missed"
STATUS_PENDING = "pending"
