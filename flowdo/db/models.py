"""Data models."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, ClassVar, Literal

from flowdo.utils.time_utils import format_notify_at, parse_iso_datetime, parse_notify_at


OccurrenceStatus = Literal["completed", "missed", "pending"]


class InvalidPatternError(ValueError):
    """A recurrence rule violates its validity rules."""


def _check_int(name: str, value: Any, low: int, high: int | None = None) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidPatternError(f"{name} must be an integer, got {value!r}")
    if value < low or (high is not None and value > high):
        bounds = f"{low}-{high}" if high is not None else f">= {low}"
        raise InvalidPatternError(f"{name} must be {bounds}, got {value}")


@dataclass(frozen=True)
class RecurringPattern:
    """Recurrence rule fields shared by every kind.

    Instantiated directly only for rules whose kind is not recognised; such
    rules match every date.
    """

    interval: int = 1
    notify_at: time | None = None  # Local time of day to notify at
    end_date: date | None = None  # Exclusive expiry boundary
    occurrences: int | None = None  # Max number of firings

    type: ClassVar[str | None] = None

    def __post_init__(self) -> None:
        if self.interval is None:
            object.__setattr__(self, "interval", 1)
        _check_int("interval", self.interval, 1)

        if isinstance(self.notify_at, str):
            try:
                object.__setattr__(self, "notify_at", parse_notify_at(self.notify_at))
            except ValueError as e:
                raise InvalidPatternError(str(e)) from e
        elif self.notify_at is not None and not isinstance(self.notify_at, time):
            raise InvalidPatternError(f"notify_at must be HH:MM, got {self.notify_at!r}")

        if isinstance(self.end_date, datetime):
            object.__setattr__(self, "end_date", self.end_date.date())
        elif self.end_date is not None and not isinstance(self.end_date, date):
            raise InvalidPatternError(f"end_date must be a date, got {self.end_date!r}")

        if self.occurrences is not None:
            _check_int("occurrences", self.occurrences, 1)


@dataclass(frozen=True)
class DailyPattern(RecurringPattern):
    """Every `interval` days."""

    type: ClassVar[str] = "daily"


@dataclass(frozen=True)
class WeeklyPattern(RecurringPattern):
    """Every `interval` weeks on the listed weekdays (Sunday=0)."""

    days_of_week: frozenset[int] = frozenset()  # Empty means every day

    type: ClassVar[str] = "weekly"

    def __post_init__(self) -> None:
        super().__post_init__()
        days = self.days_of_week
        if days is None:
            days = frozenset()
        elif not isinstance(days, frozenset):
            days = frozenset(days)
        for day in days:
            _check_int("days_of_week", day, 0, 6)
        object.__setattr__(self, "days_of_week", days)


@dataclass(frozen=True)
class CustomPattern(WeeklyPattern):
    """Weekday-set rule kept distinct from weekly for display purposes."""

    type: ClassVar[str] = "custom"


@dataclass(frozen=True)
class MonthlyPattern(RecurringPattern):
    """Every `interval` months on `day_of_month`, clipped to short months."""

    day_of_month: int | None = None

    type: ClassVar[str] = "monthly"

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.day_of_month is not None:
            _check_int("day_of_month", self.day_of_month, 1, 31)


@dataclass(frozen=True)
class YearlyPattern(RecurringPattern):
    """Every `interval` years on `month_of_year` / `day_of_month`."""

    month_of_year: int | None = None
    day_of_month: int | None = None

    type: ClassVar[str] = "yearly"

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.month_of_year is not None:
            _check_int("month_of_year", self.month_of_year, 1, 12)
        if self.day_of_month is not None:
            _check_int("day_of_month", self.day_of_month, 1, 31)


PATTERN_CLASSES: dict[str, type[RecurringPattern]] = {
    cls.type: cls
    for cls in (DailyPattern, WeeklyPattern, MonthlyPattern, YearlyPattern, CustomPattern)
}


def pattern_from_dict(raw: Any) -> RecurringPattern:
    """Build a pattern from its persisted camelCase shape.

    Fields that do not apply to the rule's kind are ignored. An unrecognised or
    missing `type` yields a bare RecurringPattern.

    Raises:
        InvalidPatternError: If the shape or any field value is invalid
    """
    if not isinstance(raw, dict):
        raise InvalidPatternError(f"Pattern must be an object, got {type(raw).__name__}")

    cls = PATTERN_CLASSES.get(raw.get("type"), RecurringPattern)

    end_date = raw.get("endDate")
    if isinstance(end_date, str):
        try:
            end_date = parse_iso_datetime(end_date).date()
        except ValueError as e:
            raise InvalidPatternError(f"Invalid endDate: {end_date!r}") from e

    kwargs: dict[str, Any] = {
        "interval": raw.get("interval"),
        "notify_at": raw.get("notifyAt"),
        "end_date": end_date,
        "occurrences": raw.get("occurrences"),
    }

    if issubclass(cls, WeeklyPattern):
        days = raw.get("daysOfWeek")
        if days is not None and not isinstance(days, list):
            raise InvalidPatternError(f"daysOfWeek must be a list, got {days!r}")
        kwargs["days_of_week"] = days
    elif cls is MonthlyPattern:
        kwargs["day_of_month"] = raw.get("dayOfMonth")
    elif cls is YearlyPattern:
        kwargs["month_of_year"] = raw.get("monthOfYear")
        kwargs["day_of_month"] = raw.get("dayOfMonth")

    return cls(**kwargs)


def pattern_to_dict(pattern: RecurringPattern) -> dict[str, Any]:
    """Serialize a pattern to its persisted camelCase shape."""
    data: dict[str, Any] = {"type": pattern.type, "interval": pattern.interval}

    if isinstance(pattern, WeeklyPattern) and pattern.days_of_week:
        data["daysOfWeek"] = sorted(pattern.days_of_week)
    if isinstance(pattern, (MonthlyPattern, YearlyPattern)) and pattern.day_of_month is not None:
        data["dayOfMonth"] = pattern.day_of_month
    if isinstance(pattern, YearlyPattern) and pattern.month_of_year is not None:
        data["monthOfYear"] = pattern.month_of_year
    if pattern.notify_at is not None:
        data["notifyAt"] = format_notify_at(pattern.notify_at)
    if pattern.end_date is not None:
        data["endDate"] = pattern.end_date.isoformat()
    if pattern.occurrences is not None:
        data["occurrences"] = pattern.occurrences

    return data


@dataclass
class TodoItem:
    """A task record supplied by the item provider."""

    id: str | int
    text: str
    completed: bool = False
    due_at: datetime | None = None
    reminder_at: datetime | None = None  # Explicit reminder, wins over the rule
    recurring_pattern: RecurringPattern | None = None

    @property
    def is_recurring(self) -> bool:
        return self.recurring_pattern is not None


@dataclass(frozen=True)
class DueReminder:
    """A reminder that became due during one detection pass."""

    todo_id: str | int
    todo_text: str
    reminder_at: datetime  # Resolved trigger instant
    due_at: datetime | None = None
    is_recurring: bool = False
    recurring_type: str | None = None


@dataclass(frozen=True)
class NotificationRecord:
    """What the notification provider is asked to show."""

    title: str
    body: str
    tag: str  # Dedup tag, one per item
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CompletionHistoryEntry:
    """One scheduled occurrence of a recurring item."""

    todo_id: str
    scheduled_date: datetime
    completed_at: datetime | None = None  # None: missed once past, else pending

    def __post_init__(self) -> None:
        if not isinstance(self.todo_id, str):
            object.__setattr__(self, "todo_id", str(self.todo_id))

    @property
    def key(self) -> tuple[str, datetime]:
        return (self.todo_id, self.scheduled_date)


@dataclass
class DailyStats:
    """Per-day analytics counts."""

    date: date
    regular_completed: int = 0
    recurring_completed: int = 0
    recurring_missed: int = 0


@dataclass
class AnalyticsData:
    """Aggregated completion analytics for a date range."""

    total_regular_completed: int
    total_recurring_completed: int
    total_recurring_missed: int
    completion_rate: float  # Percentage, 0-100
    current_streak: int  # Consecutive days with a completion
    daily_breakdown: list[DailyStats] = field(default_factory=list)


@dataclass(frozen=True)
class RecurringOccurrence:
    """An expected occurrence merged with its completion record."""

    todo_id: str
    todo_text: str
    scheduled_date: date
    completed_at: datetime | None
    status: OccurrenceStatus
    has_completion_record: bool
