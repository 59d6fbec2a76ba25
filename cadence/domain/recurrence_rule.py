"""
Recurrence configuration - the structured rule a preview is computed from.

The configuration is a frozen value. Every edit is a total function
(old configuration, payload) -> new configuration: out-of-range payloads are
normalized, never rejected, because a rule being composed interactively is
only "invalid" for a moment.

Edits can be applied either through the named methods
(config.set_interval(3)) or reducer-style through apply_edit(config, action, value).
"""
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet


MIN_INTERVAL = 1
MAX_INTERVAL = 999
LAST_ORDINAL = -1
VALID_ORDINALS = frozenset({1, 2, 3, 4, 5, LAST_ORDINAL})


class RecurrenceEditError(ValueError):
    pass


class RecurrenceType(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class WeekDay(int, Enum):
    """Sunday-based weekday index. Weeks start on Sunday."""
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def of(cls, d: date) -> "WeekDay":
        # date.weekday() is Monday=0
        return cls((d.weekday() + 1) % 7)

    @property
    def short_name(self) -> str:
        return self.name[:3].title()


class MonthlyPattern(str, Enum):
    BY_DATE = "BY_DATE"
    BY_WEEKDAY = "BY_WEEKDAY"


def clamp_interval(n: int) -> int:
    return min(max(int(n), MIN_INTERVAL), MAX_INTERVAL)


def ordinal_of(d: date) -> int:
    """Which occurrence of its weekday d is within its month (1..5)."""
    return (d.day - 1) // 7 + 1


@dataclass(frozen=True)
class RecurrenceConfiguration:
    type: RecurrenceType = RecurrenceType.WEEKLY
    interval: int = 1
    weekly_days: FrozenSet[WeekDay] = field(default_factory=frozenset)
    monthly_pattern: MonthlyPattern = MonthlyPattern.BY_DATE
    start_date: date | None = None
    end_date: date | None = None
    max_occurrences: int | None = None
    monthly_ordinal: int | None = None  # BY_WEEKDAY override, 1..5 or -1 (last)
    monthly_weekday: WeekDay | None = None  # BY_WEEKDAY override

    def __post_init__(self):
        object.__setattr__(self, "type", RecurrenceType(self.type))
        object.__setattr__(self, "interval", clamp_interval(self.interval))
        object.__setattr__(self, "weekly_days", frozenset(WeekDay(d) for d in self.weekly_days))
        object.__setattr__(self, "monthly_pattern", MonthlyPattern(self.monthly_pattern))
        if self.max_occurrences is not None:
            object.__setattr__(self, "max_occurrences", max(int(self.max_occurrences), 1))
        if self.monthly_ordinal is not None and self.monthly_ordinal not in VALID_ORDINALS:
            object.__setattr__(self, "monthly_ordinal", None)
        if self.monthly_weekday is not None:
            object.__setattr__(self, "monthly_weekday", WeekDay(self.monthly_weekday))

    @classmethod
    def default(cls, today: date | None = None) -> "RecurrenceConfiguration":
        """Weekly, every week, starting today, on today's weekday, unbounded."""
        start = today or date.today()
        return cls(
            type=RecurrenceType.WEEKLY,
            interval=1,
            weekly_days=frozenset({WeekDay.of(start)}),
            start_date=start,
        )

    # --- Edits ---

    def set_type(self, t: RecurrenceType) -> "RecurrenceConfiguration":
        # Pattern fields are kept so switching back restores them
        return replace(self, type=RecurrenceType(t))

    def set_interval(self, n: int) -> "RecurrenceConfiguration":
        return replace(self, interval=clamp_interval(n))

    def toggle_weekly_day(self, d: WeekDay) -> "RecurrenceConfiguration":
        d = WeekDay(d)
        if d in self.weekly_days:
            return replace(self, weekly_days=self.weekly_days - {d})
        return replace(self, weekly_days=self.weekly_days | {d})

    def set_monthly_pattern(self, p: MonthlyPattern) -> "RecurrenceConfiguration":
        return replace(self, monthly_pattern=MonthlyPattern(p))

    def set_monthly_weekday(self, ordinal: int | None, weekday: WeekDay | None = None) -> "RecurrenceConfiguration":
        """Pin the BY_WEEKDAY target. ordinal=None goes back to deriving it from start_date."""
        if ordinal is None or ordinal not in VALID_ORDINALS:
            return replace(self, monthly_ordinal=None, monthly_weekday=None)
        return replace(self, monthly_ordinal=ordinal, monthly_weekday=weekday)

    def set_start_date(self, d: date | None) -> "RecurrenceConfiguration":
        return replace(self, start_date=d)

    def set_end_date(self, d: date | None) -> "RecurrenceConfiguration":
        return replace(self, end_date=d)

    def set_max_occurrences(self, n: int | None) -> "RecurrenceConfiguration":
        return replace(self, max_occurrences=n)

    # --- Derived ---

    def weekday_target(self) -> tuple[int, WeekDay] | None:
        """(ordinal, weekday) for BY_WEEKDAY, resolved once from start_date unless pinned."""
        if self.start_date is None and self.monthly_ordinal is None:
            return None
        ordinal = self.monthly_ordinal if self.monthly_ordinal is not None else ordinal_of(self.start_date)
        weekday = self.monthly_weekday
        if weekday is None:
            if self.start_date is None:
                return None
            weekday = WeekDay.of(self.start_date)
        return ordinal, weekday

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "interval": self.interval,
            "weekly_days": sorted(int(d) for d in self.weekly_days),
            "monthly_pattern": self.monthly_pattern.value,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "max_occurrences": self.max_occurrences,
            "monthly_ordinal": self.monthly_ordinal,
            "monthly_weekday": int(self.monthly_weekday) if self.monthly_weekday is not None else None,
        }


def _set_monthly_weekday(config: RecurrenceConfiguration, value: Any) -> RecurrenceConfiguration:
    if value is None:
        return config.set_monthly_weekday(None)
    ordinal, weekday = value
    return config.set_monthly_weekday(ordinal, weekday)


EDIT_ACTIONS: Dict[str, Callable[[RecurrenceConfiguration, Any], RecurrenceConfiguration]] = {
    "set_type": RecurrenceConfiguration.set_type,
    "set_interval": RecurrenceConfiguration.set_interval,
    "toggle_weekly_day": RecurrenceConfiguration.toggle_weekly_day,
    "set_monthly_pattern": RecurrenceConfiguration.set_monthly_pattern,
    "set_monthly_weekday": _set_monthly_weekday,
    "set_start_date": RecurrenceConfiguration.set_start_date,
    "set_end_date": RecurrenceConfiguration.set_end_date,
    "set_max_occurrences": RecurrenceConfiguration.set_max_occurrences,
}


def apply_edit(config: RecurrenceConfiguration, action: str, value: Any = None) -> RecurrenceConfiguration:
    """Reducer: apply one named edit and return the new configuration."""
    handler = EDIT_ACTIONS.get(action)
    if handler is None:
        raise RecurrenceEditError(f"unknown edit action: {action}")
    try:
        return handler(config, value)
    except (TypeError, ValueError) as e:
        raise RecurrenceEditError(f"invalid value for {action}: {value!r}") from e
