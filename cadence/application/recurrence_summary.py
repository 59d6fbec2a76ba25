"""Human-readable summaries of a recurrence configuration and its preview"""
import calendar
from datetime import date
from typing import Sequence

from cadence.domain.recurrence_rule import (
    LAST_ORDINAL,
    MonthlyPattern,
    RecurrenceConfiguration,
    RecurrenceType,
)

UNIT_NAMES = {
    RecurrenceType.DAILY: ("day", "days"),
    RecurrenceType.WEEKLY: ("week", "weeks"),
    RecurrenceType.MONTHLY: ("month", "months"),
    RecurrenceType.YEARLY: ("year", "years"),
}
ORDINAL_NAMES = {1: "1st", 2: "2nd", 3: "3rd", 4: "4th", 5: "5th", LAST_ORDINAL: "last"}


def _every(config: RecurrenceConfiguration) -> str:
    singular, plural = UNIT_NAMES[config.type]
    if config.interval == 1:
        return f"Every {singular}"
    return f"Every {config.interval} {plural}"


def _pattern(config: RecurrenceConfiguration) -> str:
    if config.type == RecurrenceType.WEEKLY:
        if not config.weekly_days:
            return " (no days selected)"
        return " on " + ", ".join(d.short_name for d in sorted(config.weekly_days))

    if config.type == RecurrenceType.MONTHLY:
        if config.monthly_pattern == MonthlyPattern.BY_WEEKDAY:
            target = config.weekday_target()
            if target is None:
                return ""
            ordinal, weekday = target
            return f" on the {ORDINAL_NAMES[ordinal]} {weekday.name.title()}"
        if config.start_date is None:
            return ""
        return f" on day {config.start_date.day}"

    if config.type == RecurrenceType.YEARLY and config.start_date is not None:
        return f" on {calendar.month_abbr[config.start_date.month]} {config.start_date.day}"
    return ""


def describe_configuration(config: RecurrenceConfiguration) -> str:
    """
    Describe a configuration in one line

    Example:
        >>> describe_configuration(RecurrenceConfiguration(type=RecurrenceType.DAILY, interval=3,
        ...                        start_date=date(2024, 1, 1), max_occurrences=4))
        'Every 3 days, starting 2024-01-01, 4 times'
    """
    parts = [_every(config) + _pattern(config)]
    if config.start_date is None:
        parts.append("no start date")
    else:
        parts.append(f"starting {config.start_date.isoformat()}")
    if config.end_date is not None:
        parts.append(f"until {config.end_date.isoformat()}")
    if config.max_occurrences is not None:
        times = "time" if config.max_occurrences == 1 else "times"
        parts.append(f"{config.max_occurrences} {times}")
    return ", ".join(parts)


def format_preview(dates: Sequence[date], limit: int = 5) -> str:
    if not dates:
        return "No upcoming dates"
    shown = ", ".join(d.isoformat() for d in dates[:limit])
    rest = len(dates) - limit
    if rest > 0:
        return f"{shown} (+{rest} more)"
    return shown
