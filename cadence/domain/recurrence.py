"""
Deterministic recurrence occurrence generator.

Uses date only (no timezone). Pure: no I/O, no state kept between calls.

Types:
- DAILY: every N days
- WEEKLY: selected weekdays every N weeks (weeks start on Sunday)
- MONTHLY BY_DATE: start date's day of month every N months, months without that day are skipped
- MONTHLY BY_WEEKDAY: Kth weekday W every N months, months without a Kth W are skipped
- YEARLY: start date's month+day every N years, Feb 29 skipped in non-leap years

Output is always ascending, deduplicated, within [start_date, end_date] and capped
at min(max_occurrences, ceiling). Iteration is bounded by guard_factor * cap calendar
steps so sparse or impossible rules still terminate.
"""
import calendar
from dataclasses import dataclass
from datetime import MAXYEAR, date
from typing import Iterator

from cadence.domain.recurrence_rule import (
    LAST_ORDINAL,
    MonthlyPattern,
    RecurrenceConfiguration,
    RecurrenceType,
    WeekDay,
)


LIBRARY_MAX = 50
GUARD_FACTOR = 100


@dataclass(frozen=True)
class OccurrenceExpansion:
    dates: tuple[date, ...]
    steps: int  # calendar steps taken (days, weeks, months or years)
    guard_exhausted: bool  # True if the step guard cut the enumeration short


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_from_index(index: int) -> tuple[int, int]:
    """Absolute month index (year * 12 + month - 1) -> (year, month)."""
    return index // 12, index % 12 + 1


def nth_weekday_of_month(year: int, month: int, ordinal: int, weekday: WeekDay) -> date | None:
    """Date of the Nth `weekday` in the month, or None if the month has fewer.

    ordinal=-1 means the last one.
    """
    first_weekday, days = calendar.monthrange(year, month)
    # calendar weekdays are Monday=0; WeekDay is Sunday=0
    first = (first_weekday + 1) % 7
    first_day = 1 + (int(weekday) - first) % 7
    if ordinal == LAST_ORDINAL:
        return date(year, month, first_day + 7 * ((days - first_day) // 7))
    day = first_day + 7 * (ordinal - 1)
    if day > days:
        return None
    return date(year, month, day)


def effective_cap(config: RecurrenceConfiguration, ceiling: int = LIBRARY_MAX) -> int:
    if config.max_occurrences is None:
        return ceiling
    return min(config.max_occurrences, ceiling)


# --- Candidate streams ---
#
# Each stream yields (period_start, candidates) once per calendar step. An
# empty candidate list is a step that contributed nothing (Feb 31, no 5th
# Monday, ...). Streams end when the calendar runs out (date.max).

MAX_ORDINAL = date.max.toordinal()


def _daily(config: RecurrenceConfiguration) -> Iterator[tuple[date, list[date]]]:
    n = config.start_date.toordinal()
    while n <= MAX_ORDINAL:
        d = date.fromordinal(n)
        yield d, [d]
        n += config.interval


def _weekly(config: RecurrenceConfiguration) -> Iterator[tuple[date, list[date]]]:
    start = config.start_date.toordinal()
    days = sorted(int(wd) for wd in config.weekly_days)
    sunday = start - int(WeekDay.of(config.start_date))
    while sunday <= MAX_ORDINAL:
        week = [
            date.fromordinal(sunday + dow)
            for dow in days
            if start <= sunday + dow <= MAX_ORDINAL
        ]
        yield date.fromordinal(max(sunday, start)), week
        sunday += 7 * config.interval


def _monthly_by_date(config: RecurrenceConfiguration) -> Iterator[tuple[date, list[date]]]:
    start = config.start_date
    index = start.year * 12 + start.month - 1
    while True:
        year, month = month_from_index(index)
        if year > MAXYEAR:
            return
        if start.day <= last_day_of_month(year, month):
            yield date(year, month, 1), [date(year, month, start.day)]
        else:
            yield date(year, month, 1), []
        index += config.interval


def _monthly_by_weekday(config: RecurrenceConfiguration) -> Iterator[tuple[date, list[date]]]:
    start = config.start_date
    ordinal, weekday = config.weekday_target()
    index = start.year * 12 + start.month - 1
    while True:
        year, month = month_from_index(index)
        if year > MAXYEAR:
            return
        d = nth_weekday_of_month(year, month, ordinal, weekday)
        yield date(year, month, 1), ([d] if d is not None and d >= start else [])
        index += config.interval


def _yearly(config: RecurrenceConfiguration) -> Iterator[tuple[date, list[date]]]:
    start = config.start_date
    year = start.year
    while year <= MAXYEAR:
        if start.day <= last_day_of_month(year, start.month):
            yield date(year, 1, 1), [date(year, start.month, start.day)]
        else:
            yield date(year, 1, 1), []
        year += config.interval


def _candidates(config: RecurrenceConfiguration) -> Iterator[tuple[date, list[date]]]:
    if config.type == RecurrenceType.DAILY:
        return _daily(config)
    if config.type == RecurrenceType.WEEKLY:
        return _weekly(config)
    if config.type == RecurrenceType.MONTHLY:
        if config.monthly_pattern == MonthlyPattern.BY_WEEKDAY:
            return _monthly_by_weekday(config)
        return _monthly_by_date(config)
    if config.type == RecurrenceType.YEARLY:
        return _yearly(config)
    raise ValueError(f"unhandled type: {config.type}")


def expand_occurrences(
    config: RecurrenceConfiguration,
    ceiling: int = LIBRARY_MAX,
    guard_factor: int = GUARD_FACTOR,
) -> OccurrenceExpansion:
    """Enumerate occurrences of config together with iteration diagnostics.

    Stops, in this order of priority, when a candidate passes end_date, when
    the effective cap is reached, or when guard_factor * cap steps were taken
    (guard_exhausted=True, partial result returned as is).
    """
    start = config.start_date
    end = config.end_date
    cap = effective_cap(config, ceiling)
    if start is None or cap < 1:
        return OccurrenceExpansion(dates=(), steps=0, guard_exhausted=False)
    if end is not None and end < start:
        return OccurrenceExpansion(dates=(), steps=0, guard_exhausted=False)
    if config.type == RecurrenceType.WEEKLY and not config.weekly_days:
        return OccurrenceExpansion(dates=(), steps=0, guard_exhausted=False)
    if config.type == RecurrenceType.MONTHLY and config.monthly_pattern == MonthlyPattern.BY_WEEKDAY:
        if config.weekday_target() is None:
            return OccurrenceExpansion(dates=(), steps=0, guard_exhausted=False)

    max_steps = max(guard_factor, 1) * cap
    out: list[date] = []
    steps = 0
    for period_start, candidates in _candidates(config):
        if end is not None and period_start > end:
            break
        steps += 1
        for d in candidates:
            if end is not None and d > end:
                return OccurrenceExpansion(dates=tuple(out), steps=steps, guard_exhausted=False)
            if out and d <= out[-1]:
                continue
            out.append(d)
            if len(out) >= cap:
                return OccurrenceExpansion(dates=tuple(out), steps=steps, guard_exhausted=False)
        if steps >= max_steps:
            return OccurrenceExpansion(dates=tuple(out), steps=steps, guard_exhausted=True)
    return OccurrenceExpansion(dates=tuple(out), steps=steps, guard_exhausted=False)


def generate_occurrence_dates(
    config: RecurrenceConfiguration,
    ceiling: int = LIBRARY_MAX,
    guard_factor: int = GUARD_FACTOR,
) -> list[date]:
    """Generate occurrence dates for config.
    Deterministic, sorted ascending, never raises for incomplete configurations."""
    return list(expand_occurrences(config, ceiling, guard_factor).dates)
