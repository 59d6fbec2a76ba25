"""
Month grid view model for the calendar preview.

Maps preview dates onto the cells of a Sunday-first month grid. Rendering is
left to the caller; this only decides which cells are highlighted.
"""
import calendar
from datetime import date
from typing import Iterable


def build_month_grid(
    year: int,
    month: int,
    dates: Iterable[date],
    today: date | None = None,
) -> dict:
    """Build the month grid view model.

    Returns:
        {"year", "month", "month_label", "weekday_labels", "weeks", "highlighted_count"}
        where weeks is a list of 7-cell rows, each cell a dict with
        date / day / in_month / highlighted / is_today.
    """
    highlighted = {d for d in dates if d.year == year and d.month == month}
    cal = calendar.Calendar(firstweekday=calendar.SUNDAY)

    weeks: list[list[dict]] = []
    for row in cal.monthdatescalendar(year, month):
        weeks.append([
            {
                "date": d,
                "day": d.day,
                "in_month": d.month == month,
                "highlighted": d in highlighted,
                "is_today": d == today,
            }
            for d in row
        ])

    return {
        "year": year,
        "month": month,
        "month_label": f"{calendar.month_name[month]} {year}",
        "weekday_labels": [calendar.day_abbr[(calendar.SUNDAY + i) % 7] for i in range(7)],
        "weeks": weeks,
        "highlighted_count": len(highlighted),
    }


def months_spanned(dates: Iterable[date]) -> list[tuple[int, int]]:
    """Distinct (year, month) pairs covered by dates, ascending."""
    return sorted({(d.year, d.month) for d in dates})
