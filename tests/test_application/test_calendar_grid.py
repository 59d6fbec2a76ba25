"""Tests for the calendar grid view model"""
from datetime import date

from cadence.application.calendar_grid import build_month_grid, months_spanned


class TestMonthGrid:
    def test_january_2024_layout(self):
        grid = build_month_grid(2024, 1, [])
        assert grid["month_label"] == "January 2024"
        assert len(grid["weeks"]) == 5
        assert all(len(row) == 7 for row in grid["weeks"])
        # Sunday-first grid: the first cell is Sunday Dec 31
        first = grid["weeks"][0][0]
        assert first["date"] == date(2023, 12, 31)
        assert not first["in_month"]

    def test_highlights_only_dates_in_month(self):
        dates = [date(2023, 12, 31), date(2024, 1, 9), date(2024, 2, 13)]
        grid = build_month_grid(2024, 1, dates, today=date(2024, 1, 9))
        cells = [cell for row in grid["weeks"] for cell in row]
        highlighted = [cell["date"] for cell in cells if cell["highlighted"]]
        assert highlighted == [date(2024, 1, 9)]
        assert grid["highlighted_count"] == 1
        assert [cell["date"] for cell in cells if cell["is_today"]] == [date(2024, 1, 9)]

    def test_months_spanned(self):
        dates = [date(2024, 3, 1), date(2024, 1, 9), date(2024, 1, 10), date(2025, 1, 1)]
        assert months_spanned(dates) == [(2024, 1), (2024, 3), (2025, 1)]
