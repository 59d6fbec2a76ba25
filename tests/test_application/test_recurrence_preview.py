"""Tests for the recurrence preview session"""
import logging
from datetime import date

import pytest

from cadence.application.recurrence_preview import RecurrencePreviewSession, compute_preview
from cadence.config import Settings
from cadence.domain.recurrence_rule import (
    MonthlyPattern,
    RecurrenceConfiguration,
    RecurrenceEditError,
    RecurrenceType,
    WeekDay,
)


class TestPreviewSession:
    def test_default_session_previews_weekly_from_today(self, settings, today):
        session = RecurrencePreviewSession(settings=settings, today=today)
        assert session.config.type == RecurrenceType.WEEKLY
        assert len(session.preview_dates) == settings.OCCURRENCE_CEILING
        assert session.preview_dates[:2] == (date(2024, 1, 1), date(2024, 1, 8))

    def test_dispatch_recomputes(self, settings, today):
        session = RecurrencePreviewSession(settings=settings, today=today)
        session.dispatch("set_type", RecurrenceType.DAILY)
        session.dispatch("set_interval", 3)
        session.dispatch("set_max_occurrences", 4)
        assert session.preview_dates == (
            date(2024, 1, 1), date(2024, 1, 4), date(2024, 1, 7), date(2024, 1, 10),
        )

    def test_generate_is_idempotent(self, settings, daily_config):
        session = RecurrencePreviewSession(daily_config, settings=settings)
        first = session.generate_preview_dates()
        second = session.generate_preview_dates()
        assert first is second
        assert first == session.preview_dates

    def test_cache_invalidated_by_edit(self, settings, daily_config):
        session = RecurrencePreviewSession(daily_config, settings=settings)
        before = session.preview_dates
        session.dispatch("set_interval", 1)
        assert session.preview_dates != before
        assert session.preview_dates[1] == date(2024, 1, 2)

    def test_toggling_last_weekly_day_empties_preview(self, settings, today):
        session = RecurrencePreviewSession(settings=settings, today=today)
        session.dispatch("toggle_weekly_day", WeekDay.MONDAY)
        assert session.preview_dates == ()

    def test_clearing_start_date_empties_preview(self, settings, today):
        session = RecurrencePreviewSession(settings=settings, today=today)
        session.dispatch("set_start_date", None)
        assert session.preview_dates == ()

    def test_dispatch_all_applies_in_order(self, settings, today):
        session = RecurrencePreviewSession(settings=settings, today=today)
        config = session.dispatch_all([
            ("set_type", RecurrenceType.MONTHLY),
            ("set_monthly_pattern", MonthlyPattern.BY_WEEKDAY),
            ("set_start_date", date(2024, 1, 9)),
            ("set_max_occurrences", 3),
        ])
        assert config is session.config
        assert session.preview_dates == (date(2024, 1, 9), date(2024, 2, 13), date(2024, 3, 12))

    def test_dispatch_all_is_atomic(self, settings, today):
        session = RecurrencePreviewSession(settings=settings, today=today)
        before = session.config
        with pytest.raises(RecurrenceEditError):
            session.dispatch_all([("set_interval", 5), ("set_shape", "round")])
        assert session.config is before

    def test_session_ceiling_from_settings(self, today):
        settings = Settings(_env_file=None, OCCURRENCE_CEILING=5)
        session = RecurrencePreviewSession(settings=settings, today=today)
        assert len(session.preview_dates) == 5


class TestComputePreview:
    def test_guard_exhaustion_is_logged(self, caplog):
        settings = Settings(_env_file=None, ITERATION_GUARD_FACTOR=1)
        config = RecurrenceConfiguration(
            type=RecurrenceType.YEARLY, start_date=date(2024, 2, 29), max_occurrences=3,
        )
        with caplog.at_level(logging.WARNING, logger="cadence.application.recurrence_preview"):
            expansion = compute_preview(config, settings)
        assert expansion.guard_exhausted
        assert expansion.dates == (date(2024, 2, 29),)
        assert "guard exhausted" in caplog.text

    def test_no_warning_for_normal_preview(self, settings, daily_config, caplog):
        with caplog.at_level(logging.WARNING, logger="cadence.application.recurrence_preview"):
            compute_preview(daily_config, settings)
        assert caplog.text == ""
