"""
Pytest fixtures for testing
"""
from datetime import date

import pytest

from cadence.config import Settings
from cadence.domain.recurrence_rule import RecurrenceConfiguration, RecurrenceType


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of any .env file"""
    return Settings(_env_file=None)


@pytest.fixture
def today() -> date:
    return date(2024, 1, 1)


@pytest.fixture
def daily_config() -> RecurrenceConfiguration:
    return RecurrenceConfiguration(
        type=RecurrenceType.DAILY,
        interval=3,
        start_date=date(2024, 1, 1),
        max_occurrences=4,
    )
