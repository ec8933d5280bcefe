"""
Shared fixtures for the test suite.
"""

from datetime import time

import pytest

from jalendr.config import ClientConfig
from jalendr.domain.models import BusinessHoursConfig


@pytest.fixture
def business_hours() -> BusinessHoursConfig:
    """08:00-17:00 in Chicago with one-hour appointments."""
    return BusinessHoursConfig(
        timezone="America/Chicago",
        day_start=time(8, 0),
        day_end=time(17, 0),
        slot_duration_minutes=60,
    )


@pytest.fixture
def client() -> ClientConfig:
    return ClientConfig(
        client_id="acme-dental",
        name="Acme Dental",
        calendar_id="primary",
        timezone="America/Chicago",
        day_start="08:00",
        day_end="17:00",
        slot_duration_minutes=60,
        refresh_token="refresh-acme",
    )
