# ABOUTME: Shared test fixtures for the monthly weather test suite.
# ABOUTME: Provides Settings and fake provider payload builders for mocked HTTP.

import pytest

from monthly_weather.settings import Settings


def hourly_payload(timestamp: int, hours: int = 24, start_temp: float = 40.0) -> dict:
    """Build a provider body with ``hours`` hourly records starting at ``timestamp``."""
    return {
        "latitude": 45.5898,
        "longitude": -122.5951,
        "timezone": "America/Los_Angeles",
        "hourly": {
            "summary": "Overcast",
            "data": [{"time": timestamp + h * 3600, "temperature": start_temp + h} for h in range(hours)],
        },
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key", timezone="UTC")
