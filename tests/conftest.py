"""
Shared pytest fixtures for GridPilot X.

No test touches the network: provider HTTP goes through httpx.MockTransport
and the Anthropic client is replaced with AsyncMock.
"""

import logging
import sys
from pathlib import Path

import pytest

# Configure test logging
logging.basicConfig(level=logging.DEBUG)

sys.path.insert(0, str(Path(__file__).parent.parent))


def hourly_ramp(start: float, step: float) -> list:
    return [round(start + step * h, 1) for h in range(24)]


@pytest.fixture
def open_meteo_payload():
    """A well-formed Open-Meteo forecast response for one day."""
    return {
        "latitude": 27.18,
        "longitude": 78.0,
        "timezone": "Asia/Kolkata",
        "hourly": {
            "time": [f"2026-10-18T{h:02d}:00" for h in range(24)],
            "temperature_2m": hourly_ramp(18.0, 0.5),
            "relative_humidity_2m": hourly_ramp(80.0, -2.0),
            "cloud_cover": [10] * 12 + [40] * 12,
        },
        "daily": {
            "time": ["2026-10-18"],
            "sunrise": ["2026-10-18T06:25"],
            "sunset": ["2026-10-18T17:48"],
        },
    }


@pytest.fixture
def weatherapi_payload():
    """A well-formed WeatherAPI.com forecast.json response for one day."""
    return {
        "location": {"name": "Agra", "region": "Uttar Pradesh", "country": "India"},
        "forecast": {
            "forecastday": [
                {
                    "date": "2026-10-18",
                    "astro": {"sunrise": "06:25 AM", "sunset": "05:48 PM"},
                    "hour": [
                        {
                            "time": f"2026-10-18 {h:02d}:00",
                            "temp_c": 20.0 + h * 0.4,
                            "humidity": 70 - h,
                            "cloud": 5 * (h % 4),
                        }
                        for h in range(24)
                    ],
                }
            ]
        },
    }
