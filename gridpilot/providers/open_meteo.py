"""
Open-Meteo Weather Provider for GridPilot X

Keyless numeric forecast for a fixed coordinate (Agra by default).
Free, no credential, so it is tried after the paid provider and before the
offline fallback.

One request, single-day horizon:
- hourly: temperature_2m, relative_humidity_2m, cloud_cover
- daily:  sunrise, sunset (ISO local timestamps)
"""

import logging
from datetime import date, datetime
from typing import List, Optional, TypedDict

import httpx

from gridpilot.config import AGRA_LAT, AGRA_LON, AGRA_TIMEZONE
from gridpilot.models import CanonicalObservation
from gridpilot.providers.base import (
    DEFAULT_TIMEOUT,
    build_observation,
    get_json,
    require,
    require_hourly_series,
)
from gridpilot.resilience import SchemaError

logger = logging.getLogger(__name__)

BASE_URL = "https://api.open-meteo.com/v1/forecast"

HOURLY_FIELDS = ["temperature_2m", "relative_humidity_2m", "cloud_cover"]
DAILY_FIELDS = ["sunrise", "sunset"]


# Raw payload shape (only the parts we read)
class OpenMeteoHourly(TypedDict):
    time: List[str]
    temperature_2m: List[float]
    relative_humidity_2m: List[float]
    cloud_cover: List[float]


class OpenMeteoDaily(TypedDict):
    time: List[str]
    sunrise: List[str]
    sunset: List[str]


def iso_to_decimal_hour(timestamp: str) -> float:
    """'2026-10-18T06:43' -> 6.72"""
    try:
        dt = datetime.fromisoformat(timestamp)
    except (TypeError, ValueError) as e:
        raise SchemaError(f"Open-Meteo timestamp not ISO 8601: {timestamp!r}") from e
    return round(dt.hour + dt.minute / 60, 2)


class OpenMeteoProvider:
    """
    Provider for the Open-Meteo forecast API.

    Rejects (SchemaError) any response whose hourly arrays are not exactly
    24 long; length repair is never done here.
    """

    name = "Open-Meteo"

    def __init__(
        self,
        latitude: float = AGRA_LAT,
        longitude: float = AGRA_LON,
        timezone: str = AGRA_TIMEZONE,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        self.latitude = latitude
        self.longitude = longitude
        self.timezone = timezone
        self.client = client
        self.timeout = timeout

    def _params(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "hourly": ",".join(HOURLY_FIELDS),
            "daily": ",".join(DAILY_FIELDS),
            "timezone": self.timezone,
            "forecast_days": 1,
        }

    async def fetch(self) -> CanonicalObservation:
        logger.info(f"[OpenMeteoProvider] Fetching 1-day forecast for ({self.latitude}, {self.longitude})")

        data = await get_json(BASE_URL, self._params(), self.name, client=self.client, timeout=self.timeout)
        observation = self.parse(data)

        logger.info(f"[OpenMeteoProvider] [OK] 24 hourly records, "
                    f"sunrise {observation['sunrise_hour']}, sunset {observation['sunset_hour']}")
        return observation

    def parse(self, data: dict) -> CanonicalObservation:
        """Validate the raw payload, then convert it to the canonical shape."""
        hourly: OpenMeteoHourly = require(data, "hourly", self.name)
        daily: OpenMeteoDaily = require(data, "daily", self.name)

        temps = require_hourly_series(require(hourly, "temperature_2m", self.name), "temperature_2m", self.name)
        humidity = require_hourly_series(require(hourly, "relative_humidity_2m", self.name),
                                         "relative_humidity_2m", self.name)
        clouds = require_hourly_series(require(hourly, "cloud_cover", self.name), "cloud_cover", self.name)

        sunrises = require(daily, "sunrise", self.name)
        sunsets = require(daily, "sunset", self.name)
        if not isinstance(sunrises, list) or not sunrises or not isinstance(sunsets, list) or not sunsets:
            raise SchemaError("Open-Meteo daily sunrise/sunset is empty")

        day: Optional[date] = None
        days = daily.get("time")
        if isinstance(days, list) and days:
            try:
                day = date.fromisoformat(days[0])
            except (TypeError, ValueError):
                logger.debug(f"[OpenMeteoProvider] Unreadable daily date {days[0]!r}, using today")

        return build_observation(
            temps,
            humidity,
            clouds,
            sunrise_hour=iso_to_decimal_hour(sunrises[0]),
            sunset_hour=iso_to_decimal_hour(sunsets[0]),
            source=self.name,
            day=day,
        )
