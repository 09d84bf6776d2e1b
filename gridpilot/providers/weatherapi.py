"""
WeatherAPI.com Provider for GridPilot X

Keyed named-location forecast. Only used when WEATHERAPI_KEY is configured,
and then tried FIRST: paid data is higher fidelity, but we never call it
when no credential is present.

Response layout:
    forecast.forecastday[0].hour[]          -> temp_c, humidity, cloud
    forecast.forecastday[0].astro.sunrise   -> "06:43 AM"
    forecast.forecastday[0].astro.sunset    -> "06:15 PM"
"""

import logging
import re
from datetime import date
from typing import List, Optional, TypedDict

import httpx

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

BASE_URL = "https://api.weatherapi.com/v1/forecast.json"

_TIME_12H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")


# Raw payload shape (only the parts we read)
class WeatherApiHour(TypedDict):
    time: str
    temp_c: float
    humidity: float
    cloud: float


class WeatherApiAstro(TypedDict):
    sunrise: str
    sunset: str


class WeatherApiForecastDay(TypedDict):
    date: str
    hour: List[WeatherApiHour]
    astro: WeatherApiAstro


def parse_12h_time(value: str) -> float:
    """'06:45 PM' -> 18.75 (two decimals)."""
    match = _TIME_12H.match(value) if isinstance(value, str) else None
    if not match:
        raise SchemaError(f"WeatherAPI time not in 'hh:mm AM/PM' form: {value!r}")

    hours, minutes, meridiem = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if hours > 12 or minutes > 59:
        raise SchemaError(f"WeatherAPI time out of range: {value!r}")

    decimal = hours % 12 + (12 if meridiem == "PM" else 0) + minutes / 60
    return round(decimal, 2)


class WeatherApiProvider:
    """
    Provider for the WeatherAPI.com forecast endpoint.

    Rejects (SchemaError) any response whose hour list is not exactly
    24 entries long.
    """

    name = "WeatherAPI.com"

    def __init__(
        self,
        api_key: str,
        location: str = "Agra",
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        self.api_key = api_key
        self.location = location
        self.client = client
        self.timeout = timeout

    def _params(self) -> dict:
        return {
            "key": self.api_key,
            "q": self.location,
            "days": 1,
            "aqi": "no",
            "alerts": "no",
        }

    async def fetch(self) -> CanonicalObservation:
        logger.info(f"[WeatherApiProvider] Fetching 1-day forecast for '{self.location}'")
        logger.info("[WeatherApiProvider] API CALL - counts against the paid quota")

        data = await get_json(BASE_URL, self._params(), self.name, client=self.client, timeout=self.timeout)
        observation = self.parse(data)

        logger.info(f"[WeatherApiProvider] [OK] 24 hourly records, "
                    f"sunrise {observation['sunrise_hour']}, sunset {observation['sunset_hour']}")
        return observation

    def parse(self, data: dict) -> CanonicalObservation:
        """Validate the raw payload, then convert it to the canonical shape."""
        forecast = require(data, "forecast", self.name)
        forecast_days = require(forecast, "forecastday", self.name)
        if not isinstance(forecast_days, list) or not forecast_days:
            raise SchemaError("WeatherAPI.com 'forecastday' is empty")

        today: WeatherApiForecastDay = forecast_days[0]
        hours = require(today, "hour", self.name)
        astro = require(today, "astro", self.name)

        if not isinstance(hours, list):
            raise SchemaError("WeatherAPI.com 'hour' is not a list")
        if len(hours) != 24:
            raise SchemaError(f"WeatherAPI.com 'hour' has {len(hours)} entries, expected 24")

        temps = require_hourly_series([require(h, "temp_c", self.name) for h in hours], "temp_c", self.name)
        humidity = require_hourly_series([require(h, "humidity", self.name) for h in hours], "humidity", self.name)
        clouds = require_hourly_series([require(h, "cloud", self.name) for h in hours], "cloud", self.name)

        day: Optional[date] = None
        if isinstance(today.get("date"), str):
            try:
                day = date.fromisoformat(today["date"])
            except ValueError:
                logger.debug(f"[WeatherApiProvider] Unreadable date {today['date']!r}, using today")

        return build_observation(
            temps,
            humidity,
            clouds,
            sunrise_hour=parse_12h_time(require(astro, "sunrise", self.name)),
            sunset_hour=parse_12h_time(require(astro, "sunset", self.name)),
            source=self.name,
            day=day,
        )
