"""
Shared plumbing for live weather providers.

Every provider:
- exposes `name` and `async fetch() -> CanonicalObservation`
- raises NetworkError / ParseError / SchemaError (never returns partial data)
- validates its raw payload BEFORE converting it to the canonical shape
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol

import httpx

from gridpilot.climate import format_display_date
from gridpilot.models import HOURS_PER_DAY, SOURCE_DISPLAY_LENGTH, CanonicalObservation
from gridpilot.resilience import NetworkError, ParseError, SchemaError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0

HEADERS = {
    "User-Agent": "GridPilotX/1.0 (microgrid weather acquisition)"
}


class WeatherProvider(Protocol):
    name: str

    async def fetch(self) -> CanonicalObservation:
        ...


async def get_json(
    url: str,
    params: Dict[str, Any],
    provider_name: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
) -> Any:
    """
    GET a JSON document, mapping transport problems onto our error kinds.

    Raises:
        NetworkError: transport failure or non-2xx status
        ParseError: body is not JSON
    """
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout, headers=HEADERS) as own_client:
                resp = await own_client.get(url, params=params)
        else:
            resp = await client.get(url, params=params)
        logger.info(f"[{provider_name}] Response status: {resp.status_code}")
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise NetworkError(f"{provider_name} HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise NetworkError(f"{provider_name} request failed: {type(e).__name__} {e}") from e

    try:
        return resp.json()
    except ValueError as e:
        raise ParseError(f"{provider_name} returned a non-JSON body: {resp.text[:100]!r}") from e


def require(mapping: Any, key: str, provider_name: str) -> Any:
    """Fetch a required field, SchemaError if the container or key is missing."""
    if not isinstance(mapping, dict) or key not in mapping or mapping[key] is None:
        raise SchemaError(f"{provider_name} payload missing '{key}'")
    return mapping[key]


def require_hourly_series(values: Any, field: str, provider_name: str) -> List[float]:
    """Exactly 24 finite numbers, or SchemaError. No padding, no trimming."""
    if not isinstance(values, list):
        raise SchemaError(f"{provider_name} '{field}' is not a list")
    if len(values) != HOURS_PER_DAY:
        raise SchemaError(f"{provider_name} '{field}' has {len(values)} values, expected {HOURS_PER_DAY}")

    series: List[float] = []
    for i, v in enumerate(values):
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
            raise SchemaError(f"{provider_name} '{field}'[{i}] is not a number: {v!r}")
        series.append(float(v))
    return series


def build_observation(
    hourly_temp: List[float],
    hourly_humidity: List[float],
    hourly_cloud: List[float],
    sunrise_hour: float,
    sunset_hour: float,
    source: str,
    day: Optional[date] = None,
    now: Optional[datetime] = None,
) -> CanonicalObservation:
    """
    Assemble a live CanonicalObservation from validated series.

    Humidity and cloud are clamped to their display ranges (10-95%, 0-100%).
    """
    if not (0 <= sunrise_hour < sunset_hour < 24):
        raise SchemaError(f"{source} sunrise {sunrise_hour} / sunset {sunset_hour} out of order")

    now = now or datetime.now()
    day = day or now.date()

    return {
        "hourly_temp": [round(t, 1) for t in hourly_temp],
        "hourly_humidity": [round(max(10.0, min(95.0, h)), 1) for h in hourly_humidity],
        "hourly_cloud": [round(max(0.0, min(100.0, c)), 1) for c in hourly_cloud],
        "sunrise_hour": sunrise_hour,
        "sunset_hour": sunset_hour,
        "meta": {
            "date": format_display_date(day),
            "source": source[:SOURCE_DISPLAY_LENGTH],
            "last_updated": now.strftime("%H:%M:%S"),
            "is_fallback": False,
        },
    }
