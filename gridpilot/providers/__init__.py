"""
Providers package for GridPilot X

Live weather sources, in chain priority order:

1. WeatherAPI.com - Keyed, paid, named location (only with WEATHERAPI_KEY)
2. Open-Meteo     - Keyless numeric forecast for a fixed coordinate

Both translate their own payloads into a CanonicalObservation and raise
NetworkError / ParseError / SchemaError instead of returning partial data.
"""

from gridpilot.providers.base import (
    WeatherProvider,
    build_observation,
    get_json,
)

from gridpilot.providers.open_meteo import (
    OpenMeteoProvider,
    iso_to_decimal_hour,
)

from gridpilot.providers.weatherapi import (
    WeatherApiProvider,
    parse_12h_time,
)

__all__ = [
    "WeatherProvider",
    "build_observation",
    "get_json",
    # Open-Meteo (keyless)
    "OpenMeteoProvider",
    "iso_to_decimal_hour",
    # WeatherAPI.com (keyed)
    "WeatherApiProvider",
    "parse_12h_time",
]
