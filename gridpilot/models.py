"""
Data model for GridPilot X weather acquisition.

CanonicalObservation is the ONLY weather shape the simulator and UI consume.
Everything that comes from outside (providers, vision extraction) is turned
into this shape before it leaves the acquisition layer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict

# Every hourly array at the system boundary has exactly this many entries
HOURS_PER_DAY = 24

# meta.source is shown in a narrow UI badge
SOURCE_DISPLAY_LENGTH = 25


class WeatherMeta(TypedDict):
    date: str
    source: str
    last_updated: str
    is_fallback: bool


class _CanonicalObservationBase(TypedDict):
    hourly_temp: List[float]      # degC, index = hour of day
    hourly_humidity: List[float]  # %, 10-95
    hourly_cloud: List[float]     # %, 0-100
    sunrise_hour: float           # decimal hour, e.g. 6.72
    sunset_hour: float
    meta: WeatherMeta


class CanonicalObservation(_CanonicalObservationBase, total=False):
    error: str  # Only present when a fallback happened after a failed attempt


class ScannedWeather(TypedDict):
    """Three arrays digitised from a weather graph image."""
    hourly_temp: List[float]
    hourly_humidity: List[float]
    hourly_cloud: List[float]


class CloudProfileKind(Enum):
    """Qualitative cloud behaviour used by the synthesis model."""
    CLEAR = "CLEAR"
    HAZY = "HAZY"
    OVERCAST = "OVERCAST"
    AFTERNOON_BUILDUP = "AFTERNOON_BUILDUP"


@dataclass(frozen=True)
class ClimateProfile:
    """Seasonal baseline for one day, input to the synthesis model."""
    day_offset: int
    condition: str
    max_t: float
    min_t: float
    humid_base: float
    cloud_profile: CloudProfileKind
    sunrise_hour: float
    sunset_hour: float
    date: str = ""


@dataclass(frozen=True)
class ProviderOutcome:
    """Result of one provider attempt. Consumed immediately by the chain."""
    provider: str
    observation: Optional[CanonicalObservation] = None
    error: Optional[Exception] = None
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.observation is not None and self.error is None

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return str(self.error) or type(self.error).__name__


# --- Dispatch simulator collaborator interface (typed only) ---

class HourlyTelemetry(TypedDict):
    hour: int
    adjusted_load_mw: float
    solar_mw: float
    grid_import_mw: float
    grid_export_mw: float
    battery_flow_mw: float
    soc_state_percent: float
    price_inr: float


class SimulationResult(TypedDict):
    hourly_data: List[HourlyTelemetry]
    audit: Dict[str, Any]


class _SimulationParamsBase(TypedDict):
    scenario: str
    weather: str
    hourly_temp: List[float]
    hourly_cloud: List[float]


class SimulationParams(_SimulationParamsBase, total=False):
    hourly_humidity: List[float]
    sunrise_hour: float
    sunset_hour: float
