"""
Offline Synthesis Model for GridPilot X

Generates a physically plausible 24-hour weather profile from a
ClimateProfile. This is the terminal fallback of the provider chain, so it
must never fail.

Physics:
- Temperature: 24-hour half-cosine cycle, coldest at 05:00 (warmest at 17:00)
- Humidity: inverse of the temperature position (hot hours are drier)
- Cloud cover: noise band chosen by the profile's cloud kind

Randomness only changes noise magnitude inside a band. The qualitative shape
is fixed by the profile. Pass a seeded random.Random for reproducible output.
"""

import logging
import math
import random
from datetime import datetime
from typing import List, Optional, Protocol

from gridpilot.models import (
    HOURS_PER_DAY,
    SOURCE_DISPLAY_LENGTH,
    CanonicalObservation,
    ClimateProfile,
    CloudProfileKind,
)

logger = logging.getLogger(__name__)

OFFLINE_SOURCE = "Agra Offline Database (Baseline)"

# Coldest hour of the diurnal cycle. The curve is meant to peak mid-afternoon
# (~15:00), but the 24h half-cosine peaks 12h after the trough, at 17:00.
TROUGH_HOUR = 5

HUMIDITY_MIN = 10.0
HUMIDITY_MAX = 95.0
HUMIDITY_SWING = 30.0

# Afternoon convective buildup window (inclusive), peaking at 15:00
BUILDUP_START = 12
BUILDUP_END = 18
BUILDUP_PEAK_HOUR = 15
BUILDUP_PEAK_CLOUD = 40.0


class RandomSource(Protocol):
    """Anything with random() -> float in [0, 1), e.g. random.Random."""

    def random(self) -> float:
        ...


_default_rng = random.Random()


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def diurnal_temperature(hour: float, min_t: float, max_t: float) -> float:
    """Half-cosine temperature curve with trough at TROUGH_HOUR."""
    weight = (1 - math.cos((hour - TROUGH_HOUR) * 2 * math.pi / HOURS_PER_DAY)) / 2
    return min_t + (max_t - min_t) * weight


def relative_humidity(temp_c: float, min_t: float, max_t: float, humid_base: float) -> float:
    """Humidity falls as temperature rises through the day, clamped to 10-95%."""
    span = max_t - min_t
    factor = (temp_c - min_t) / span if span else 0.0
    return _clamp(humid_base + HUMIDITY_SWING * (1 - factor), HUMIDITY_MIN, HUMIDITY_MAX)


def cloud_cover(hour: int, kind: CloudProfileKind, rng: RandomSource) -> float:
    """Cloud cover (%) for one hour, clamped to 0-100."""
    if kind == CloudProfileKind.CLEAR:
        cloud = rng.random() * 5
    elif kind == CloudProfileKind.HAZY:
        cloud = 10 + rng.random() * 10
    elif kind == CloudProfileKind.OVERCAST:
        cloud = 70 + rng.random() * 20
    elif kind == CloudProfileKind.AFTERNOON_BUILDUP:
        if BUILDUP_START <= hour <= BUILDUP_END:
            dist = abs(hour - BUILDUP_PEAK_HOUR)
            cloud = BUILDUP_PEAK_CLOUD * (1 - dist / 4) + rng.random() * 15
        else:
            cloud = rng.random() * 10
    else:
        cloud = 0.0
    return _clamp(cloud, 0.0, 100.0)


def synthesize(
    profile: ClimateProfile,
    rng: Optional[RandomSource] = None,
    now: Optional[datetime] = None,
) -> CanonicalObservation:
    """
    Build a full CanonicalObservation from a climate profile.

    Args:
        profile: Seasonal baseline (see climate.profile_for)
        rng: Noise source; defaults to a module-level random.Random
        now: Timestamp for meta.last_updated; defaults to datetime.now()

    Returns:
        CanonicalObservation with meta.is_fallback = True
    """
    rng = rng or _default_rng
    now = now or datetime.now()

    logger.info(f"[synthesize] Generating offline profile: {profile.condition} "
                f"({profile.cloud_profile.value}, {profile.min_t}-{profile.max_t}C)")

    hourly_temp: List[float] = []
    hourly_humidity: List[float] = []
    hourly_cloud: List[float] = []

    for h in range(HOURS_PER_DAY):
        temp = diurnal_temperature(h, profile.min_t, profile.max_t)
        hourly_temp.append(round(temp, 1))
        hourly_humidity.append(round(relative_humidity(temp, profile.min_t, profile.max_t, profile.humid_base), 1))
        hourly_cloud.append(round(cloud_cover(h, profile.cloud_profile, rng), 1))

    logger.debug(f"[synthesize] Temp range {min(hourly_temp)}-{max(hourly_temp)}C, "
                 f"mean cloud {sum(hourly_cloud) / HOURS_PER_DAY:.1f}%")

    return {
        "hourly_temp": hourly_temp,
        "hourly_humidity": hourly_humidity,
        "hourly_cloud": hourly_cloud,
        "sunrise_hour": profile.sunrise_hour,
        "sunset_hour": profile.sunset_hour,
        "meta": {
            "date": profile.date,
            "source": OFFLINE_SOURCE[:SOURCE_DISPLAY_LENGTH],
            "last_updated": now.strftime("%H:%M:%S"),
            "is_fallback": True,
        },
    }
