"""
Climate Profile Table for GridPilot X

10-day seasonal baselines for Agra, Uttar Pradesh (Feb/March context).
Feeds the Offline Synthesis Model when no live provider is reachable.

Agra physics constants:
- Sunrise approx 6:35 AM - 6:45 AM
- Sunset approx 6:15 PM - 6:25 PM
- Dry season: wide diurnal range, low afternoon humidity

The physical parameters are constants. Only the display date depends on
"today", and today is always passed in explicitly.
"""

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import List

from gridpilot.models import ClimateProfile, CloudProfileKind

logger = logging.getLogger(__name__)

_K = CloudProfileKind

# (day_offset, condition, max_t, min_t, humid_base, cloud_profile, sunrise, sunset)
AGRA_BASE = (
    ClimateProfile(0, "Clear", 28.5, 12.4, 45, _K.CLEAR, 6.72, 18.25),
    ClimateProfile(1, "Hazy Sun", 29.1, 13.1, 50, _K.HAZY, 6.70, 18.27),
    ClimateProfile(2, "Sunny", 30.2, 13.5, 40, _K.CLEAR, 6.68, 18.28),
    ClimateProfile(3, "Partly Cloudy", 27.8, 14.2, 55, _K.AFTERNOON_BUILDUP, 6.67, 18.30),
    ClimateProfile(4, "Cloudy", 26.5, 15.1, 65, _K.OVERCAST, 6.65, 18.32),
    ClimateProfile(5, "Clear", 28.0, 13.0, 42, _K.CLEAR, 6.63, 18.33),
    ClimateProfile(6, "Sunny", 29.5, 13.8, 38, _K.CLEAR, 6.62, 18.35),
    ClimateProfile(7, "Hazy", 31.0, 14.5, 48, _K.HAZY, 6.60, 18.37),
    ClimateProfile(8, "Warm", 32.2, 15.0, 35, _K.CLEAR, 6.58, 18.38),
    ClimateProfile(9, "Hot/Dry", 33.5, 16.2, 30, _K.CLEAR, 6.57, 18.40),
)


def format_display_date(day: date) -> str:
    """Short display date, e.g. 'Sun, 18 Oct 2026'."""
    return day.strftime("%a, %d %b %Y")


def profile_for(day_offset: int, today: date) -> ClimateProfile:
    """
    Look up the climate profile for a day-ahead offset.

    Args:
        day_offset: Days ahead of today (0-9); anything else means today
        today: The reference date used for the display date

    Returns:
        ClimateProfile with `date` set for display
    """
    if not isinstance(day_offset, int) or not 0 <= day_offset < len(AGRA_BASE):
        logger.debug(f"[profile_for] Offset {day_offset!r} out of range, using today")
        day_offset = 0

    base = AGRA_BASE[day_offset]
    return replace(base, date=format_display_date(today + timedelta(days=base.day_offset)))


def ten_day_outlook(today: date) -> List[ClimateProfile]:
    """All ten profiles with display dates, for the outlook strip."""
    return [profile_for(p.day_offset, today) for p in AGRA_BASE]
