"""
Environment-driven settings for GridPilot X.

Values are read with os.getenv. The entry script loads `.env` with
python-dotenv before building Settings, so keys can live in either place.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from gridpilot.resilience import RetryConfig

logger = logging.getLogger(__name__)

# Agra, Uttar Pradesh
AGRA_LAT = 27.1767
AGRA_LON = 78.0081
AGRA_TIMEZONE = "Asia/Kolkata"

DEFAULT_MODEL = "claude-sonnet-4-5"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[Settings] {name}={raw!r} is not a number, using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[Settings] {name}={raw!r} is not an integer, using {default}")
        return default


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    weatherapi_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    location: str = "Agra"
    latitude: float = AGRA_LAT
    longitude: float = AGRA_LON
    timezone: str = AGRA_TIMEZONE
    attempt_timeout: float = 15.0
    max_retries: int = 0
    offline: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls(
            weatherapi_key=os.getenv("WEATHERAPI_KEY") or None,
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            model=os.getenv("GRIDPILOT_MODEL") or DEFAULT_MODEL,
            location=os.getenv("GRIDPILOT_LOCATION") or "Agra",
            latitude=_env_float("GRIDPILOT_LAT", AGRA_LAT),
            longitude=_env_float("GRIDPILOT_LON", AGRA_LON),
            timezone=os.getenv("GRIDPILOT_TIMEZONE") or AGRA_TIMEZONE,
            attempt_timeout=_env_float("GRIDPILOT_ATTEMPT_TIMEOUT", 15.0),
            max_retries=max(0, _env_int("GRIDPILOT_MAX_RETRIES", 0)),
            offline=_env_flag("GRIDPILOT_OFFLINE"),
        )
        logger.debug(f"[Settings] keyed provider {'enabled' if settings.weatherapi_key else 'disabled'}, "
                     f"offline={settings.offline}, timeout={settings.attempt_timeout}s")
        return settings

    @property
    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_retries=self.max_retries,
            timeout_seconds=self.attempt_timeout if self.attempt_timeout > 0 else None,
        )
