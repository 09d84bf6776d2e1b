"""
Provider Chain Orchestrator for GridPilot X

    START -> TRY_KEYED (if WEATHERAPI_KEY) -> TRY_KEYLESS -> SYNTHESIZE -> DONE

The chain is an ordered list of (name, attempt) pairs folded sequentially:
the first success wins, every failure is caught and logged, and the Offline
Synthesis Model closes the chain so fetch_hourly_weather() ALWAYS returns a
valid observation.

Attempts are never raced: the paid provider must not be billed alongside the
free one when the free one would have sufficed.
"""

import logging
import random
from datetime import date
from typing import Awaitable, Callable, List, Optional, Tuple

import httpx

from gridpilot.climate import profile_for
from gridpilot.config import Settings
from gridpilot.models import CanonicalObservation, ProviderOutcome
from gridpilot.providers.open_meteo import OpenMeteoProvider
from gridpilot.providers.weatherapi import WeatherApiProvider
from gridpilot.resilience import RetryConfig, run_attempt
from gridpilot.synthesis import RandomSource, synthesize

logger = logging.getLogger(__name__)

Attempt = Callable[[], Awaitable[CanonicalObservation]]


def build_attempts(
    settings: Settings,
    client: Optional[httpx.AsyncClient] = None,
) -> List[Tuple[str, Attempt]]:
    """
    Ordered (name, attempt) pairs for the configured providers.

    Keyed provider first (only when its credential is set), keyless next.
    Offline mode returns an empty list.
    """
    if settings.offline:
        logger.info("[build_attempts] Offline mode - skipping all live providers")
        return []

    attempts: List[Tuple[str, Attempt]] = []
    # None (attempt_timeout <= 0) means no HTTP timeout either
    timeout = settings.retry_config.timeout_seconds

    if settings.weatherapi_key:
        keyed = WeatherApiProvider(settings.weatherapi_key, settings.location,
                                   client=client, timeout=timeout)
        attempts.append((keyed.name, keyed.fetch))
    else:
        logger.info("[build_attempts] WEATHERAPI_KEY not set - keyed provider skipped")

    keyless = OpenMeteoProvider(settings.latitude, settings.longitude, settings.timezone,
                                client=client, timeout=timeout)
    attempts.append((keyless.name, keyless.fetch))

    return attempts


class ProviderChain:
    """
    Fold over provider attempts, stopping at the first success.

    `outcomes` holds the ProviderOutcome of every attempt made by the last
    run(), for diagnostics.
    """

    def __init__(
        self,
        attempts: List[Tuple[str, Attempt]],
        retry_config: Optional[RetryConfig] = None,
        rng: Optional[RandomSource] = None,
        today: Optional[date] = None,
        day_offset: int = 0,
    ):
        self.attempts = list(attempts)
        self.retry_config = retry_config
        self.rng = rng
        self.today = today
        self.day_offset = day_offset
        self.outcomes: List[ProviderOutcome] = []

    async def run(self) -> CanonicalObservation:
        self.outcomes = []
        last_error: Optional[str] = None

        for name, attempt in self.attempts:
            logger.info(f"[ProviderChain] Trying {name}...")
            outcome = await run_attempt(name, attempt, self.retry_config)
            self.outcomes.append(outcome)

            if outcome.ok:
                logger.info(f"[ProviderChain] {name}: LIVE ({outcome.elapsed_seconds:.2f}s)")
                return outcome.observation

            last_error = outcome.error_message
            logger.warning(f"[ProviderChain] {name}: FAILED - {last_error}")

        return self._synthesize(last_error)

    def _synthesize(self, last_error: Optional[str]) -> CanonicalObservation:
        today = self.today or date.today()
        logger.warning(f"[ProviderChain] No live provider succeeded - using offline synthesis "
                       f"(day offset {self.day_offset})")

        observation = synthesize(profile_for(self.day_offset, today), rng=self.rng)
        if last_error:
            observation["error"] = last_error
        return observation


async def fetch_hourly_weather(
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
    day_offset: int = 0,
) -> CanonicalObservation:
    """
    Fetch today's hourly weather. Never raises.

    Args:
        settings: Configuration (defaults to Settings.from_env())
        client: Shared httpx.AsyncClient for the live providers
        rng: Noise source for the offline fallback
        today: Reference date for the offline fallback
        day_offset: Climate profile used by the offline fallback (0 = today)

    Returns:
        CanonicalObservation - live when possible, synthesized otherwise
    """
    settings = settings or Settings.from_env()
    chain = ProviderChain(
        build_attempts(settings, client),
        retry_config=settings.retry_config,
        rng=rng,
        today=today,
        day_offset=day_offset,
    )
    observation = await chain.run()

    meta = observation["meta"]
    logger.info(f"[fetch_hourly_weather] Source: {meta['source']} "
                f"({'FALLBACK' if meta['is_fallback'] else 'LIVE'})")
    return observation
