"""
Resilience Infrastructure for GridPilot X

Error kinds, error categorisation, per-attempt deadlines and retry logic for
the weather acquisition chain.

Features:
- Exception hierarchy shared by all providers and the vision scanner
- Error categorization (timeout, rate_limit, api_error, parse_error, ...)
- Per-attempt deadline: a hung upstream call becomes an ordinary NetworkError
- Optional retries with exponential backoff + jitter (off by default, the
  keyed provider is billed per call)
"""

import asyncio
import json
import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple

import httpx

from gridpilot.models import CanonicalObservation, ProviderOutcome

logger = logging.getLogger(__name__)


class WeatherAcquisitionError(Exception):
    """Base class for every data-acquisition failure."""


class NetworkError(WeatherAcquisitionError):
    """Transport failure, timeout or non-2xx HTTP status."""


class SchemaError(WeatherAcquisitionError):
    """Decoded payload is missing fields or has wrong array lengths."""


class ParseError(WeatherAcquisitionError):
    """Response body is not valid structured data."""


class ExtractionFailure(WeatherAcquisitionError):
    """Generative model returned no usable content."""


class ErrorType(Enum):
    """Categories of errors for tracking."""
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    API_ERROR = "api_error"
    PARSE_ERROR = "parse_error"
    SCHEMA_ERROR = "schema_error"
    EXTRACTION_FAILURE = "extraction_failure"
    UNKNOWN = "unknown"


@dataclass
class RetryConfig:
    """Configuration for one provider attempt."""
    max_retries: int = 0  # 0 retries = 1 attempt
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 5.0
    exponential_base: float = 2.0
    jitter: bool = True
    timeout_seconds: Optional[float] = 15.0  # None disables the deadline


DEFAULT_RETRY_CONFIG = RetryConfig()


def categorize_error(exception: BaseException) -> Tuple[ErrorType, str]:
    """
    Categorize an exception for logging.

    Returns:
        Tuple of (ErrorType, error_message)
    """
    error_msg = str(exception)[:200]  # Truncate long messages

    if isinstance(exception, (asyncio.TimeoutError, httpx.TimeoutException)):
        return (ErrorType.TIMEOUT, f"Timeout: {error_msg}")

    if isinstance(exception, httpx.HTTPStatusError):
        status = exception.response.status_code
        if status in (429, 503):
            return (ErrorType.RATE_LIMIT, f"HTTP {status}: {error_msg}")
        return (ErrorType.API_ERROR, f"HTTP {status}: {error_msg}")

    if isinstance(exception, httpx.RequestError):
        return (ErrorType.API_ERROR, f"Request error: {error_msg}")

    if isinstance(exception, NetworkError):
        if isinstance(exception.__cause__, (asyncio.TimeoutError, httpx.TimeoutException)):
            return (ErrorType.TIMEOUT, error_msg)
        return (ErrorType.API_ERROR, error_msg)

    if isinstance(exception, SchemaError):
        return (ErrorType.SCHEMA_ERROR, error_msg)

    if isinstance(exception, ExtractionFailure):
        return (ErrorType.EXTRACTION_FAILURE, error_msg)

    if isinstance(exception, (ParseError, json.JSONDecodeError, KeyError, ValueError, TypeError)):
        return (ErrorType.PARSE_ERROR, f"Parse error: {error_msg}")

    return (ErrorType.UNKNOWN, error_msg)


def calculate_backoff_delay(attempt: int, config: RetryConfig) -> float:
    """
    Calculate delay with exponential backoff and optional jitter.

    Args:
        attempt: The retry attempt number (0-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay = min(
        config.base_delay_seconds * (config.exponential_base ** attempt),
        config.max_delay_seconds
    )

    if config.jitter:
        # Add up to 25% jitter
        delay += delay * 0.25 * random.random()

    return delay


def is_retryable_error(exception: BaseException) -> bool:
    """Transport problems may clear up; bad payloads will come back the same."""
    if isinstance(exception, (SchemaError, ParseError, ExtractionFailure)):
        return False
    if isinstance(exception, NetworkError):
        cause = exception.__cause__
        if isinstance(cause, httpx.HTTPStatusError):
            status = cause.response.status_code
            return status in (408, 429) or status >= 500
        return True
    return False


async def _with_deadline(attempt: Callable[[], Awaitable[CanonicalObservation]],
                         timeout: Optional[float]) -> CanonicalObservation:
    if timeout is None:
        return await attempt()
    try:
        return await asyncio.wait_for(attempt(), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise NetworkError(f"No response within {timeout:g}s") from e


async def run_attempt(
    provider_name: str,
    attempt: Callable[[], Awaitable[CanonicalObservation]],
    config: Optional[RetryConfig] = None,
) -> ProviderOutcome:
    """
    Run one provider attempt under a deadline, retrying transient failures.

    Never raises: every failure is returned inside the ProviderOutcome.

    Args:
        provider_name: Name for logging
        attempt: Zero-argument coroutine factory (e.g. provider.fetch)
        config: Retry/deadline configuration

    Returns:
        ProviderOutcome with either an observation or the last error
    """
    if config is None:
        config = DEFAULT_RETRY_CONFIG

    start_time = time.time()
    last_exception: Optional[Exception] = None

    for n in range(config.max_retries + 1):
        if n > 0:
            delay = calculate_backoff_delay(n - 1, config)
            logger.info(f"[{provider_name}] Retry {n}/{config.max_retries} after {delay:.1f}s delay")
            await asyncio.sleep(delay)

        try:
            observation = await _with_deadline(attempt, config.timeout_seconds)
        except Exception as e:
            last_exception = e
            error_type, error_msg = categorize_error(e)
            logger.warning(f"[{provider_name}] Attempt {n + 1} failed: {error_type.value} - {error_msg}")

            if not is_retryable_error(e):
                logger.info(f"[{provider_name}] Error not retryable, giving up")
                break
            continue

        elapsed = time.time() - start_time
        logger.info(f"[{provider_name}] Succeeded on attempt {n + 1} ({elapsed:.2f}s total)")
        return ProviderOutcome(provider_name, observation=observation, elapsed_seconds=elapsed)

    elapsed = time.time() - start_time
    logger.error(f"[{provider_name}] Failed after {elapsed:.2f}s: {last_exception}")
    return ProviderOutcome(provider_name, error=last_exception, elapsed_seconds=elapsed)
