"""
Weather Graph Scanner for GridPilot X

Digitises a forecast chart (screenshot/photo) into three 24-hour arrays with
Claude vision. The model is forced to answer through a tool whose input
schema is the three-array object, so the reply is structured data.

Whatever happens (no key, transport error, empty or malformed reply) the
caller gets usable arrays: either the normalized extraction or the fixed
fallback profile (25C, 50%, 0% cloud).
"""

import base64
import json
import logging
import mimetypes
import re
from pathlib import Path
from typing import Any, Optional, Tuple

import anthropic

from gridpilot.config import DEFAULT_MODEL, Settings
from gridpilot.models import HOURS_PER_DAY, ScannedWeather
from gridpilot.normalize import normalize_hourly
from gridpilot.resilience import ExtractionFailure, ParseError, SchemaError, categorize_error

logger = logging.getLogger(__name__)

# Per-field fill values for missing or unreadable points
FALLBACK_TEMP_C = 25.0
FALLBACK_HUMIDITY = 50.0
FALLBACK_CLOUD = 0.0

EXTRACTION_TOOL = "record_hourly_weather"

_FIELDS = ("hourly_temp", "hourly_humidity", "hourly_cloud")

EXTRACTION_SCHEMA = {
    "type": "object",
    "properties": {
        field: {"type": "array", "items": {"type": "number"}}
        for field in _FIELDS
    },
    "required": list(_FIELDS),
}

EXTRACTION_PROMPT = """
**Role:** Expert Meteorological Data Analyst.
**Task:** Extract hourly weather data from this graph/chart for a 24-hour period (00:00 to 23:00).

**Requirements:**
1. **Temperature (C):** Trace the temperature curve carefully.
2. **Humidity (%):** Trace the humidity curve.
3. **Cloud Cover (%):** Look for cloud icons, bars, or a specific curve. If NO cloud data is visible, return an array of zeros.

**Critical:** If the graph only shows points every few hours (e.g. 3h, 6h), **INTERPOLATE linearly** to generate exactly 24 hourly data points.

**Output:** Call the `record_hourly_weather` tool with keys "hourly_temp", "hourly_humidity", "hourly_cloud".
Each must be an array of exactly 24 numbers.
"""

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def create_fallback_profile() -> ScannedWeather:
    """Flat, neutral profile returned whenever extraction fails."""
    return {
        "hourly_temp": [FALLBACK_TEMP_C] * HOURS_PER_DAY,
        "hourly_humidity": [FALLBACK_HUMIDITY] * HOURS_PER_DAY,
        "hourly_cloud": [FALLBACK_CLOUD] * HOURS_PER_DAY,
    }


def load_image(path: Path) -> Tuple[bytes, str]:
    """Read an image file, returning (bytes, media_type)."""
    path = Path(path)
    media_type, _ = mimetypes.guess_type(path.name)
    return path.read_bytes(), media_type or "image/png"


def extract_payload(response: Any) -> dict:
    """
    Pull the structured answer out of a Messages API response.

    Prefers the forced tool call; falls back to JSON in a text block.

    Raises:
        ExtractionFailure: no tool input and no text
        ParseError: text is not a JSON object
        SchemaError: a required array is missing
    """
    content = getattr(response, "content", None) or []

    payload = None
    for block in content:
        if getattr(block, "type", None) == "tool_use" and getattr(block, "name", None) == EXTRACTION_TOOL:
            payload = block.input
            break

    if payload is None:
        text = "".join(getattr(block, "text", "") or "" for block in content
                       if getattr(block, "type", None) == "text").strip()
        if not text:
            raise ExtractionFailure("Vision parser returned no content.")
        try:
            payload = json.loads(_CODE_FENCE.sub("", text))
        except json.JSONDecodeError as e:
            raise ParseError(f"Vision reply is not JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ParseError(f"Vision reply is a {type(payload).__name__}, expected an object")

    missing = [field for field in _FIELDS if field not in payload]
    if missing:
        raise SchemaError(f"Vision reply missing {', '.join(missing)}")

    return payload


async def parse_weather_graph(
    image: bytes,
    media_type: str = "image/png",
    settings: Optional[Settings] = None,
    client: Optional[anthropic.AsyncAnthropic] = None,
) -> ScannedWeather:
    """
    Digitise a weather graph into 24-hour temperature/humidity/cloud arrays.

    Never raises.

    Args:
        image: Raw image bytes
        media_type: e.g. "image/png", "image/jpeg"
        settings: Configuration (defaults to Settings.from_env())
        client: Injected Anthropic client (tests, or a shared client)

    Returns:
        ScannedWeather, normalized to 24 values per field
    """
    settings = settings or Settings.from_env()

    if client is None:
        if not settings.anthropic_api_key:
            logger.error("[parse_weather_graph] ANTHROPIC_API_KEY missing - returning fallback profile")
            return create_fallback_profile()
        client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)

    logger.info(f"[parse_weather_graph] Scanning {len(image)} byte {media_type} image "
                f"with {settings.model or DEFAULT_MODEL}...")

    try:
        response = await client.messages.create(
            model=settings.model or DEFAULT_MODEL,
            max_tokens=2048,
            tools=[{
                "name": EXTRACTION_TOOL,
                "description": "Record 24 hourly weather values digitised from the chart.",
                "input_schema": EXTRACTION_SCHEMA,
            }],
            tool_choice={"type": "tool", "name": EXTRACTION_TOOL},
            messages=[{
                "role": "user",
                "content": [
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": media_type,
                            "data": base64.b64encode(image).decode("ascii"),
                        },
                    },
                    {"type": "text", "text": EXTRACTION_PROMPT},
                ],
            }],
        )
        data = extract_payload(response)
    except Exception as e:
        error_type, error_msg = categorize_error(e)
        logger.error(f"[parse_weather_graph] Vision error ({error_type.value}): {error_msg}")
        return create_fallback_profile()

    for field in _FIELDS:
        values = data.get(field)
        if not isinstance(values, list) or len(values) != HOURS_PER_DAY:
            logger.warning(f"[parse_weather_graph] {field}: got "
                           f"{len(values) if isinstance(values, list) else type(values).__name__}, normalizing")

    return {
        "hourly_temp": normalize_hourly(data.get("hourly_temp"), FALLBACK_TEMP_C),
        "hourly_humidity": normalize_hourly(data.get("hourly_humidity"), FALLBACK_HUMIDITY),
        "hourly_cloud": normalize_hourly(data.get("hourly_cloud"), FALLBACK_CLOUD),
    }
