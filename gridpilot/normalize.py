"""
Array Normalizer for GridPilot X

Every array that originates outside our own code (model output, provider
payloads being repaired) goes through normalize_hourly() before it is used.

Policy (operators see the shape of degraded data, so keep it exact):
- Not a sequence     -> 24 x fill_value (strings and bytes are not sequences here)
- Too short          -> pad by repeating the LAST element (fill_value if empty)
- Too long           -> keep the first 24, drop the rest (no resampling)
- Non-numeric entry  -> fill_value
"""

import logging
import math
from collections.abc import Sequence
from typing import Any, List

from gridpilot.models import HOURS_PER_DAY

logger = logging.getLogger(__name__)


def _to_number(value: Any, fill_value: float) -> float:
    """Coerce one element to a finite float, or return fill_value."""
    if isinstance(value, bool):
        return float(value)
    try:
        num = float(value)
    except (TypeError, ValueError, OverflowError):
        # OverflowError: ints beyond float range, which JSON happily decodes
        return fill_value
    if math.isnan(num) or math.isinf(num):
        return fill_value
    return num


def normalize_hourly(values: Any, fill_value: float, length: int = HOURS_PER_DAY) -> List[float]:
    """
    Coerce an arbitrary value into exactly `length` numbers.

    Total function: never raises, whatever it is given.

    Args:
        values: Candidate sequence (list, tuple, range...), or anything else
        fill_value: Replacement for missing or non-numeric entries
        length: Target length (24 hours by default)

    Returns:
        List of `length` floats
    """
    if not isinstance(values, Sequence) or isinstance(values, (str, bytes, bytearray)):
        logger.debug(f"[normalize_hourly] Not a sequence ({type(values).__name__}), filling with {fill_value}")
        return [float(fill_value)] * length

    result = list(values[:length])
    if len(values) > length:
        logger.debug(f"[normalize_hourly] Dropped {len(values) - length} trailing values")

    # Pad with the last present element, raw, so it is coerced like the rest
    pad = result[-1] if result else fill_value
    while len(result) < length:
        result.append(pad)

    return [_to_number(v, float(fill_value)) for v in result]
