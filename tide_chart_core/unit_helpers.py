"""Unit conversion helpers for tide levels.

All functions attempt to coerce to float and return None on failure.
Canonical units used by the library:
- validated tide levels: meters (m)
- chart scale: centimeters (cm)
"""
from typing import Any, Iterable, List, Optional
import logging
import math

_LOGGER = logging.getLogger(__name__)


def _to_float(v: Any) -> Optional[float]:
    try:
        if v is None or isinstance(v, bool):
            return None
        return float(v)
    except Exception:
        return None


def _to_finite_float(v: Any) -> Optional[float]:
    f = _to_float(v)
    if f is None or not math.isfinite(f):
        return None
    return f


def m_to_cm(v: Any) -> Optional[float]:
    """Convert meters to centimeters."""
    f = _to_float(v)
    if f is None:
        return None
    return f * 100.0


def levels_m_to_cm(levels_m: Iterable[Any]) -> List[float]:
    """Convert an iterable of meter levels to centimeters, dropping unusable values.

    Values are rounded to 0.01 cm so that 1.23 m -> 123.0 cm, not 122.99999999999999.
    """
    out: List[float] = []
    dropped = 0
    for v in levels_m:
        f = _to_finite_float(v)
        if f is None:
            dropped += 1
            continue
        out.append(round(m_to_cm(f), 2))
    if dropped:
        _LOGGER.debug("levels_m_to_cm dropped %d non-numeric level(s)", dropped)
    return out
