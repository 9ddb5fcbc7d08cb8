"""Default per-field rules for tide samples.

``TideFieldValidator`` is the collaborator injected into the validation
engine. Swap it for another object exposing ``validate_time_format`` and
``validate_tide_range`` to change the rule set without touching the engine.
"""
from __future__ import annotations

import logging
import math
import numbers
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from homeassistant.util import dt as dt_util

from .const import MAX_TIDE_M, MIN_TIDE_M
from .errors import EmptyDataError, InvalidTimeFormatError, StructureError, TideOutOfRangeError
from .models import is_sample_like, sample_value

_LOGGER = logging.getLogger(__name__)

# YYYY-MM-DDTHH:MM:SS[.ffffff][Z|+HH:MM]
ISO8601_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{1,6})?(?:Z|[+-]\d{2}:\d{2})?$"
)
TIMEZONE_SUFFIX_PATTERN = re.compile(r"(?:Z|[+-]\d{2}:\d{2})$")


def matches_iso_pattern(time: Any) -> bool:
    """Cheap shape check only; no calendar validation."""
    return isinstance(time, str) and bool(ISO8601_PATTERN.match(time))


def has_explicit_timezone(time: Any) -> bool:
    return isinstance(time, str) and bool(TIMEZONE_SUFFIX_PATTERN.search(time))


def parse_timestamp(time: Any):
    """Parse an ISO timestamp to an aware UTC datetime, or None when unusable.

    Naive timestamps are interpreted in the default time zone (UTC unless
    changed through ``dt_util.set_default_time_zone``).
    """
    if not isinstance(time, str) or not time:
        return None
    try:
        parsed = dt_util.parse_datetime(time)
    except ValueError:
        # regex fallback in parse_datetime raises on impossible dates (e.g. Feb 30)
        return None
    if parsed is None:
        return None
    return dt_util.as_utc(parsed)


def is_real_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def decimal_places(level: Any) -> Optional[int]:
    """Number of decimal places in the shortest representation of ``level``."""
    if not is_real_number(level):
        return None
    try:
        f = float(level)
        if not math.isfinite(f):
            return None
        exponent = Decimal(repr(f)).normalize().as_tuple().exponent
    except (InvalidOperation, ValueError, OverflowError):
        return None
    if not isinstance(exponent, int):
        return None
    return max(0, -exponent)


class TideFieldValidator:
    """ISO-8601 time format and tide range rules (levels in meters)."""

    def __init__(self, min_tide_m: float = MIN_TIDE_M, max_tide_m: float = MAX_TIDE_M) -> None:
        if min_tide_m >= max_tide_m:
            raise ValueError(f"min_tide_m ({min_tide_m}) must be below max_tide_m ({max_tide_m})")
        self.min_tide_m = float(min_tide_m)
        self.max_tide_m = float(max_tide_m)

    def validate_time_format(self, time: Any) -> bool:
        """True when ``time`` has ISO-8601 shape and names a real calendar instant."""
        if not matches_iso_pattern(time):
            return False
        return parse_timestamp(time) is not None

    def validate_tide_range(self, level: Any) -> bool:
        if not is_real_number(level):
            return False
        f = float(level)
        if not math.isfinite(f):
            return False
        return self.min_tide_m <= f <= self.max_tide_m

    def validate_data_array(self, samples: Optional[Sequence[Any]]) -> None:
        """Raise the first validation failure found in ``samples``."""
        if not samples:
            raise EmptyDataError()

        for index, sample in enumerate(samples):
            if not is_sample_like(sample):
                raise StructureError("Invalid data structure", index=index)
            time = sample_value(sample, "time")
            if not self.validate_time_format(time):
                raise InvalidTimeFormatError(time, index)
            level = sample_value(sample, "level")
            if not self.validate_tide_range(level):
                raise TideOutOfRangeError(level, index, self.min_tide_m, self.max_tide_m)
