"""Soft data-quality findings on samples that already passed validation.

Three independent scans, reported in this order: boundary proximity,
time-sequence order, data density. They never remove a sample from the
valid set.
"""
from __future__ import annotations

import logging
import math
from typing import Any, List, Optional, Sequence

from .const import BOUNDARY_WARNING_THRESHOLD_M, MAX_GAP_HOURS, MAX_GAP_HOURS_STRICT, MAX_TIDE_M, MIN_TIDE_M
from .field_validator import is_real_number, parse_timestamp
from .models import ValidationWarning, WarningKind, sample_value

_LOGGER = logging.getLogger(__name__)

_SECONDS_PER_HOUR = 3600.0


def check_boundary_values(
    samples: Sequence[Any],
    min_tide_m: float = MIN_TIDE_M,
    max_tide_m: float = MAX_TIDE_M,
    threshold_m: float = BOUNDARY_WARNING_THRESHOLD_M,
) -> List[ValidationWarning]:
    warnings: List[ValidationWarning] = []
    for index, sample in enumerate(samples):
        level = sample_value(sample, "level")
        if not is_real_number(level) or not math.isfinite(float(level)):
            continue
        level = float(level)
        if level > max_tide_m - threshold_m:
            warnings.append(
                ValidationWarning(
                    kind=WarningKind.DATA_QUALITY,
                    message=f"Tide level {level}m is too close to the upper limit {max_tide_m}m",
                    field="level",
                    index=index,
                    suggestion="Check the precision of the measured value",
                )
            )
        elif level < min_tide_m + threshold_m:
            warnings.append(
                ValidationWarning(
                    kind=WarningKind.DATA_QUALITY,
                    message=f"Tide level {level}m is too close to the lower limit {min_tide_m}m",
                    field="level",
                    index=index,
                    suggestion="Check the precision of the measured value",
                )
            )
    return warnings


def _timestamps(samples: Sequence[Any]) -> List[Optional[float]]:
    out: List[Optional[float]] = []
    for sample in samples:
        parsed = parse_timestamp(sample_value(sample, "time"))
        out.append(parsed.timestamp() if parsed is not None else None)
    return out


def check_time_sequence(samples: Sequence[Any], epochs: Optional[List[Optional[float]]] = None) -> List[ValidationWarning]:
    if len(samples) < 2:
        return []
    epochs = epochs if epochs is not None else _timestamps(samples)
    warnings: List[ValidationWarning] = []
    for i in range(1, len(samples)):
        prev, cur = epochs[i - 1], epochs[i]
        if prev is None or cur is None:
            continue
        if cur < prev:
            warnings.append(
                ValidationWarning(
                    kind=WarningKind.DATA_QUALITY,
                    message=f"Time series is out of order (index {i - 1} -> {i})",
                    field="time",
                    index=i,
                    suggestion="Sort the data by time",
                )
            )
    return warnings


def check_data_density(
    samples: Sequence[Any],
    max_gap_hours: float = MAX_GAP_HOURS,
    epochs: Optional[List[Optional[float]]] = None,
) -> List[ValidationWarning]:
    if len(samples) < 2:
        return []
    epochs = epochs if epochs is not None else _timestamps(samples)
    warnings: List[ValidationWarning] = []
    for i in range(1, len(samples)):
        prev, cur = epochs[i - 1], epochs[i]
        if prev is None or cur is None:
            continue
        gap_hours = (cur - prev) / _SECONDS_PER_HOUR
        if gap_hours > max_gap_hours:
            warnings.append(
                ValidationWarning(
                    kind=WarningKind.DATA_QUALITY,
                    message=f"Gap between samples is {gap_hours:.1f} hours",
                    field="time",
                    index=i,
                    suggestion="Check the data acquisition frequency",
                )
            )
    return warnings


def generate(
    valid_samples: Optional[Sequence[Any]],
    strict: bool = False,
    min_tide_m: float = MIN_TIDE_M,
    max_tide_m: float = MAX_TIDE_M,
) -> List[ValidationWarning]:
    """Return boundary, sequence and density warnings for ``valid_samples``.

    Strict mode tightens the density check from a 6 h to a 3 h gap.
    """
    if not valid_samples:
        return []

    samples = list(valid_samples)
    epochs = _timestamps(samples)
    max_gap = MAX_GAP_HOURS_STRICT if strict else MAX_GAP_HOURS

    warnings: List[ValidationWarning] = []
    warnings.extend(check_boundary_values(samples, min_tide_m, max_tide_m))
    warnings.extend(check_time_sequence(samples, epochs))
    warnings.extend(check_data_density(samples, max_gap, epochs))

    if warnings:
        _LOGGER.debug("Generated %d data quality warning(s) for %d samples", len(warnings), len(samples))
    return warnings
