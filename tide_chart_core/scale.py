"""Vertical axis scale for tide charts (levels in centimetres).

Picks a tick interval from a ranked list of preferred intervals, pads the
data range with a margin, snaps the bounds outward to interval multiples
and lays out evenly spaced ticks. Results are memoized per calculator
instance in a small bounded cache.
"""
from __future__ import annotations

import copy
import json
import logging
import math
import threading
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from . import options as options_mod
from .const import (
    CACHE_KEY_DECIMALS,
    DEFAULT_SCALE,
    DEFAULT_SCALE_CACHE_SIZE,
    INTERVAL_FINE_MAX,
    INTERVAL_STANDARD_MAX,
    MEAN_SEA_LEVEL_BAND_CM,
    SCALE_UNIT,
    SINGLE_VALUE_INTERVAL_CM,
    SINGLE_VALUE_MIN_HALF_RANGE_CM,
    SINGLE_VALUE_RELATIVE_HALF_RANGE,
    TICK_DECIMALS,
)
from .models import DetailedScale, DynamicScale, sample_value
from .unit_helpers import _to_float

_LOGGER = logging.getLogger(__name__)

# guards floor/ceil against float noise such as 2.0000000000000004
_SNAP_DECIMALS = 9


class ScaleCache:
    """Thread-safe, insertion-ordered bounded map; evicts the oldest entry when full."""

    def __init__(self, maxsize: int = DEFAULT_SCALE_CACHE_SIZE) -> None:
        if maxsize < 1:
            raise ValueError("cache size must be at least 1")
        self.maxsize = maxsize
        self._data: "OrderedDict[str, Any]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            value = self._data.get(key)
            return copy.deepcopy(value) if value is not None else None

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            if key in self._data:
                self._data[key] = copy.deepcopy(value)
                return
            while len(self._data) >= self.maxsize:
                evicted, _ = self._data.popitem(last=False)
                _LOGGER.debug("Scale cache full; evicted %s", evicted)
            self._data[key] = copy.deepcopy(value)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


def extract_levels(samples: Optional[Iterable[Any]]) -> np.ndarray:
    """Levels from numbers, mappings with ``level`` or objects with ``.level``; non-finite values dropped."""
    if samples is None:
        return np.array([], dtype=float)
    values: List[float] = []
    for sample in samples:
        raw = sample if isinstance(sample, (int, float, np.number)) else sample_value(sample, "level")
        f = _to_float(raw)
        if f is not None:
            values.append(f)
    arr = np.asarray(values, dtype=float)
    return arr[np.isfinite(arr)]


def _default_scale() -> DynamicScale:
    return DynamicScale(
        min=DEFAULT_SCALE["min"],
        max=DEFAULT_SCALE["max"],
        interval=DEFAULT_SCALE["interval"],
        ticks=list(DEFAULT_SCALE["ticks"]),
        unit=DEFAULT_SCALE["unit"],
    )


def _snap(lower: float, upper: float, interval: float) -> Tuple[float, float]:
    lo = math.floor(round(lower / interval, _SNAP_DECIMALS)) * interval
    hi = math.ceil(round(upper / interval, _SNAP_DECIMALS)) * interval
    return lo, hi


def _ticks(lower: float, upper: float, interval: float) -> List[float]:
    count = int(round((upper - lower) / interval)) + 1
    return np.round(lower + np.arange(count) * interval, TICK_DECIMALS).tolist()


def select_interval(
    span: float,
    intervals: Sequence[float],
    min_ticks: int,
    max_ticks: int,
    target_tick_count: int,
    margin_multiplier: float,
) -> float:
    """First preferred interval whose projected tick count fits, else the closest to the ideal step."""
    display_span = span * margin_multiplier
    for interval in intervals:
        projected = math.ceil(round(display_span / interval, _SNAP_DECIMALS))
        if min_ticks <= projected <= max_ticks:
            return interval
    ideal = display_span / target_tick_count
    return min(intervals, key=lambda i: abs(i - ideal))


def interval_type(interval: float) -> str:
    if interval <= INTERVAL_FINE_MAX:
        return "fine"
    if interval <= INTERVAL_STANDARD_MAX:
        return "standard"
    return "coarse"


class DynamicScaleCalculator:
    """Compute chart axis scales; each instance owns its cache."""

    def __init__(self, cache_size: int = DEFAULT_SCALE_CACHE_SIZE) -> None:
        self._cache = ScaleCache(cache_size)

    def calculate_scale(self, samples: Optional[Iterable[Any]], options: Optional[Dict[str, Any]] = None) -> DynamicScale:
        opts = options_mod.scale_options(options)
        levels = extract_levels(samples)
        key = self._cache_key("scale", levels, opts)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        scale = self._compute(levels, opts)
        self._cache.put(key, scale)
        return copy.deepcopy(scale)

    def calculate_detailed_scale(
        self, samples: Optional[Iterable[Any]], options: Optional[Dict[str, Any]] = None
    ) -> DetailedScale:
        opts = options_mod.scale_options(options)
        levels = extract_levels(samples)
        key = self._cache_key("detailed", levels, opts)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        base = self._compute(levels, opts)
        if levels.size:
            data_min, data_max = float(levels.min()), float(levels.max())
        else:
            data_min = data_max = 0.0
        span = data_max - data_min
        display_span = float(base.max) - float(base.min)

        tick_count = len(base.ticks)
        if opts[options_mod.OPT_MIN_TICKS] <= tick_count <= opts[options_mod.OPT_MAX_TICKS]:
            tick_score = 1.0
        else:
            tick_score = max(0.0, 1.0 - 0.1 * abs(opts[options_mod.OPT_TARGET_TICK_COUNT] - tick_count))
        efficiency = min(1.0, span / display_span) if display_span > 0 else 0.0

        detailed = DetailedScale(
            min=base.min,
            max=base.max,
            interval=base.interval,
            ticks=list(base.ticks),
            unit=base.unit,
            data_range={"min": data_min, "max": data_max, "span": span},
            margin={"lower": data_min - float(base.min), "upper": float(base.max) - data_max},
            quality={
                "score": (tick_score + efficiency) / 2.0,
                "tick_count": tick_count,
                "interval_type": interval_type(float(base.interval)),
            },
        )
        self._cache.put(key, detailed)
        return copy.deepcopy(detailed)

    def clear_cache(self) -> None:
        self._cache.clear()

    # ----- internals -----

    @staticmethod
    def _cache_key(kind: str, levels: np.ndarray, opts: Dict[str, Any]) -> str:
        joined = ",".join(f"{round(v, CACHE_KEY_DECIMALS)!r}" for v in levels.tolist())
        return f"{kind}:{joined}|{json.dumps(opts, sort_keys=True)}"

    def _compute(self, levels: np.ndarray, opts: Dict[str, Any]) -> DynamicScale:
        if levels.size == 0:
            _LOGGER.debug("No usable levels; returning default scale")
            return _default_scale()

        data_min = float(levels.min())
        data_max = float(levels.max())
        span = data_max - data_min
        if span == 0:
            return self._single_value_scale(data_min)

        intervals = [float(i) for i in opts[options_mod.OPT_PREFERRED_INTERVALS]]
        min_ticks = opts[options_mod.OPT_MIN_TICKS]
        max_ticks = opts[options_mod.OPT_MAX_TICKS]
        interval = select_interval(
            span,
            intervals,
            min_ticks,
            max_ticks,
            opts[options_mod.OPT_TARGET_TICK_COUNT],
            opts[options_mod.OPT_MARGIN_MULTIPLIER],
        )

        margin = span * opts[options_mod.OPT_MARGIN_RATIO]
        lower = data_min - margin
        upper = data_max + margin
        near_mean_sea_level = data_min >= -MEAN_SEA_LEVEL_BAND_CM and data_max <= MEAN_SEA_LEVEL_BAND_CM
        if near_mean_sea_level or (lower < 0 < upper) or opts[options_mod.OPT_FORCE_ZERO]:
            lower = min(lower, 0.0)
            upper = max(upper, 0.0)

        larger = sorted(i for i in set(intervals) if i > interval)
        while True:
            lo, hi = _snap(lower, upper, interval)
            ticks = _ticks(lo, hi, interval)
            if len(ticks) <= max_ticks or not larger:
                break
            _LOGGER.debug("%d ticks at interval %s exceeds max_ticks=%d; widening", len(ticks), interval, max_ticks)
            interval = larger.pop(0)

        if len(ticks) > max_ticks:
            _LOGGER.debug("Keeping %d ticks at the largest preferred interval %s", len(ticks), interval)

        return DynamicScale(min=ticks[0], max=ticks[-1], interval=interval, ticks=ticks, unit=SCALE_UNIT)

    @staticmethod
    def _single_value_scale(center: float) -> DynamicScale:
        half = max(SINGLE_VALUE_MIN_HALF_RANGE_CM, abs(center) * SINGLE_VALUE_RELATIVE_HALF_RANGE)
        # whole intervals on each side keep the range centred on the value
        half = math.ceil(round(half / SINGLE_VALUE_INTERVAL_CM, _SNAP_DECIMALS)) * SINGLE_VALUE_INTERVAL_CM
        ticks = _ticks(center - half, center + half, SINGLE_VALUE_INTERVAL_CM)
        return DynamicScale(min=ticks[0], max=ticks[-1], interval=SINGLE_VALUE_INTERVAL_CM, ticks=ticks, unit=SCALE_UNIT)
