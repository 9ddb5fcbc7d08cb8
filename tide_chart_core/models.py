"""Data model shared by the validation, fallback and scale components.

Everything handed to a renderer exposes ``as_dict()`` returning plain
JSON-serializable values (enums as their values, datetimes as ISO-8601 Z).
"""
from __future__ import annotations

from dataclasses import dataclass, field as dc_field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class Severity(str, Enum):
    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"


class ErrorKind(str, Enum):
    # critical: chart cannot be drawn
    STRUCTURE_ERROR = "STRUCTURE_ERROR"
    EMPTY_DATA = "EMPTY_DATA"
    CORRUPTED_DATA = "CORRUPTED_DATA"
    # error: partial problems
    INVALID_TIME_FORMAT = "INVALID_TIME_FORMAT"
    TIDE_OUT_OF_RANGE = "TIDE_OUT_OF_RANGE"
    DUPLICATE_TIMESTAMP = "DUPLICATE_TIMESTAMP"
    TIDE_PRECISION_ERROR = "TIDE_PRECISION_ERROR"
    TIMEZONE_ERROR = "TIMEZONE_ERROR"
    # warning: minor problems
    DATA_QUALITY_WARNING = "DATA_QUALITY_WARNING"
    PROCESSING_TIMEOUT = "PROCESSING_TIMEOUT"


class WarningKind(str, Enum):
    DATA_QUALITY = "DATA_QUALITY"
    PERFORMANCE = "PERFORMANCE"
    USABILITY = "USABILITY"


class FallbackType(str, Enum):
    NONE = "none"
    PARTIAL_CHART = "partial-chart"
    SIMPLE_CHART = "simple-chart"
    TABLE = "table"


def _plain(value: Any, _seen: Optional[set] = None) -> Any:
    """Convert model values into JSON-friendly primitives; cyclic containers become "<cycle>"."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
    seen = set() if _seen is None else _seen
    if isinstance(value, _AsDictMixin):
        if id(value) in seen:
            return "<cycle>"
        return value.as_dict(seen)
    if isinstance(value, (dict, list, tuple)):
        if id(value) in seen:
            return "<cycle>"
        seen = seen | {id(value)}
        if isinstance(value, dict):
            return {str(k): _plain(v, seen) for k, v in value.items()}
        return [_plain(v, seen) for v in value]
    return value


class _AsDictMixin:
    def as_dict(self, _seen: Optional[set] = None) -> Dict[str, Any]:
        seen = (set() if _seen is None else _seen) | {id(self)}
        return {f.name: _plain(getattr(self, f.name), seen) for f in fields(self)}  # type: ignore[arg-type]


@dataclass(frozen=True)
class RawSample(_AsDictMixin):
    """Tide sample as supplied by a provider: ISO timestamp + level (metres)."""

    time: str
    level: float


@dataclass(frozen=True)
class TideChartPoint(_AsDictMixin):
    """Transformed sample ready for plotting."""

    x: int  # epoch milliseconds
    y: float
    timestamp: datetime


@dataclass
class ValidationError(_AsDictMixin):
    kind: ErrorKind
    severity: Severity
    message: str
    field: Optional[str] = None
    index: Optional[int] = None
    context: Dict[str, Any] = dc_field(default_factory=dict)


@dataclass
class ValidationWarning(_AsDictMixin):
    kind: WarningKind
    message: str
    field: Optional[str] = None
    index: Optional[int] = None
    suggestion: Optional[str] = None


@dataclass(frozen=True)
class ValidationSummary(_AsDictMixin):
    total_records: int
    valid_records: int
    error_records: int
    warning_records: int
    processing_time_ms: float


@dataclass
class ValidationResult(_AsDictMixin):
    is_valid: bool
    errors: List[ValidationError]
    warnings: List[ValidationWarning]
    summary: ValidationSummary
    data: Optional[List[TideChartPoint]] = None


@dataclass
class ErrorDisplayInfo(_AsDictMixin):
    level: str  # critical | error | warning | info
    title: str
    message: str
    fallback_type: FallbackType
    suggestion: Optional[str] = None
    debug_info: Optional[str] = None


@dataclass
class DynamicScale(_AsDictMixin):
    min: float
    max: float
    interval: float
    ticks: List[float]
    unit: str = "cm"

    def copy(self) -> "DynamicScale":
        return DynamicScale(self.min, self.max, self.interval, list(self.ticks), self.unit)


@dataclass
class DetailedScale(DynamicScale):
    data_range: Dict[str, float] = dc_field(default_factory=dict)
    margin: Dict[str, float] = dc_field(default_factory=dict)
    quality: Dict[str, Any] = dc_field(default_factory=dict)


def sample_value(sample: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a sample given as a mapping or as an object with attributes."""
    if isinstance(sample, Mapping):
        return sample.get(name, default)
    return getattr(sample, name, default)


def is_sample_like(sample: Any) -> bool:
    """True when the sample exposes both a ``time`` and a ``level``."""
    if isinstance(sample, Mapping):
        return "time" in sample and "level" in sample
    return hasattr(sample, "time") and hasattr(sample, "level")
