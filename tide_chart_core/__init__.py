"""
Tide Chart Core - validation, graceful degradation and axis scaling for tide charts.

Raw samples (ISO timestamp + level in metres) are validated, problems are
ranked by severity, a fallback display mode is chosen from the share of
valid samples, and an axis scale (cm) is computed for what survives.
"""

from .error_handler import TideChartErrorHandler
from .field_validator import TideFieldValidator
from .models import (
    DetailedScale,
    DynamicScale,
    ErrorDisplayInfo,
    ErrorKind,
    FallbackType,
    RawSample,
    Severity,
    TideChartPoint,
    ValidationError,
    ValidationResult,
    ValidationSummary,
    ValidationWarning,
    WarningKind,
)
from .pipeline import TideChartPipeline
from .scale import DynamicScaleCalculator
from .transformer import TideDataTransformer
from .validator import TideDataValidator

__all__ = [
    "DetailedScale",
    "DynamicScale",
    "DynamicScaleCalculator",
    "ErrorDisplayInfo",
    "ErrorKind",
    "FallbackType",
    "RawSample",
    "Severity",
    "TideChartErrorHandler",
    "TideChartPipeline",
    "TideChartPoint",
    "TideDataTransformer",
    "TideDataValidator",
    "TideFieldValidator",
    "ValidationError",
    "ValidationResult",
    "ValidationSummary",
    "ValidationWarning",
    "WarningKind",
]
