"""Raw validation failures.

Each failure code has its own exception class carrying a typed payload
(offending value and sample index). The validation engine collects these
as values; ``TideDataTransformer.validate_and_transform`` raises them.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from .const import MAX_LEVEL_DECIMALS, MAX_TIDE_M, MIN_TIDE_M

INVALID_TIME_FORMAT = "INVALID_TIME_FORMAT"
TIDE_OUT_OF_RANGE = "TIDE_OUT_OF_RANGE"
EMPTY_DATA = "EMPTY_DATA"
DUPLICATE_TIMESTAMP = "DUPLICATE_TIMESTAMP"
STRUCTURE_ERROR = "STRUCTURE_ERROR"
CORRUPTED_DATA = "CORRUPTED_DATA"
DATA_QUALITY_WARNING = "DATA_QUALITY_WARNING"
PROCESSING_TIMEOUT = "PROCESSING_TIMEOUT"
TIDE_PRECISION_ERROR = "TIDE_PRECISION_ERROR"
TIMEZONE_ERROR = "TIMEZONE_ERROR"


class TideValidationError(ValueError):
    """Base class for tide data validation failures."""

    code = STRUCTURE_ERROR

    def __init__(self, message: str, code: Optional[str] = None, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context: Dict[str, Any] = dict(context or {})

    @property
    def index(self) -> Optional[int]:
        return self.context.get("index")


class InvalidTimeFormatError(TideValidationError):
    code = INVALID_TIME_FORMAT

    def __init__(self, time_value: Any, index: Optional[int] = None) -> None:
        super().__init__(
            f'Invalid time format: "{time_value}". Expected ISO 8601 format (e.g., "2025-01-29T12:00:00Z").',
            context={"time_value": time_value, "index": index},
        )


class TideOutOfRangeError(TideValidationError):
    code = TIDE_OUT_OF_RANGE

    def __init__(self, tide_value: Any, index: Optional[int] = None, min_m: float = MIN_TIDE_M, max_m: float = MAX_TIDE_M) -> None:
        super().__init__(
            f"Tide value {tide_value} is out of valid range ({min_m} to {max_m} meters).",
            context={"tide_value": tide_value, "index": index},
        )


class EmptyDataError(TideValidationError):
    code = EMPTY_DATA

    def __init__(self) -> None:
        super().__init__("Data array is empty. At least one tide data point is required.")


class StructureError(TideValidationError):
    code = STRUCTURE_ERROR

    def __init__(self, message: str = "Data structure is corrupted", index: Optional[int] = None) -> None:
        context = {} if index is None else {"index": index}
        super().__init__(message, context=context)


class DuplicateTimestampError(TideValidationError):
    code = DUPLICATE_TIMESTAMP

    def __init__(self, time_value: str, index: int, first_index: Optional[int] = None) -> None:
        super().__init__(
            f"Duplicate timestamp: {time_value}",
            context={"time_value": time_value, "index": index, "first_index": first_index},
        )


class TidePrecisionError(TideValidationError):
    code = TIDE_PRECISION_ERROR

    def __init__(self, tide_value: Any, index: Optional[int] = None, max_decimals: int = MAX_LEVEL_DECIMALS) -> None:
        super().__init__(
            f"Tide value {tide_value} has more than {max_decimals} decimal places.",
            context={"tide_value": tide_value, "index": index, "max_decimals": max_decimals},
        )


class TimezoneError(TideValidationError):
    code = TIMEZONE_ERROR

    def __init__(self, time_value: Any, index: Optional[int] = None) -> None:
        super().__init__(
            f'Timestamp "{time_value}" carries no timezone offset or UTC marker.',
            context={"time_value": time_value, "index": index},
        )


class ProcessingTimeoutError(TideValidationError):
    code = PROCESSING_TIMEOUT

    def __init__(self, timeout_ms: float, elapsed_ms: float, processed: int = 0) -> None:
        super().__init__(
            "Processing timeout exceeded",
            context={"timeout_ms": timeout_ms, "elapsed_ms": elapsed_ms, "processed_records": processed},
        )
