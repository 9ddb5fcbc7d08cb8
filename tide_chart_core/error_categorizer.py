"""Map raw validation failures onto the error taxonomy and sort by severity.

``categorize`` is defensive: it accepts ``TideValidationError`` instances,
any object carrying ``code``/``context``/``message`` attributes, or plain
mappings with those keys. Unknown codes are kept as structural errors of
``error`` severity so that no failure is dropped.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .const import SEVERITY_RANK
from .models import ErrorKind, Severity, ValidationError

_LOGGER = logging.getLogger(__name__)

# failure code -> (kind, severity)
CODE_TAXONOMY: Dict[str, Tuple[ErrorKind, Severity]] = {
    "STRUCTURE_ERROR": (ErrorKind.STRUCTURE_ERROR, Severity.CRITICAL),
    "CORRUPTED_DATA": (ErrorKind.CORRUPTED_DATA, Severity.CRITICAL),
    "EMPTY_DATA": (ErrorKind.EMPTY_DATA, Severity.CRITICAL),
    "INVALID_TIME_FORMAT": (ErrorKind.INVALID_TIME_FORMAT, Severity.ERROR),
    "TIDE_OUT_OF_RANGE": (ErrorKind.TIDE_OUT_OF_RANGE, Severity.ERROR),
    "DUPLICATE_TIMESTAMP": (ErrorKind.DUPLICATE_TIMESTAMP, Severity.ERROR),
    "TIDE_PRECISION_ERROR": (ErrorKind.TIDE_PRECISION_ERROR, Severity.ERROR),
    "TIMEZONE_ERROR": (ErrorKind.TIMEZONE_ERROR, Severity.ERROR),
    "DATA_QUALITY_WARNING": (ErrorKind.DATA_QUALITY_WARNING, Severity.WARNING),
    "PROCESSING_TIMEOUT": (ErrorKind.PROCESSING_TIMEOUT, Severity.WARNING),
}
UNKNOWN_TAXONOMY = (ErrorKind.STRUCTURE_ERROR, Severity.ERROR)

_TIME_FIELD_KINDS = (ErrorKind.INVALID_TIME_FORMAT, ErrorKind.DUPLICATE_TIMESTAMP, ErrorKind.TIMEZONE_ERROR)
_LEVEL_FIELD_KINDS = (ErrorKind.TIDE_OUT_OF_RANGE, ErrorKind.TIDE_PRECISION_ERROR)


def _read(failure: Any, name: str) -> Any:
    if isinstance(failure, Mapping):
        return failure.get(name)
    try:
        return getattr(failure, name, None)
    except Exception:
        return None


def _context_of(failure: Any) -> Dict[str, Any]:
    ctx = _read(failure, "context")
    if isinstance(ctx, Mapping):
        return dict(ctx)
    return {}


def _value_text(value: Any) -> str:
    return "unknown" if value is None or value == "" else str(value)


def _message_for(kind: ErrorKind, known: bool, failure: Any, context: Dict[str, Any]) -> str:
    if kind is ErrorKind.INVALID_TIME_FORMAT:
        return f"Invalid time format: {_value_text(context.get('time_value'))}"
    if kind is ErrorKind.TIDE_OUT_OF_RANGE:
        return f"Tide level out of range: {_value_text(context.get('tide_value'))}m"
    if kind is ErrorKind.DUPLICATE_TIMESTAMP:
        return f"Duplicate timestamp: {_value_text(context.get('time_value'))}"
    if kind is ErrorKind.TIDE_PRECISION_ERROR:
        return f"Tide level has too many decimal places: {_value_text(context.get('tide_value'))}"
    if kind is ErrorKind.TIMEZONE_ERROR:
        return f"Timestamp has no timezone: {_value_text(context.get('time_value'))}"
    if kind is ErrorKind.PROCESSING_TIMEOUT:
        return f"Processing timeout exceeded ({_value_text(context.get('timeout_ms'))} ms)"
    if kind is ErrorKind.EMPTY_DATA:
        return "Tide data is empty"
    if kind is ErrorKind.CORRUPTED_DATA:
        return "Tide data is corrupted"
    if kind is ErrorKind.STRUCTURE_ERROR and known:
        return "Tide data structure is invalid"

    raw = _read(failure, "message")
    if raw:
        return str(raw)
    try:
        text = str(failure)
    except Exception:
        text = ""
    return text or "Unrecognized validation failure"


def _field_for(kind: ErrorKind, failure: Any) -> Optional[str]:
    if kind in _TIME_FIELD_KINDS:
        return "time"
    if kind in _LEVEL_FIELD_KINDS:
        return "level"
    field = _read(failure, "field")
    return field if isinstance(field, str) else None


def _index_for(failure: Any, context: Dict[str, Any]) -> Optional[int]:
    for candidate in (context.get("index"), _read(failure, "index")):
        if isinstance(candidate, int) and not isinstance(candidate, bool):
            return candidate
    return None


def categorize_one(failure: Any) -> ValidationError:
    code = _read(failure, "code")
    known = isinstance(code, str) and code in CODE_TAXONOMY
    kind, severity = CODE_TAXONOMY[code] if known else UNKNOWN_TAXONOMY
    if not known:
        _LOGGER.debug("Unrecognized failure code %r; categorizing as %s/%s", code, kind.value, severity.value)
    context = _context_of(failure)
    return ValidationError(
        kind=kind,
        severity=severity,
        message=_message_for(kind, known, failure, context),
        field=_field_for(kind, failure),
        index=_index_for(failure, context),
        context=context,
    )


def sort_by_severity(errors: Iterable[ValidationError]) -> List[ValidationError]:
    """Stable sort critical -> error -> warning."""
    return sorted(errors, key=lambda e: SEVERITY_RANK.get(getattr(e.severity, "value", e.severity), len(SEVERITY_RANK)))


def categorize(raw_failures: Optional[Iterable[Any]]) -> List[ValidationError]:
    """Classify raw failures; never raises."""
    if raw_failures is None:
        return []

    categorized: List[ValidationError] = []
    try:
        items = [raw_failures] if isinstance(raw_failures, (str, bytes, Mapping)) else list(raw_failures)
    except Exception:
        _LOGGER.exception("Raw failures are not iterable: %r", type(raw_failures))
        items = [raw_failures]

    for failure in items:
        try:
            categorized.append(categorize_one(failure))
        except Exception:
            # keep the failure as a generic structural error rather than losing it
            _LOGGER.exception("Failed to categorize failure %r", type(failure))
            kind, severity = UNKNOWN_TAXONOMY
            categorized.append(ValidationError(kind=kind, severity=severity, message="Unrecognized validation failure"))

    return sort_by_severity(categorized)
