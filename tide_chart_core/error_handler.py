"""Turn a validation result into user-facing display entries and a fallback mode."""
from __future__ import annotations

import json
import logging
import numbers
from typing import Any, Dict, List, Mapping, Optional, Sequence

from . import messages, options as options_mod
from .const import FALLBACK_NONE_FROM_PCT, FALLBACK_PARTIAL_FROM_PCT, FALLBACK_SIMPLE_FROM_PCT
from .models import ErrorDisplayInfo, FallbackType, Severity, _plain

_LOGGER = logging.getLogger(__name__)

DEBUG_INFO_FAILED = "Debug info generation failed"

# least to most degraded
FALLBACK_ORDER = (
    FallbackType.NONE,
    FallbackType.PARTIAL_CHART,
    FallbackType.SIMPLE_CHART,
    FallbackType.TABLE,
)


def _get(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _count(value: Any) -> Optional[float]:
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return float(value)
    return None


def _severity(error: Any) -> Optional[str]:
    sev = _get(error, "severity")
    return getattr(sev, "value", sev)


def fallback_for_percentage(pct: float) -> FallbackType:
    """Map a validity percentage (0-100) to a fallback mode."""
    if pct >= FALLBACK_NONE_FROM_PCT:
        return FallbackType.NONE
    if pct >= FALLBACK_PARTIAL_FROM_PCT:
        return FallbackType.PARTIAL_CHART
    if pct >= FALLBACK_SIMPLE_FROM_PCT:
        return FallbackType.SIMPLE_CHART
    return FallbackType.TABLE


def worst_fallback(entries: Sequence[ErrorDisplayInfo]) -> FallbackType:
    worst = FallbackType.NONE
    for entry in entries:
        fb = FallbackType(entry.fallback_type)
        if FALLBACK_ORDER.index(fb) > FALLBACK_ORDER.index(worst):
            worst = fb
    return worst


class TideChartErrorHandler:
    """Build display entries (title, message, suggestion, fallback) for a ValidationResult.

    Accepts ``ValidationResult`` objects as well as their ``as_dict()`` form.
    ``process_error`` never raises: anything unreadable is shown as a data
    loading failure with the table fallback.
    """

    def process_error(self, result: Any, options: Optional[Dict[str, Any]] = None) -> List[ErrorDisplayInfo]:
        try:
            opts = options_mod.error_processing_options(options)
        except ValueError:
            _LOGGER.warning("Invalid error display options %r; using defaults", options)
            opts = options_mod.error_processing_options()

        try:
            return self._process(result, opts)
        except Exception:
            _LOGGER.exception("Failed to build error display information")
            return [self._read_failure(opts)]

    def determine_fallback(self, valid_data: Optional[Sequence[Any]], errors: Optional[Sequence[Any]]) -> FallbackType:
        """Fallback from counts: valid samples against valid + erroneous."""
        valid_count = len(valid_data) if valid_data else 0
        error_count = len(errors) if errors else 0
        total = valid_count + error_count
        if total == 0:
            return FallbackType.TABLE
        return fallback_for_percentage(valid_count / total * 100.0)

    def fallback_for_percentage(self, pct: float) -> FallbackType:
        return fallback_for_percentage(pct)

    # ----- internals -----

    def _process(self, result: Any, opts: Dict[str, Any]) -> List[ErrorDisplayInfo]:
        if result is None:
            _LOGGER.debug("No validation result to display")
            return [self._read_failure(opts)]

        is_valid = _get(result, "is_valid")
        errors = _get(result, "errors")
        if not isinstance(is_valid, bool) or not isinstance(errors, list):
            _LOGGER.warning("Malformed validation result of type %s", type(result).__name__)
            return [self._read_failure(opts)]

        warnings = _get(result, "warnings")
        warnings = warnings if isinstance(warnings, list) else []
        locale = opts[options_mod.OPT_LOCALE]
        bundle = messages.messages_for(locale)

        if any(_severity(e) == Severity.CRITICAL.value for e in errors):
            return [self._entry("critical", bundle["critical"], FallbackType.TABLE, result, opts)]

        if errors:
            fallback = self._fallback_for_result(result, errors)
            level = "error" if any(_severity(e) == Severity.ERROR.value for e in errors) else "warning"
            if len(errors) == 1:
                texts = bundle["error"]
            else:
                texts = messages.render(bundle["multiple_errors"], stats=messages.error_stats(len(errors), locale))
            _LOGGER.debug("%d error(s) shown with fallback %s", len(errors), fallback.value)
            return [self._entry(level, texts, fallback, result, opts)]

        if warnings:
            return [self._entry("warning", bundle["warning"], FallbackType.SIMPLE_CHART, result, opts)]

        return []

    def _fallback_for_result(self, result: Any, errors: List[Any]) -> FallbackType:
        summary = _get(result, "summary")
        total = _count(_get(summary, "total_records")) if summary is not None else None
        valid = _count(_get(summary, "valid_records")) if summary is not None else None
        if total is not None and valid is not None and total > 0:
            return fallback_for_percentage(valid / total * 100.0)

        _LOGGER.debug("Validation summary unusable; deriving fallback from counts")
        data = _get(result, "data")
        return self.determine_fallback(data if isinstance(data, list) else [], errors)

    def _read_failure(self, opts: Dict[str, Any]) -> ErrorDisplayInfo:
        texts = messages.messages_for(opts[options_mod.OPT_LOCALE])["critical"]
        cap = opts[options_mod.OPT_MAX_MESSAGE_LENGTH]
        return ErrorDisplayInfo(
            level="critical",
            title=_truncate(texts["title"], cap),
            message=_truncate(texts["message"], cap),
            suggestion=_truncate(texts["suggestion"], cap),
            fallback_type=FallbackType.TABLE,
        )

    def _entry(
        self, level: str, texts: Dict[str, str], fallback: FallbackType, result: Any, opts: Dict[str, Any]
    ) -> ErrorDisplayInfo:
        cap = opts[options_mod.OPT_MAX_MESSAGE_LENGTH]
        return ErrorDisplayInfo(
            level=level,
            title=_truncate(texts["title"], cap),
            message=_truncate(texts["message"], cap),
            suggestion=_truncate(texts.get("suggestion"), cap),
            fallback_type=fallback,
            debug_info=_debug_info(result) if opts[options_mod.OPT_INCLUDE_DEBUG_INFO] else None,
        )


def _truncate(text: Optional[str], cap: int) -> Optional[str]:
    if text is None or len(text) <= cap:
        return text
    return text[: cap - 3] + "..."


def _debug_info(result: Any) -> str:
    try:
        errors = _get(result, "errors") or []
        warnings = _get(result, "warnings") or []
        summary = _get(result, "summary")
        payload = {
            "error_count": len(errors),
            "warning_count": len(warnings),
            "valid_records": _get(summary, "valid_records") if summary is not None else None,
            "total_records": _get(summary, "total_records") if summary is not None else None,
            "processing_time_ms": _get(summary, "processing_time_ms") if summary is not None else None,
            "errors": [_plain(e) for e in errors],
        }
        return json.dumps(payload, ensure_ascii=False, default=str)
    except Exception:
        _LOGGER.exception("Could not serialize debug info")
        return DEBUG_INFO_FAILED
