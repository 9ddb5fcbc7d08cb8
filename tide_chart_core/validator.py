"""Validation engine for raw tide samples.

Orchestrates structural checks, the duplicate-timestamp scan, per-sample
field checks (through an injected field validator), error categorization,
transformation of the surviving samples (through an injected transformer)
and data-quality warnings. Every failure ends up in a ``ValidationResult``;
unexpected exceptions are logged and reported as a critical
STRUCTURE_ERROR instead of propagating.
"""
from __future__ import annotations

import dataclasses
import logging
import time
from collections.abc import Sequence as SequenceABC
from typing import Any, Callable, Dict, List, Optional, Sequence

from . import error_categorizer, options as options_mod, warning_generator
from .const import MAX_LEVEL_DECIMALS, MAX_TIDE_M, MIN_TIDE_M
from .errors import (
    EmptyDataError,
    InvalidTimeFormatError,
    DuplicateTimestampError,
    ProcessingTimeoutError,
    StructureError,
    TidePrecisionError,
    TideOutOfRangeError,
    TideValidationError,
    TimezoneError,
)
from .field_validator import decimal_places, has_explicit_timezone, is_real_number, matches_iso_pattern
from .models import (
    Severity,
    TideChartPoint,
    ValidationError,
    ValidationResult,
    ValidationSummary,
    ValidationWarning,
    is_sample_like,
    sample_value,
)

_LOGGER = logging.getLogger(__name__)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, SequenceABC) and not isinstance(value, (str, bytes, bytearray))


class TideDataValidator:
    """Validate tide samples and hand the surviving ones to the transformer.

    - field_validator: object with ``validate_time_format(time)`` and
      ``validate_tide_range(level)``.
    - transformer: object with ``transform(samples)``; only ever called on the
      already-filtered valid subset.
    - clock: monotonic clock in seconds (injectable for timeout tests).
    """

    def __init__(self, field_validator, transformer, *, clock: Callable[[], float] = time.perf_counter) -> None:
        if field_validator is None or transformer is None:
            raise ValueError("TideDataValidator requires both a field_validator and a transformer")
        self.field_validator = field_validator
        self.transformer = transformer
        self._clock = clock

    # ----- public API -----

    def validate_comprehensively(
        self, samples: Optional[Sequence[Any]], options: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        opts = options_mod.validation_options(options)
        start = self._clock()
        started_at = opts[options_mod.OPT_STARTED_AT]
        if started_at is None:
            started_at = start

        timeout_ms = opts[options_mod.OPT_TIMEOUT_MS]
        if timeout_ms is not None:
            elapsed_ms = self._elapsed_ms(started_at)
            if elapsed_ms > timeout_ms:
                _LOGGER.warning("Tide validation timed out before processing (%.1f ms > %.1f ms)", elapsed_ms, timeout_ms)
                return self._timeout_result(timeout_ms, elapsed_ms, start)

        to_process = samples
        max_records = opts[options_mod.OPT_MAX_RECORDS]
        if max_records and _is_sequence(samples) and len(samples) > max_records:
            _LOGGER.debug("Truncating %d samples to max_records=%d", len(samples), max_records)
            to_process = list(samples)[:max_records]

        try:
            return self._validate(to_process, opts, start, started_at)
        except Exception:
            _LOGGER.exception("Unexpected failure while validating tide data")
            return self._critical_result([StructureError()], start)

    def validate_in_stages(
        self, samples: Optional[Sequence[Any]], options: Optional[Dict[str, Any]] = None
    ) -> ValidationResult:
        return self.validate_comprehensively(samples, options)

    def validate_basic(self, samples: Optional[Sequence[Any]]) -> Dict[str, Any]:
        """Structural + time/range checks only: no duplicates, warnings or transformation."""
        try:
            structural = self._structural_failure(samples)
            if structural is not None:
                return {"is_valid": False, "errors": error_categorizer.categorize([structural])[:1]}

            failures: List[TideValidationError] = []
            for index, sample in enumerate(samples):
                failures.extend(self._check_default(index, sample))
        except Exception:
            _LOGGER.exception("Unexpected failure during basic tide validation")
            return {"is_valid": False, "errors": error_categorizer.categorize([StructureError()])}

        errors = error_categorizer.categorize(failures)
        return {"is_valid": not errors, "errors": errors}

    # ----- pipeline -----

    def _validate(self, samples: Any, opts: Dict[str, Any], start: float, started_at: float) -> ValidationResult:
        structural = self._structural_failure(samples)
        if structural is not None:
            return self._critical_result([structural], start)

        samples = list(samples)

        duplicate = self._find_duplicate_timestamp(samples)
        if duplicate is not None:
            return self._duplicate_result(duplicate, samples, start)

        strict = opts[options_mod.OPT_STRICT_MODE]
        performance = opts[options_mod.OPT_PERFORMANCE_MODE]
        if performance:
            check = self._check_performance
        elif strict:
            check = self._check_strict
        else:
            check = self._check_default

        timeout_ms = opts[options_mod.OPT_TIMEOUT_MS]
        check_every = opts[options_mod.OPT_TIMEOUT_CHECK_EVERY]
        failures: List[TideValidationError] = []
        checked = len(samples)
        for index, sample in enumerate(samples):
            if timeout_ms is not None and index and index % check_every == 0:
                elapsed_ms = self._elapsed_ms(started_at)
                if elapsed_ms > timeout_ms:
                    _LOGGER.warning(
                        "Tide validation timed out after %d of %d samples (%.1f ms)", index, len(samples), elapsed_ms
                    )
                    failures.append(ProcessingTimeoutError(timeout_ms, elapsed_ms, processed=index))
                    checked = index
                    break
            failures.extend(check(index, sample))

        errors = error_categorizer.categorize(failures)
        critical = [e for e in errors if e.severity is Severity.CRITICAL]
        if critical:
            return self._categorized_critical_result(critical[:1], start)

        error_indices = {e.index for e in errors if e.index is not None}
        valid = [s for i, s in enumerate(samples[:checked]) if i not in error_indices]

        data: Optional[List[TideChartPoint]] = None
        if valid:
            try:
                data = list(self.transformer.transform(valid))
            except Exception:
                _LOGGER.exception("Transformer failed on %d valid samples", len(valid))
                return self._critical_result([StructureError()], start)

        warnings: List[ValidationWarning] = []
        if opts[options_mod.OPT_ENABLE_WARNINGS] and not performance:
            warnings = warning_generator.generate(
                valid,
                strict,
                getattr(self.field_validator, "min_tide_m", MIN_TIDE_M),
                getattr(self.field_validator, "max_tide_m", MAX_TIDE_M),
            )

        summary = ValidationSummary(
            total_records=len(samples),
            valid_records=len(valid),
            error_records=len(error_indices),
            warning_records=len(warnings),
            processing_time_ms=self._elapsed_ms(start),
        )
        if errors:
            _LOGGER.debug(
                "Tide validation found %d error(s) in %d/%d records", len(errors), summary.error_records, summary.total_records
            )

        return ValidationResult(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            data=data or None,
            summary=summary,
        )

    # ----- checks -----

    def _structural_failure(self, samples: Any) -> Optional[TideValidationError]:
        if samples is None or not _is_sequence(samples):
            return StructureError()
        if len(samples) == 0:
            return EmptyDataError()
        for index, sample in enumerate(samples):
            if not is_sample_like(sample):
                return StructureError("Invalid data structure", index=index)
        return None

    @staticmethod
    def _find_duplicate_timestamp(samples: List[Any]) -> Optional[DuplicateTimestampError]:
        seen: Dict[str, int] = {}
        for index, sample in enumerate(samples):
            time_value = sample_value(sample, "time")
            if not isinstance(time_value, str):
                continue
            if time_value in seen:
                return DuplicateTimestampError(time_value, index, first_index=seen[time_value])
            seen[time_value] = index
        return None

    def _guarded(self, index: int, fn: Callable[[], List[TideValidationError]]) -> List[TideValidationError]:
        try:
            return fn()
        except TideValidationError as exc:
            if exc.index is None:
                exc.context["index"] = index
            return [exc]

    def _time_failure(self, index: int, time_value: Any) -> List[TideValidationError]:
        if not self.field_validator.validate_time_format(time_value):
            return [InvalidTimeFormatError(time_value, index)]
        return []

    def _range_failure(self, index: int, level: Any) -> List[TideValidationError]:
        if not self.field_validator.validate_tide_range(level):
            return [
                TideOutOfRangeError(
                    level,
                    index,
                    getattr(self.field_validator, "min_tide_m", MIN_TIDE_M),
                    getattr(self.field_validator, "max_tide_m", MAX_TIDE_M),
                )
            ]
        return []

    def _check_default(self, index: int, sample: Any) -> List[TideValidationError]:
        time_value = sample_value(sample, "time")
        level = sample_value(sample, "level")
        return self._guarded(index, lambda: self._time_failure(index, time_value)) + self._guarded(
            index, lambda: self._range_failure(index, level)
        )

    def _check_strict(self, index: int, sample: Any) -> List[TideValidationError]:
        failures = self._check_default(index, sample)
        time_value = sample_value(sample, "time")
        level = sample_value(sample, "level")
        time_failed = any(f.code == InvalidTimeFormatError.code for f in failures)
        if not time_failed and not has_explicit_timezone(time_value):
            failures.append(TimezoneError(time_value, index))
        if is_real_number(level):
            places = decimal_places(level)
            if places is not None and places > MAX_LEVEL_DECIMALS:
                failures.append(TidePrecisionError(level, index, MAX_LEVEL_DECIMALS))
        return failures

    def _check_performance(self, index: int, sample: Any) -> List[TideValidationError]:
        time_value = sample_value(sample, "time")
        if not matches_iso_pattern(time_value):
            return [InvalidTimeFormatError(time_value, index)]
        level = sample_value(sample, "level")
        return self._guarded(index, lambda: self._range_failure(index, level))

    # ----- results -----

    def _elapsed_ms(self, since: float) -> float:
        return max(0.0, (self._clock() - since) * 1000.0)

    def _empty_summary(self, start: float) -> ValidationSummary:
        return ValidationSummary(
            total_records=0,
            valid_records=0,
            error_records=0,
            warning_records=0,
            processing_time_ms=self._elapsed_ms(start),
        )

    def _categorized_critical_result(self, errors: List[ValidationError], start: float) -> ValidationResult:
        return ValidationResult(is_valid=False, errors=errors, warnings=[], data=None, summary=self._empty_summary(start))

    def _critical_result(self, failures: List[TideValidationError], start: float) -> ValidationResult:
        return self._categorized_critical_result(error_categorizer.categorize(failures)[:1], start)

    def _timeout_result(self, timeout_ms: float, elapsed_ms: float, start: float) -> ValidationResult:
        errors = error_categorizer.categorize([ProcessingTimeoutError(timeout_ms, elapsed_ms)])
        # nothing was processed: surface the timeout with critical weight
        errors = [dataclasses.replace(e, severity=Severity.CRITICAL) for e in errors]
        return self._categorized_critical_result(errors, start)

    def _duplicate_result(self, duplicate: DuplicateTimestampError, samples: List[Any], start: float) -> ValidationResult:
        errors = error_categorizer.categorize([duplicate])
        _LOGGER.debug("Duplicate timestamp %r at index %s", duplicate.context.get("time_value"), duplicate.index)
        return ValidationResult(
            is_valid=False,
            errors=errors,
            warnings=[],
            data=None,
            summary=ValidationSummary(
                total_records=len(samples),
                valid_records=len(samples) - 1,
                error_records=1,
                warning_records=0,
                processing_time_ms=self._elapsed_ms(start),
            ),
        )
