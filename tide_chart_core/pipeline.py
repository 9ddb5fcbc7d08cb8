"""Validate -> display info -> scale, bundled for a chart renderer."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from . import unit_helpers
from .error_handler import TideChartErrorHandler, worst_fallback
from .field_validator import TideFieldValidator
from .models import FallbackType
from .scale import DynamicScaleCalculator
from .transformer import TideDataTransformer
from .validator import TideDataValidator

_LOGGER = logging.getLogger(__name__)


class TideChartPipeline:
    def __init__(
        self,
        validator: Optional[TideDataValidator] = None,
        error_handler: Optional[TideChartErrorHandler] = None,
        scale_calculator: Optional[DynamicScaleCalculator] = None,
    ) -> None:
        if validator is None:
            field_validator = TideFieldValidator()
            validator = TideDataValidator(field_validator, TideDataTransformer(field_validator))
        self.validator = validator
        self.error_handler = error_handler or TideChartErrorHandler()
        self.scale_calculator = scale_calculator or DynamicScaleCalculator()

    def run(
        self,
        samples: Optional[Sequence[Any]],
        validation_options: Optional[Dict[str, Any]] = None,
        display_options: Optional[Dict[str, Any]] = None,
        scale_options: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Return ``validation``, ``display``, ``fallback_type`` and ``scale`` for ``samples``.

        ``scale`` is computed from the surviving levels converted to cm, and is
        None when only a table can be shown.
        """
        result = self.validator.validate_comprehensively(samples, validation_options)
        display = self.error_handler.process_error(result, display_options)
        fallback = worst_fallback(display)

        scale = None
        if fallback is not FallbackType.TABLE and result.data:
            levels_cm = unit_helpers.levels_m_to_cm(point.y for point in result.data)
            scale = self.scale_calculator.calculate_scale(levels_cm, scale_options)

        _LOGGER.debug(
            "Tide chart pipeline: %d/%d valid, fallback=%s, scale=%s",
            result.summary.valid_records,
            result.summary.total_records,
            fallback.value,
            "yes" if scale is not None else "no",
        )
        return {
            "validation": result,
            "display": display,
            "fallback_type": fallback,
            "scale": scale,
        }
