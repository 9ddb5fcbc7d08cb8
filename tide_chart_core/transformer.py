"""Default transformer: validated raw samples -> chart points sorted by time."""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from .errors import InvalidTimeFormatError
from .field_validator import TideFieldValidator, parse_timestamp
from .models import TideChartPoint, sample_value

_LOGGER = logging.getLogger(__name__)


class TideDataTransformer:
    """Convert raw samples into ``TideChartPoint`` objects.

    ``transform`` assumes the samples were validated already.
    ``validate_and_transform`` runs the field validator first and raises
    the first ``TideValidationError`` it finds.
    """

    def __init__(self, field_validator: Optional[TideFieldValidator] = None) -> None:
        self.field_validator = field_validator or TideFieldValidator()

    def transform(self, samples: Optional[Sequence[Any]]) -> List[TideChartPoint]:
        if not samples:
            return []

        points: List[TideChartPoint] = []
        for index, sample in enumerate(samples):
            time = sample_value(sample, "time")
            timestamp = parse_timestamp(time)
            if timestamp is None:
                raise InvalidTimeFormatError(time, index)
            points.append(
                TideChartPoint(
                    x=int(round(timestamp.timestamp() * 1000)),
                    y=float(sample_value(sample, "level")),
                    timestamp=timestamp,
                )
            )

        points.sort(key=lambda p: p.x)
        _LOGGER.debug("Transformed %d tide samples into chart points", len(points))
        return points

    def validate_and_transform(self, samples: Optional[Sequence[Any]]) -> List[TideChartPoint]:
        self.field_validator.validate_data_array(samples)
        return self.transform(samples)
