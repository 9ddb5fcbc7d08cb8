import pytest

from tide_chart_core.errors import InvalidTimeFormatError, TideOutOfRangeError
from tide_chart_core.models import RawSample
from tide_chart_core.transformer import TideDataTransformer


def test_transform_sorts_and_converts():
    samples = [
        {"time": "2025-01-29T07:00:00Z", "level": 1.3},
        RawSample("2025-01-29T15:00:00+09:00", 1.2),
    ]
    points = TideDataTransformer().transform(samples)

    assert [p.y for p in points] == [1.2, 1.3]
    assert points[0].x == 1738130400000
    assert points[1].x - points[0].x == 3600 * 1000
    assert points[0].timestamp.utcoffset().total_seconds() == 0


def test_transform_empty():
    assert TideDataTransformer().transform([]) == []
    assert TideDataTransformer().transform(None) == []


def test_transform_rejects_unparsable_time():
    with pytest.raises(InvalidTimeFormatError):
        TideDataTransformer().transform([{"time": "2025-02-30T06:00:00Z", "level": 1.0}])


def test_validate_and_transform_raises_typed_errors():
    t = TideDataTransformer()
    with pytest.raises(TideOutOfRangeError) as exc:
        t.validate_and_transform(
            [{"time": "2025-01-29T06:00:00Z", "level": 1.0}, {"time": "2025-01-29T07:00:00Z", "level": -4.0}]
        )
    assert exc.value.index == 1
    # both are ValueError subclasses, like the rest of the failure hierarchy
    assert isinstance(exc.value, ValueError)


def test_validate_and_transform_ok():
    points = TideDataTransformer().validate_and_transform([{"time": "2025-01-29T06:00:00Z", "level": 1.0}])
    assert len(points) == 1
