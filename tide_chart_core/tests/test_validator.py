import itertools
import json

import pytest

from tide_chart_core.errors import InvalidTimeFormatError
from tide_chart_core.field_validator import TideFieldValidator
from tide_chart_core.models import ErrorKind, RawSample, Severity
from tide_chart_core.transformer import TideDataTransformer
from tide_chart_core.validator import TideDataValidator


def make_validator(**kwargs):
    fv = TideFieldValidator()
    return TideDataValidator(fv, TideDataTransformer(fv), **kwargs)


def hourly(levels, start_hour=0):
    return [{"time": f"2025-01-29T{start_hour + i:02d}:00:00Z", "level": lvl} for i, lvl in enumerate(levels)]


def test_valid_samples():
    result = make_validator().validate_comprehensively(hourly([1.0, 1.2, 1.1]))
    assert result.is_valid
    assert result.errors == []
    assert len(result.data) == 3
    assert result.summary.total_records == 3
    assert result.summary.valid_records == 3
    assert result.summary.error_records == 0


def test_partial_invalid_times():
    samples = [
        {"time": "2025-01-29T06:00:00Z", "level": 1.0},
        {"time": "not-a-time", "level": 1.1},
        {"time": "2025-13-40T00:00:00Z", "level": 1.2},
        {"time": "2025-01-29T07:00:00Z", "level": 1.3},
    ]
    result = make_validator().validate_comprehensively(samples)
    assert result.is_valid is False
    assert len(result.errors) == 2
    assert all(e.kind is ErrorKind.INVALID_TIME_FORMAT for e in result.errors)
    assert [e.index for e in result.errors] == [1, 2]
    assert result.summary.valid_records == 2
    assert result.summary.error_records == 2
    assert len(result.data) == 2


@pytest.mark.parametrize("samples, kind", [(None, ErrorKind.STRUCTURE_ERROR), ([], ErrorKind.EMPTY_DATA)])
def test_critical_input(samples, kind):
    result = make_validator().validate_comprehensively(samples)
    assert result.is_valid is False
    assert len(result.errors) == 1
    assert result.errors[0].kind is kind
    assert result.errors[0].severity is Severity.CRITICAL
    assert result.data is None
    assert result.summary.total_records == 0
    assert result.summary.valid_records == 0


def test_malformed_sample_is_critical():
    result = make_validator().validate_comprehensively([{"time": "2025-01-29T06:00:00Z", "level": 1.0}, "junk"])
    assert result.errors[0].kind is ErrorKind.STRUCTURE_ERROR
    assert result.errors[0].index == 1
    assert result.summary.total_records == 0


def test_duplicate_timestamp():
    samples = [
        {"time": "2025-01-29T06:00:00Z", "level": 1.0},
        {"time": "2025-01-29T06:00:00Z", "level": 1.1},
    ]
    result = make_validator().validate_comprehensively(samples)
    assert result.is_valid is False
    assert result.errors[0].kind is ErrorKind.DUPLICATE_TIMESTAMP
    assert result.errors[0].index == 1
    assert result.data is None
    assert result.summary.total_records == 2
    assert result.summary.valid_records == 1
    assert result.summary.error_records == 1


def test_out_of_range_level():
    result = make_validator().validate_comprehensively(hourly([1.0, 10.0]))
    (err,) = result.errors
    assert err.kind is ErrorKind.TIDE_OUT_OF_RANGE
    assert err.field == "level"
    assert err.index == 1
    assert result.summary.valid_records + result.summary.error_records <= result.summary.total_records


def test_bad_time_and_level_on_same_sample_counts_once():
    result = make_validator().validate_comprehensively([{"time": "bad", "level": 10.0}, hourly([1.0])[0]])
    assert len(result.errors) == 2
    assert result.summary.error_records == 1
    assert result.summary.valid_records == 1


def test_strict_mode_checks_timezone_and_precision():
    samples = [
        {"time": "2025-01-29T06:00:00", "level": 1.0},
        {"time": "2025-01-29T07:00:00Z", "level": 1.2345},
        {"time": "2025-01-29T08:00:00Z", "level": 1.2},
    ]
    assert make_validator().validate_comprehensively(samples).is_valid

    result = make_validator().validate_comprehensively(samples, {"strict_mode": True})
    kinds = {e.kind for e in result.errors}
    assert kinds == {ErrorKind.TIMEZONE_ERROR, ErrorKind.TIDE_PRECISION_ERROR}
    assert result.summary.valid_records == 1


def test_warnings_use_valid_subset_indices():
    samples = [{"time": "bad", "level": 1.0}, {"time": "2025-01-29T06:00:00Z", "level": 4.95}]
    result = make_validator().validate_comprehensively(samples)
    assert len(result.warnings) == 1
    assert result.warnings[0].index == 0
    assert result.summary.warning_records == 1
    # warnings never remove a record
    assert result.summary.valid_records == 1


def test_warnings_disabled_and_performance_mode():
    samples = hourly([4.95, 1.0])
    assert make_validator().validate_comprehensively(samples, {"enable_warnings": False}).warnings == []
    assert make_validator().validate_comprehensively(samples, {"performance_mode": True}).warnings == []


class PassThroughTransformer:
    def __init__(self):
        self.seen = []

    def transform(self, samples):
        self.seen = list(samples)
        return list(samples)


def test_performance_mode_skips_range_check_after_bad_time():
    fv = TideFieldValidator()
    validator = TideDataValidator(fv, PassThroughTransformer())
    result = validator.validate_comprehensively([{"time": "bad", "level": 10.0}] + hourly([1.0]), {"performance_mode": True})
    (err,) = result.errors
    assert err.kind is ErrorKind.INVALID_TIME_FORMAT
    assert result.summary.error_records == 1


def test_performance_mode_skips_calendar_parsing():
    transformer = PassThroughTransformer()
    validator = TideDataValidator(TideFieldValidator(), transformer)
    samples = [{"time": "2025-02-30T06:00:00Z", "level": 1.0}]

    fast = validator.validate_comprehensively(samples, {"performance_mode": True})
    assert fast.errors == []
    assert transformer.seen == samples

    full = validator.validate_comprehensively(samples)
    assert full.errors[0].kind is ErrorKind.INVALID_TIME_FORMAT


def test_transformer_failure_becomes_structure_error():
    class BrokenTransformer:
        def transform(self, samples):
            raise RuntimeError("cannot transform")

    result = TideDataValidator(TideFieldValidator(), BrokenTransformer()).validate_comprehensively(hourly([1.0, 1.1]))
    (err,) = result.errors
    assert err.kind is ErrorKind.STRUCTURE_ERROR
    assert err.severity is Severity.CRITICAL
    assert result.data is None
    assert result.summary.total_records == 0


def test_max_records_truncates():
    result = make_validator().validate_comprehensively(hourly([1.0, 1.1, 1.2]), {"max_records": 2})
    assert result.summary.total_records == 2
    assert len(result.data) == 2


def test_timeout_at_entry():
    validator = make_validator(clock=lambda: 10.0)
    result = validator.validate_comprehensively(hourly([1.0]), {"timeout_ms": 1000, "started_at": 0.0})
    (err,) = result.errors
    assert err.kind is ErrorKind.PROCESSING_TIMEOUT
    assert err.severity is Severity.CRITICAL
    assert result.data is None
    assert result.summary.total_records == 0


def test_timeout_inside_loop_keeps_checked_samples():
    validator = make_validator(clock=itertools.count().__next__)
    result = validator.validate_comprehensively(
        hourly([1.0, 1.1, 1.2, 1.3, 1.4]), {"timeout_ms": 1500, "timeout_check_every": 2}
    )
    (err,) = result.errors
    assert err.kind is ErrorKind.PROCESSING_TIMEOUT
    assert err.severity is Severity.WARNING
    assert err.context["processed_records"] == 2
    assert len(result.data) == 2
    assert result.summary.total_records == 5
    assert result.summary.valid_records == 2


def test_unexpected_failure_becomes_structure_error():
    class Exploding(TideFieldValidator):
        def validate_time_format(self, time):
            raise RuntimeError("broken collaborator")

    fv = Exploding()
    result = TideDataValidator(fv, TideDataTransformer(fv)).validate_comprehensively(hourly([1.0]))
    (err,) = result.errors
    assert err.kind is ErrorKind.STRUCTURE_ERROR
    assert err.severity is Severity.CRITICAL


def test_collaborator_may_raise_typed_failures():
    class Raising(TideFieldValidator):
        def validate_time_format(self, time):
            if time == "bad":
                raise InvalidTimeFormatError(time)
            return super().validate_time_format(time)

    fv = Raising()
    result = TideDataValidator(fv, TideDataTransformer(fv)).validate_comprehensively(
        [{"time": "bad", "level": 1.0}] + hourly([1.0])
    )
    assert result.errors[0].index == 0
    assert result.summary.valid_records == 1


def test_requires_collaborators():
    with pytest.raises(ValueError):
        TideDataValidator(None, TideDataTransformer())


def test_invalid_options_raise():
    with pytest.raises(ValueError):
        make_validator().validate_comprehensively(hourly([1.0]), {"max_records": 0})
    with pytest.raises(ValueError):
        make_validator().validate_comprehensively(hourly([1.0]), {"no_such_option": True})


def test_validate_basic():
    out = make_validator().validate_basic([{"time": "bad", "level": 1.0}] + hourly([1.0]))
    assert out["is_valid"] is False
    assert len(out["errors"]) == 1
    assert make_validator().validate_basic(hourly([1.0]))["is_valid"] is True
    assert make_validator().validate_basic(None)["errors"][0].kind is ErrorKind.STRUCTURE_ERROR


def test_result_is_json_serializable():
    result = make_validator().validate_comprehensively([RawSample("2025-01-29T06:00:00Z", 1.0), {"time": "x", "level": 1}])
    payload = json.loads(json.dumps(result.as_dict()))
    assert payload["data"][0]["timestamp"] == "2025-01-29T06:00:00Z"
    assert payload["errors"][0]["severity"] == "error"
    assert payload["summary"]["valid_records"] == 1
