from tide_chart_core import error_categorizer
from tide_chart_core.errors import (
    EmptyDataError,
    InvalidTimeFormatError,
    ProcessingTimeoutError,
    TideOutOfRangeError,
)
from tide_chart_core.models import ErrorKind, Severity


def test_sorted_by_severity_and_stable():
    errors = error_categorizer.categorize(
        [
            ProcessingTimeoutError(100, 200),
            TideOutOfRangeError(9.0, 2),
            EmptyDataError(),
            InvalidTimeFormatError("bad", 1),
        ]
    )
    assert [e.severity for e in errors] == [Severity.CRITICAL, Severity.ERROR, Severity.ERROR, Severity.WARNING]
    # equal severities keep their input order
    assert [e.index for e in errors[1:3]] == [2, 1]


def test_known_codes_get_messages_and_fields():
    time_err, range_err = error_categorizer.categorize([InvalidTimeFormatError("bad", 0), TideOutOfRangeError(9.5, 3)])
    assert time_err.kind is ErrorKind.INVALID_TIME_FORMAT
    assert time_err.message == "Invalid time format: bad"
    assert time_err.field == "time"
    assert time_err.index == 0
    assert range_err.kind is ErrorKind.TIDE_OUT_OF_RANGE
    assert range_err.message == "Tide level out of range: 9.5m"
    assert range_err.field == "level"


def test_missing_value_reads_unknown():
    (err,) = error_categorizer.categorize([InvalidTimeFormatError("", 0)])
    assert err.message == "Invalid time format: unknown"


def test_unknown_code_is_structural_error():
    (err,) = error_categorizer.categorize([{"code": "SOMETHING_NEW", "message": "odd input", "context": {"index": 4}}])
    assert err.kind is ErrorKind.STRUCTURE_ERROR
    assert err.severity is Severity.ERROR
    assert err.message == "odd input"
    assert err.index == 4


def test_plain_exception_is_kept():
    (err,) = error_categorizer.categorize([RuntimeError("boom")])
    assert err.kind is ErrorKind.STRUCTURE_ERROR
    assert err.message == "boom"


def test_none_and_empty():
    assert error_categorizer.categorize(None) == []
    assert error_categorizer.categorize([]) == []


def test_single_mapping_is_wrapped():
    errors = error_categorizer.categorize({"code": "EMPTY_DATA"})
    assert len(errors) == 1
    assert errors[0].severity is Severity.CRITICAL
