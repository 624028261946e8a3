from datetime import datetime, timedelta

import pytest

from healthlog.config import ValidationConfig
from healthlog.models import LogEntry, PendingLogEntry
from healthlog.results import ErrorKind
from healthlog.validator import LogEntryValidator

BASE = datetime(2024, 12, 1, 11, 15)


def _pending(category="Glucose", value="95", timestamp=BASE, type_="vital"):
    return PendingLogEntry(type=type_, category=category, value=value, timestamp=timestamp)


def _stored(category="Glucose", value="95", timestamp=BASE):
    return LogEntry(
        entry_id="e1", type="vital", category=category, value=value, timestamp=timestamp
    )


def test_duplicate_within_window_same_day():
    validator = LogEntryValidator()
    history = [_stored(timestamp=BASE)]
    assert validator.check_duplicate(_pending(timestamp=BASE + timedelta(minutes=3)), history)


def test_not_duplicate_outside_window():
    validator = LogEntryValidator()
    history = [_stored(timestamp=BASE)]
    assert not validator.check_duplicate(
        _pending(timestamp=BASE + timedelta(minutes=10)), history
    )


def test_duplicate_window_is_closed():
    validator = LogEntryValidator()
    history = [_stored(timestamp=BASE)]
    assert validator.check_duplicate(_pending(timestamp=BASE + timedelta(seconds=300)), history)
    assert not validator.check_duplicate(
        _pending(timestamp=BASE + timedelta(seconds=301)), history
    )


def test_duplicate_requires_same_category_and_calendar_day():
    validator = LogEntryValidator()
    late = datetime(2024, 12, 1, 23, 58)
    history = [_stored(timestamp=late)]
    next_day = datetime(2024, 12, 2, 0, 1)
    assert not validator.check_duplicate(_pending(timestamp=next_day), history)
    assert not validator.check_duplicate(_pending(category="Weight", timestamp=late), history)


def test_duplicate_check_is_idempotent():
    validator = LogEntryValidator()
    history = [_stored()]
    candidate = _pending(timestamp=BASE + timedelta(minutes=1))
    first = validator.check_duplicate(candidate, history)
    second = validator.check_duplicate(candidate, history)
    assert first == second is True
    assert len(history) == 1


@pytest.mark.parametrize(
    "category, value, expected",
    [
        ("Glucose", "70", True),
        ("Glucose", "400", True),
        ("Glucose", "69", False),
        ("Glucose", "401", False),
        ("Heart Rate", "40", True),
        ("Heart Rate", "200", True),
        ("Heart Rate", "39", False),
        ("Heart Rate", "201", False),
        ("Weight", "30", True),
        ("Weight", "300.0", True),
        ("Weight", "29.9", False),
        ("Weight", "155.5", True),
        ("Blood Pressure", "120/80", True),
        ("Blood Pressure", "205/90", False),
        ("Blood Pressure", "130/125", False),
        ("Blood Pressure", "69/50", False),
        ("Blood Pressure", "130 over 85", False),
        ("Glucose", "high", False),
        ("Symptoms", "feeling dizzy", True),
    ],
)
def test_check_range(category, value, expected):
    assert LogEntryValidator().check_range(_pending(category=category, value=value)) is expected


def test_range_bounds_come_from_config():
    validator = LogEntryValidator(ValidationConfig(glucose_min=80, glucose_max=180))
    assert not validator.check_range(_pending(value="75"))
    assert validator.check_range(_pending(value="180"))


def test_window_comes_from_config():
    validator = LogEntryValidator(ValidationConfig(duplicate_window_seconds=60))
    history = [_stored()]
    assert not validator.check_duplicate(_pending(timestamp=BASE + timedelta(minutes=3)), history)


def test_validate_accepts_clean_entry():
    result = LogEntryValidator().validate(_pending(), [])
    assert result.ok
    assert result.value.value == "95"


def test_validate_reports_out_of_range():
    result = LogEntryValidator().validate(_pending(value="500"), [])
    assert not result.ok
    assert result.kind == ErrorKind.OUT_OF_RANGE


def test_validate_reports_duplicate_before_range():
    history = [_stored()]
    result = LogEntryValidator().validate(_pending(value="500"), history)
    assert result.kind == ErrorKind.DUPLICATE_ENTRY
