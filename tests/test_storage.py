from datetime import date, datetime, timedelta, timezone
from itertools import count

import pytest

from healthlog.models import PendingLogEntry
from healthlog.results import ErrorKind
from healthlog.storage import LogStore, group_by_day, summarize, timestamp_slug

NOW = datetime(2024, 12, 10, 12, 0)


def _store(entries=None):
    ids = count(1)
    return LogStore(entries=entries, now=lambda: NOW, id_factory=lambda: f"id{next(ids)}")


def _pending(category, value, timestamp, type_="vital", unit=None):
    return PendingLogEntry(
        type=type_, category=category, value=value, timestamp=timestamp, unit=unit
    )


def test_timestamp_slug_format():
    slug = timestamp_slug()
    assert len(slug) == 10
    assert slug.count("-") == 2
    assert timestamp_slug(datetime(2024, 3, 9)) == "2024-03-09"


def test_add_entry_assigns_id_and_backdated_flag():
    store = _store()
    today = store.add_entry(_pending("Glucose", "95", NOW))
    past = store.add_entry(_pending("Glucose", "101", NOW - timedelta(days=2)))
    assert today.ok and past.ok
    assert today.value.entry_id == "id1"
    assert not today.value.is_backdated
    assert past.value.is_backdated
    assert len(store) == 2


def test_entries_are_kept_newest_first():
    store = _store()
    store.add_entry(_pending("Weight", "150", NOW - timedelta(days=1)))
    store.add_entry(_pending("Glucose", "95", NOW))
    store.add_entry(_pending("Heart Rate", "72", NOW - timedelta(days=3)))
    assert [e.category for e in store.entries] == ["Glucose", "Weight", "Heart Rate"]


def test_add_many_allows_partial_success():
    store = _store()
    store.add_entry(_pending("Glucose", "95", NOW))
    batch = [
        _pending("Blood Pressure", "130/85", NOW, unit="mmHg"),
        _pending("Glucose", "99", NOW + timedelta(minutes=2)),
        _pending("Heart Rate", "250", NOW),
        _pending("Symptoms", "mild headache", NOW, type_="non-vital"),
    ]
    results = store.add_many(batch)
    assert [r.ok for r in results] == [True, False, False, True]
    assert results[1].kind == ErrorKind.DUPLICATE_ENTRY
    assert results[2].kind == ErrorKind.OUT_OF_RANGE
    assert len(store) == 3


def test_blank_value_is_rejected_before_reaching_store():
    store = _store()
    for blank in ("", "   "):
        with pytest.raises(ValueError):
            _pending("Medication", blank, NOW, type_="non-vital")
    assert len(store) == 0


def test_aware_and_naive_timestamps_mix():
    aware = datetime(2024, 12, 1, 9, 30, tzinfo=timezone.utc)
    local = aware.astimezone().replace(tzinfo=None)
    store = _store()
    assert store.add_entry(_pending("Glucose", "95", local)).ok

    weight = store.add_entry(_pending("Weight", "150", aware, unit="lbs"))
    assert weight.ok
    assert weight.value.timestamp.tzinfo is None
    assert weight.value.timestamp == local
    assert len(store) == 2

    repeat = store.add_entry(_pending("Glucose", "97", aware + timedelta(minutes=2)))
    assert not repeat.ok
    assert repeat.kind == ErrorKind.DUPLICATE_ENTRY
    assert len(store) == 2


def test_rejected_entry_is_not_stored():
    store = _store()
    result = store.add_entry(_pending("Weight", "12", NOW))
    assert not result.ok
    assert len(store) == 0


def test_delete_entry():
    store = _store()
    entry = store.add_entry(_pending("Glucose", "95", NOW)).value
    assert store.delete_entry(entry.entry_id) == entry
    assert store.get(entry.entry_id) is None
    with pytest.raises(KeyError):
        store.delete_entry(entry.entry_id)


def test_deleted_entry_no_longer_blocks_duplicates():
    store = _store()
    entry = store.add_entry(_pending("Glucose", "95", NOW)).value
    store.delete_entry(entry.entry_id)
    assert store.add_entry(_pending("Glucose", "96", NOW)).ok


def test_entries_within_period():
    store = _store()
    store.add_entry(_pending("Glucose", "95", NOW - timedelta(days=7)))
    store.add_entry(_pending("Glucose", "96", NOW - timedelta(days=8)))
    store.add_entry(_pending("Glucose", "97", NOW - timedelta(days=14)))
    assert [e.value for e in store.entries_within(7)] == ["95"]
    assert [e.value for e in store.entries_within(14)] == ["95", "96", "97"]


def test_group_by_day_and_summary():
    store = _store()
    store.add_entry(_pending("Glucose", "95", datetime(2024, 12, 10, 8, 0)))
    store.add_entry(_pending("Weight", "150", datetime(2024, 12, 10, 9, 0)))
    store.add_entry(_pending("Diet", "oatmeal", datetime(2024, 12, 9, 8, 0), type_="non-vital"))
    groups = group_by_day(store.entries)
    assert list(groups) == [date(2024, 12, 10), date(2024, 12, 9)]
    assert [e.category for e in groups[date(2024, 12, 10)]] == ["Weight", "Glucose"]
    assert summarize(store.entries) == {"total": 3, "vitals": 2, "backdated": 1}
