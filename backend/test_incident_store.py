import math
import os
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

import incident_store
from conftest import T0, make_incident
from incident_store import IncidentStore


class TestRoundTrip:
    def test_save_then_load_is_field_for_field(self, store, incidents):
        store.save(incidents)
        loaded = store.load()

        assert loaded == incidents
        assert [i.id for i in loaded] == [i.id for i in incidents]

    def test_precision_survives(self, store):
        tz = timezone(timedelta(hours=-5))
        incident = make_incident(
            timestamp=datetime(2024, 11, 14, 9, 30, 1, 999999, tzinfo=tz),
            latitude=25.761234567890123,
            longitude=0.1 + 0.2,
        )
        store.save([incident])
        (loaded,) = store.load()

        assert loaded.timestamp == incident.timestamp
        assert loaded.timestamp.microsecond == 999999
        assert loaded.latitude == 25.761234567890123
        assert loaded.longitude == 0.1 + 0.2

    def test_save_overwrites_whole_snapshot(self, store, incidents):
        store.save(incidents)
        store.save(incidents[:1])
        assert store.load() == incidents[:1]

    def test_scenario_single_incident(self, store):
        a = make_incident(latitude=25.76, longitude=-80.19, timestamp=T0)
        store.save([a])
        assert store.load() == [a]


class TestFailSoft:
    def test_missing_snapshot_is_empty(self, store):
        assert store.load() == []

    def test_corrupt_snapshot_is_empty(self, store):
        store.path.write_text("{not json")
        assert store.load() == []

    def test_wrong_shape_is_empty(self, store):
        store.path.write_text('[{"title": "missing fields"}]')
        assert store.load() == []

    def test_failed_write_keeps_prior_snapshot(self, store, incidents, monkeypatch):
        store.save(incidents)

        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(incident_store.os, "replace", boom)
        store.save(incidents[:1])  # must not raise

        monkeypatch.undo()
        assert store.load() == incidents
        leftovers = [p for p in os.listdir(store.path.parent) if p.endswith(".tmp")]
        assert leftovers == []

    def test_unwritable_directory_does_not_raise(self, tmp_path, incidents):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        IncidentStore(data_dir=blocker / "nested").save(incidents)


def test_clear_removes_snapshot(store, incidents):
    store.save(incidents)
    store.clear()
    assert store.load() == []
    store.clear()  # already gone


def test_naive_timestamp_is_stored_as_utc(store):
    incident = make_incident(timestamp=datetime(2024, 1, 1, 12, 0))
    assert incident.timestamp.tzinfo is timezone.utc
    store.save([incident])
    assert store.load() == [incident]


@pytest.mark.parametrize("field, value", [
    ("latitude", math.nan),
    ("latitude", math.inf),
    ("latitude", 91.0),
    ("longitude", -math.inf),
    ("longitude", 180.5),
])
def test_unstorable_coordinates_are_rejected(field, value):
    with pytest.raises(ValidationError):
        make_incident(**{field: value})


def test_existing_snapshot_survives_rejected_incident(store, incidents):
    store.save(incidents)
    with pytest.raises(ValidationError):
        bad = make_incident(latitude=math.nan)
        store.save(incidents + [bad])
    assert store.load() == incidents
