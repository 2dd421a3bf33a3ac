from datetime import datetime, timedelta, timezone

from conftest import T0, make_incident
from location_index import all_incidents, by_location, same_day, todays_incidents


def test_by_location_ignores_case(incidents):
    result = by_location(incidents, "MAIN ST")
    assert {i.title for i in result} == {"Followed", "Catcalling"}


def test_by_location_sorted_newest_first(incidents):
    result = by_location(incidents, "main st")
    assert [i.title for i in result] == ["Followed", "Catcalling"]


def test_by_location_is_exact_match(incidents):
    assert by_location(incidents, "Main") == []


def test_no_match_is_empty(incidents):
    assert by_location(incidents, "Nowhere Rd") == []
    assert by_location([], "Main St") == []


def test_all_sorted_newest_first():
    a = make_incident("A", timestamp=T0)
    b = make_incident("B", timestamp=T0 + timedelta(seconds=1))
    assert all_incidents([a, b]) == [b, a]


def test_views_do_not_mutate_source(incidents):
    before = list(incidents)
    all_incidents(incidents)
    by_location(incidents, "main st")
    assert incidents == before


def test_same_day_uses_nows_timezone():
    miami = timezone(timedelta(hours=-5))
    now = datetime(2024, 11, 14, 20, 0, tzinfo=miami)
    # 01:30 UTC on the 15th is still the evening of the 14th in Miami
    late = datetime(2024, 11, 15, 1, 30, tzinfo=timezone.utc)
    assert same_day(late, now)
    assert not same_day(late, now.astimezone(timezone.utc) - timedelta(hours=12))


def test_todays_incidents_keeps_original_order():
    now = datetime(2024, 11, 14, 18, 0, tzinfo=timezone.utc)
    first = make_incident("first", timestamp=now - timedelta(hours=1))
    old = make_incident("old", timestamp=now - timedelta(days=1))
    second = make_incident("second", timestamp=now - timedelta(hours=5))
    assert todays_incidents([first, old, second], now) == [first, second]
