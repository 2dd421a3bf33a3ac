"""Flare Backend — Location-scoped and recency-sorted incident views

Stateless queries over the in-memory collection. Views are recomputed on
every call and never cached, so they cannot drift from the source list.
"""

from datetime import datetime, timezone

from models import Incident


def _newest_first(incidents) -> list[Incident]:
    return sorted(incidents, key=lambda i: i.timestamp, reverse=True)


def all_incidents(incidents: list[Incident]) -> list[Incident]:
    """The full collection, newest timestamp first."""
    return _newest_first(incidents)


def by_location(incidents: list[Incident], label: str) -> list[Incident]:
    """Incidents whose location equals `label`, ignoring case. Newest first."""
    wanted = label.casefold()
    return _newest_first(i for i in incidents if i.location.casefold() == wanted)


def same_day(timestamp: datetime, now: datetime) -> bool:
    """True when `timestamp` falls on the calendar day of `now`, in now's timezone."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(now.tzinfo).date() == now.date()


def todays_incidents(incidents: list[Incident], now: datetime) -> list[Incident]:
    """Incidents reported on now's calendar day, in their original order."""
    return [i for i in incidents if same_day(i.timestamp, now)]
