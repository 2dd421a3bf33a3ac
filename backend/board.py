"""Flare Backend — Incident board

Owns the in-memory incident collection and the currently selected incident.
Every mutation writes the full collection back to the store before returning.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

import location_index
import risk
from incident_store import IncidentStore
from models import Incident, IncidentView

logger = logging.getLogger("flare.board")


def view_of(incident: Incident, now: datetime) -> IncidentView:
    band = risk.classify(incident.timestamp, now)
    return IncidentView(
        incident=incident,
        riskBand=band,
        markerColor=risk.marker_color(band),
        relativeTime=risk.relative_time(incident.timestamp, now),
    )


class IncidentBoard:
    def __init__(self, store: IncidentStore):
        self._store = store
        self._incidents: list[Incident] = []
        self._selected: Optional[Incident] = None
        self.reload()

    @property
    def incidents(self) -> list[Incident]:
        return list(self._incidents)

    @property
    def selected(self) -> Optional[Incident]:
        return self._selected

    def reload(self) -> list[Incident]:
        """Replace the in-memory collection with the stored snapshot."""
        self._incidents = self._store.load()
        if self._selected is not None and self._selected not in self._incidents:
            self._selected = None
        logger.info(f"Loaded {len(self._incidents)} incidents")
        return self.incidents

    def submit(
        self,
        title: str,
        description: str,
        location: str,
        timestamp: datetime,
        latitude: float,
        longitude: float,
    ) -> Incident:
        incident = Incident(
            title=title,
            description=description,
            location=location,
            timestamp=timestamp,
            latitude=latitude,
            longitude=longitude,
        )
        self._incidents.insert(0, incident)
        self._store.save(self._incidents)
        logger.info(f"Incident submitted: '{title}' at {location} ({latitude:.4f}, {longitude:.4f})")
        return incident

    def all(self) -> list[Incident]:
        return location_index.all_incidents(self._incidents)

    def by_location(self, label: str) -> list[Incident]:
        return location_index.by_location(self._incidents, label)

    def select(self, incident_id: uuid.UUID) -> Incident:
        for incident in self._incidents:
            if incident.id == incident_id:
                self._selected = incident
                return incident
        raise KeyError(incident_id)

    def clear_selection(self) -> None:
        self._selected = None

    def refresh_display(self, now: Optional[datetime] = None, label: Optional[str] = None) -> list[IncidentView]:
        """Recompute the relative-time display for every incident.

        Identity and timestamps are left alone; only derived values change.
        """
        now = now or datetime.now(timezone.utc)
        incidents = self.by_location(label) if label is not None else self.all()
        return [view_of(i, now) for i in incidents]

    def clear(self) -> None:
        """Bulk-remove every incident, in memory and on disk."""
        self._incidents = []
        self._selected = None
        self._store.clear()
        logger.info("All incidents cleared")
