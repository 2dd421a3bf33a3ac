import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from incident_store import IncidentStore
from models import Incident

T0 = datetime(2024, 11, 14, 15, 5, 30, 123456, tzinfo=timezone.utc)


class FakeAnalyzer:
    """Analysis collaborator double that records every call."""

    def __init__(self, reply="Cluster near downtown", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[list, str]] = []

    async def analyze(self, coordinates, instructions):
        self.calls.append((list(coordinates), instructions))
        if self.error is not None:
            raise self.error
        return self.reply


class GatedAnalyzer:
    """Blocks each call until released, so tests can overlap requests."""

    def __init__(self):
        self.calls = 0
        self.cancelled = 0
        self._gates: list[asyncio.Event] = []

    async def analyze(self, coordinates, instructions):
        self.calls += 1
        n = self.calls
        gate = asyncio.Event()
        self._gates.append(gate)
        try:
            await gate.wait()
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        return f"analysis {n}"

    def release(self, n: int):
        self._gates[n - 1].set()


async def settle(rounds: int = 5):
    for _ in range(rounds):
        await asyncio.sleep(0)


def make_incident(title="Harassment", location="Main St", timestamp=T0,
                  latitude=25.76, longitude=-80.19, **kwargs) -> Incident:
    return Incident(
        title=title,
        description=kwargs.pop("description", f"{title} reported"),
        location=location,
        timestamp=timestamp,
        latitude=latitude,
        longitude=longitude,
        **kwargs,
    )


@pytest.fixture
def store(tmp_path):
    return IncidentStore(data_dir=tmp_path, key="alertsKey")


@pytest.fixture
def incidents():
    return [
        make_incident("Followed", "Main St", T0 - timedelta(hours=2), 25.7701, -80.1901),
        make_incident("Catcalling", "main st", T0 - timedelta(days=1), 25.7702, -80.1902),
        make_incident("Poor lighting", "Brickell Ave", T0, 25.7603, -80.1903),
    ]
