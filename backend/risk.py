"""Flare Backend — Recency risk classification & display helpers

Everything here is derived from `(timestamp, now)` on each call and is never
persisted. `now` always comes from the caller.
"""

from datetime import datetime, timezone

from config import MARKER_COLORS
from models import RiskBand


def _aligned(timestamp: datetime, now: datetime) -> tuple[datetime, datetime]:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    # Same tzinfo → wall-clock subtraction, so a DST shift doesn't eat a day
    return timestamp.astimezone(now.tzinfo), now


def days_ago(timestamp: datetime, now: datetime) -> int:
    """Whole calendar days elapsed from `timestamp` to `now` (floored)."""
    timestamp, now = _aligned(timestamp, now)
    return (now - timestamp).days


def classify(timestamp: datetime, now: datetime) -> RiskBand:
    """Map an incident's age to a risk band.

    Bands (half-open, inclusive lower bound):
      d < 1       → CRITICAL
      1 ≤ d < 7   → ELEVATED
      7 ≤ d < 30  → MODERATE
      30 ≤ d < 90 → LOW
      d ≥ 90      → NONE

    Timestamps in the future count as d < 1.
    """
    d = days_ago(timestamp, now)
    if d < 1:
        return RiskBand.CRITICAL
    elif d < 7:
        return RiskBand.ELEVATED
    elif d < 30:
        return RiskBand.MODERATE
    elif d < 90:
        return RiskBand.LOW
    else:
        return RiskBand.NONE


def marker_color(band: RiskBand) -> str:
    return MARKER_COLORS[band.value]


def _medium_datetime(value: datetime) -> str:
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{value:%b} {value.day}, {value.year} at {hour}:{value.minute:02d} {meridiem}"


def relative_time(timestamp: datetime, now: datetime) -> str:
    """Short "time ago" label; anything older than a day shows the date and time."""
    timestamp, now = _aligned(timestamp, now)
    seconds = int((now - timestamp).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60

    if seconds < 60:
        return "Just now"
    elif minutes < 60:
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    elif hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    return _medium_datetime(timestamp)
