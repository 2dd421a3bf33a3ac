"""Flare Backend — External Data Fetchers (Google Geocoding)

Read-only place lookups used to drop search markers on the map. Nothing here
touches the incident collection.
"""

import logging
import threading
from typing import Optional

import httpx
from cachetools import TTLCache

from config import GOOGLE_MAPS_API_KEY, DEFAULT_REGION
from models import PlaceResult

logger = logging.getLogger("flare.fetchers")

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

# Shared async HTTP client
client = httpx.AsyncClient(timeout=15.0)

# 30 min — place names don't move
_GEOCODE_CACHE = TTLCache(maxsize=500, ttl=1800)
_GEOCODE_CACHE_LOCK = threading.Lock()


def _region_bounds(region: dict) -> str:
    """Google `bounds` bias string: "south,west|north,east"."""
    span = region.get("span_deg", 0.045)
    lat, lng = region["lat"], region["lng"]
    return f"{lat - span},{lng - span}|{lat + span},{lng + span}"


def _parse_results(data: dict) -> list[PlaceResult]:
    places = []
    for result in data.get("results", []):
        loc = result.get("geometry", {}).get("location", {})
        if "lat" not in loc or "lng" not in loc:
            continue
        address = result.get("formatted_address", "")
        components = result.get("address_components", [])
        name = components[0].get("long_name", "") if components else ""
        places.append(PlaceResult(
            name=name or address,
            address=address,
            latitude=float(loc["lat"]),
            longitude=float(loc["lng"]),
        ))
    return places


async def search_places(
    query: str,
    region: dict = DEFAULT_REGION,
    http: Optional[httpx.AsyncClient] = None,
) -> list[PlaceResult]:
    """Search for places matching `query`, biased to the user's region.

    Returns an empty list on blank queries, missing keys or any API error.
    """
    query = (query or "").strip()
    if not query:
        return []

    cache_key = (query.lower(), region["lat"], region["lng"])
    with _GEOCODE_CACHE_LOCK:
        if cache_key in _GEOCODE_CACHE:
            logger.info(f"Geocode cache hit for '{query}'")
            return list(_GEOCODE_CACHE[cache_key])

    if not GOOGLE_MAPS_API_KEY and http is None:
        logger.warning("GOOGLE_MAPS_API_KEY not set — place search disabled")
        return []

    try:
        r = await (http or client).get(
            GEOCODE_URL,
            params={
                "address": query,
                "bounds": _region_bounds(region),
                "key": GOOGLE_MAPS_API_KEY,
            },
        )
        if r.status_code != 200:
            logger.warning(f"Geocode returned {r.status_code} for '{query}'")
            return []
        data = r.json()
        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            logger.warning(f"Geocode status {status} for '{query}'")
            return []
        places = _parse_results(data)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Geocode error: {e}")
        return []

    with _GEOCODE_CACHE_LOCK:
        _GEOCODE_CACHE[cache_key] = places
    return list(places)


def clear_cache() -> None:
    with _GEOCODE_CACHE_LOCK:
        _GEOCODE_CACHE.clear()
