"""Great-circle distances between venues and users."""

from __future__ import annotations

import math
from typing import Any

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometres between two lat/lng points."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def venue_coordinates(venue: dict[str, Any]) -> tuple[float, float] | None:
    """Return ``(lat, lng)`` for a venue row, or ``None`` if either is missing
    or not a finite number.
    """
    lat = venue.get("latitude")
    lng = venue.get("longitude")
    if lat is None or lng is None:
        return None
    try:
        coords = float(lat), float(lng)
    except (TypeError, ValueError):
        return None
    if not all(math.isfinite(c) for c in coords):
        return None
    return coords


def distance_to_venue(point: tuple[float, float], venue: dict[str, Any]) -> float:
    """Distance from *point* to *venue*; ``inf`` when either side has no usable coordinates."""
    coords = venue_coordinates(venue)
    if coords is None or not all(math.isfinite(p) for p in point):
        return math.inf
    return haversine_km(point[0], point[1], coords[0], coords[1])


def format_distance(km: float) -> str:
    """``0.35`` → ``"350m"``, ``2.04`` → ``"2.0km"``."""
    if km < 1:
        return f"{round(km * 1000)}m"
    return f"{km:.1f}km"


def walking_minutes(km: float) -> int:
    # ~5 km/h
    return round(km * 12)
