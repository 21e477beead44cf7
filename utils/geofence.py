# utils/geofence.py

from math import atan2, cos, radians, sin, sqrt
from typing import NamedTuple, Optional

EARTH_RADIUS_KM = 6371.0


class Coordinate(NamedTuple):
    lat: float
    long: float


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    φ1, φ2 = radians(lat1), radians(lat2)
    Δφ = radians(lat2 - lat1)
    Δλ = radians(lng2 - lng1)

    a = sin(Δφ / 2) ** 2 + cos(φ1) * cos(φ2) * sin(Δλ / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(a: Coordinate, b: Coordinate) -> float:
    return haversine_km(a.lat, a.long, b.lat, b.long)


def is_within_radius(
    lat: float,
    lng: float,
    center_lat: float,
    center_lng: float,
    radius_km: float,
) -> bool:
    # Boundary counts as inside
    return haversine_km(lat, lng, center_lat, center_lng) <= radius_km


def format_location(location: Coordinate) -> str:
    """Serialize a coordinate the way shift rows store it: ``"lat,long"``."""
    return f"{location.lat},{location.long}"


def parse_location(text: Optional[str]) -> Optional[Coordinate]:
    if not text:
        return None
    parts = text.split(",")
    if len(parts) != 2:
        return None
    try:
        return Coordinate(float(parts[0].strip()), float(parts[1].strip()))
    except ValueError:
        return None
