"""
Geographic utility functions.

This is the SINGLE SOURCE OF TRUTH for geographic calculations.
DO NOT duplicate these functions elsewhere.

All distances are in meters, all angles in degrees.
"""
import math
from typing import Iterable, Protocol, Sequence

# Earth radius in meters
EARTH_RADIUS_M = 6_371_000.0

COMPASS_DIRECTIONS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


class LatLng(Protocol):
    """Anything with lat/lng attributes (fixes, run points, centers)."""

    lat: float
    lng: float


def haversine(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in meters
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    # Rounding can push `a` a hair above 1 for antipodal points
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def distance(a: LatLng, b: LatLng) -> float:
    """Great-circle distance in meters between two lat/lng objects."""
    return haversine(a.lat, a.lng, b.lat, b.lng)


def bearing(a: LatLng, b: LatLng) -> float:
    """
    Initial bearing from a to b.

    Returns:
        Degrees clockwise from true north, in [0, 360)
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    delta_lon = math.radians(b.lng - a.lng)

    x = math.sin(delta_lon) * math.cos(lat2)
    y = (
        math.cos(lat1) * math.sin(lat2) -
        math.sin(lat1) * math.cos(lat2) * math.cos(delta_lon)
    )
    degrees = math.degrees(math.atan2(x, y))
    return degrees % 360.0


def compass_direction(bearing_deg: float) -> str:
    """
    Bucket a bearing into one of 8 compass points.

    Uses round-half-up (22.5 -> NE) so the bucket edges are stable.
    """
    index = math.floor(bearing_deg / 45.0 + 0.5) % 8
    return COMPASS_DIRECTIONS[index]


def direction_between(a: LatLng, b: LatLng) -> str:
    """Compass direction (N, NE, ...) from a towards b."""
    return compass_direction(bearing(a, b))


def calculate_total_distance(points: Sequence[LatLng]) -> float:
    """
    Calculate total distance for a route.

    Args:
        points: Ordered lat/lng objects

    Returns:
        Total distance in meters
    """
    total = 0.0

    for i in range(1, len(points)):
        total += distance(points[i - 1], points[i])

    return total


def envelope(points: Iterable[LatLng]) -> tuple[float, float, float, float]:
    """
    Min/max envelope of a point set.

    Returns:
        (north, south, east, west)

    Raises:
        ValueError: If points is empty
    """
    lats: list[float] = []
    lngs: list[float] = []
    for p in points:
        lats.append(p.lat)
        lngs.append(p.lng)

    if not lats:
        raise ValueError("Cannot compute envelope of an empty point set")

    return max(lats), min(lats), max(lngs), min(lngs)
