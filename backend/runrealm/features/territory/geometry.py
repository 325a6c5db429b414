"""
Territory geometry helpers.
"""

from typing import Iterable

from runrealm.shared.geo import LatLng, envelope

from .schemas import LatLngPoint, TerritoryBounds


def compute_bounds(points: Iterable[LatLng]) -> TerritoryBounds:
    """
    Bounding box of a point set.

    The center is the midpoint of the box, not the mean of the points.

    Raises:
        ValueError: If points is empty
    """
    north, south, east, west = envelope(points)
    return TerritoryBounds(
        north=north,
        south=south,
        east=east,
        west=west,
        center=LatLngPoint(lat=(north + south) / 2, lng=(east + west) / 2),
    )


def bounds_overlap(a: TerritoryBounds, b: TerritoryBounds) -> bool:
    """Standard AABB test. Touching edges count as overlap."""
    return not (
        a.east < b.west or
        b.east < a.west or
        a.north < b.south or
        b.north < a.south
    )


def bounds_geohash(bounds: TerritoryBounds) -> str:
    """
    Region id for a planned area (intents, previews).

    Rounded center coordinates; like the run region id it has no
    spatial-prefix property.
    """
    return f"{bounds.center.lat:.6f}_{bounds.center.lng:.6f}"
