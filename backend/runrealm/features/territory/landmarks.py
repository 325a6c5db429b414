"""
Landmark lookup.

Real POI lookup is an external concern; the deriver only needs something
that names landmarks inside a bounding box and flags special locations.
"""

from typing import List, Protocol, Sequence

from .geometry import bounds_overlap
from .schemas import TerritoryBounds

DEFAULT_LANDMARKS = ("Park", "Street", "Neighborhood")


class LandmarkProvider(Protocol):
    """POI lookup for a territory."""

    def identify(self, bounds: TerritoryBounds) -> List[str]:
        ...

    def is_special_location(self, bounds: TerritoryBounds) -> bool:
        ...


class StaticLandmarkProvider:
    """
    Fixed landmark list plus optional special areas.

    A territory is special when its bounds overlap any configured area.
    """

    def __init__(
        self,
        landmarks: Sequence[str] = DEFAULT_LANDMARKS,
        special_areas: Sequence[TerritoryBounds] = (),
    ):
        self.landmarks = list(landmarks)
        self.special_areas = list(special_areas)

    def identify(self, bounds: TerritoryBounds) -> List[str]:
        return list(self.landmarks)

    def is_special_location(self, bounds: TerritoryBounds) -> bool:
        return any(bounds_overlap(bounds, area) for area in self.special_areas)
