"""
Territory module.

Usage:
    from runrealm.features.territory import TerritoryDeriver, TerritoryRegistry
    from runrealm.features.territory import Territory, TerritoryIntent

Components:
- TerritoryDeriver: completed run -> claimable territory
- TerritoryRegistry: claims, cross-chain handshake, intents, proximity
- scoring: difficulty / rarity / reward
- geometry: bounds and overlap
"""

from .schemas import (
    ClaimResult,
    CrossChainEntry,
    LatLngPoint,
    NearbyTerritory,
    RunSummary,
    Territory,
    TerritoryBounds,
    TerritoryIntent,
    TerritoryMetadata,
    TerritoryPreview,
)
from .exceptions import (
    InvalidRunDataError,
    TerritoryAlreadyClaimedError,
    TerritoryDerivationError,
    TerritoryOverlapError,
)
from .geometry import bounds_geohash, bounds_overlap, compute_bounds
from .landmarks import LandmarkProvider, StaticLandmarkProvider
from .scoring import calculate_difficulty, calculate_rarity, calculate_reward
from .deriver import TerritoryDeriver
from .registry import TerritoryRegistry

__all__ = [
    # Schemas
    "ClaimResult",
    "CrossChainEntry",
    "LatLngPoint",
    "NearbyTerritory",
    "RunSummary",
    "Territory",
    "TerritoryBounds",
    "TerritoryIntent",
    "TerritoryMetadata",
    "TerritoryPreview",
    # Errors
    "InvalidRunDataError",
    "TerritoryAlreadyClaimedError",
    "TerritoryDerivationError",
    "TerritoryOverlapError",
    # Geometry and scoring
    "bounds_geohash",
    "bounds_overlap",
    "compute_bounds",
    "calculate_difficulty",
    "calculate_rarity",
    "calculate_reward",
    # Landmarks
    "LandmarkProvider",
    "StaticLandmarkProvider",
    # Services
    "TerritoryDeriver",
    "TerritoryRegistry",
]
