"""
Territory schemas.

Pydantic models for territory geometry, metadata, claims and intents.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from runrealm.shared.constants import IntentStatus, Rarity, TerritoryStatus


class LatLngPoint(BaseModel):
    """Plain coordinate."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class TerritoryBounds(BaseModel):
    """Axis-aligned bounding box of a run plus its center."""

    model_config = ConfigDict(frozen=True)

    north: float
    south: float
    east: float
    west: float
    center: LatLngPoint


class TerritoryMetadata(BaseModel):
    """Derived description of a territory."""

    name: str
    description: str
    landmarks: List[str] = Field(default_factory=list)
    difficulty: int = Field(ge=0, le=100)
    rarity: Rarity
    estimated_reward: int


class RunSummary(BaseModel):
    """Stats of the run a territory was derived from."""

    distance: float
    duration: int
    average_speed: float
    point_count: int


class CrossChainEntry(BaseModel):
    """One cross-chain claim attempt."""

    chain_id: int
    timestamp: int
    transaction_hash: Optional[str] = None


class Territory(BaseModel):
    """
    Claimable region derived from an eligible run.

    Status is written only by the TerritoryRegistry.
    """

    id: str
    geohash: str
    bounds: TerritoryBounds
    metadata: TerritoryMetadata
    run_data: RunSummary
    status: TerritoryStatus = TerritoryStatus.CLAIMABLE
    owner: Optional[str] = None
    claimed_at: Optional[int] = None
    run_id: Optional[str] = None
    intent_id: Optional[str] = None

    # Chain bookkeeping
    chain_id: Optional[int] = None
    token_id: Optional[str] = None
    transaction_hash: Optional[str] = None
    is_cross_chain: bool = False
    source_chain_id: Optional[int] = None
    cross_chain_claim_tx_hash: Optional[str] = None
    cross_chain_history: List[CrossChainEntry] = Field(default_factory=list)


class TerritoryIntent(BaseModel):
    """A planned route reserved before it is run."""

    id: str
    bounds: TerritoryBounds
    geohash: str
    metadata: TerritoryMetadata
    created_at: int
    expires_at: int
    planned_route: Optional[List[LatLngPoint]] = None
    estimated_distance: float = 0.0
    estimated_duration: int = 0
    status: IntentStatus = IntentStatus.ACTIVE
    user_id: Optional[str] = None


class NearbyTerritory(BaseModel):
    """Claimed territory near the current location."""

    territory: Territory
    distance: float  # meters to territory center
    direction: str  # N, NE, E, SE, S, SW, W, NW


class ClaimResult(BaseModel):
    """Outcome of a claim attempt. Errors carry the original reason string."""

    success: bool
    territory: Optional[Territory] = None
    transaction_hash: Optional[str] = None
    error: Optional[str] = None


class TerritoryPreview(BaseModel):
    """What claiming a given area would look like."""

    bounds: TerritoryBounds
    geohash: str
    metadata: TerritoryMetadata
    is_available: bool
    conflicting_territories: List[Territory] = Field(default_factory=list)
    estimated_claimability: int  # 0-100
