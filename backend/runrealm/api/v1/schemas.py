"""
Request/response bodies that only exist at the HTTP boundary.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from runrealm.features.territory import (
    LatLngPoint,
    NearbyTerritory,
    Territory,
    TerritoryBounds,
)
from runrealm.features.tracking import RunPoint, RunSession


class StartRunRequest(BaseModel):
    """Optional planned route to follow."""

    route: Optional[List[LatLngPoint]] = None
    distance: Optional[float] = Field(default=None, ge=0)


class StartRunResponse(BaseModel):
    run_id: str


class LocationUpdateResponse(BaseModel):
    accepted: bool
    point: Optional[RunPoint] = None
    nearby: List[NearbyTerritory] = Field(default_factory=list)


class StopRunResponse(BaseModel):
    run: RunSession
    territory: Optional[Territory] = None


class CreateIntentRequest(BaseModel):
    bounds: TerritoryBounds
    planned_route: Optional[List[LatLngPoint]] = None
    estimated_distance: Optional[float] = Field(default=None, ge=0)
    estimated_duration: Optional[int] = Field(default=None, ge=0)


class CrossChainConfirmedRequest(BaseModel):
    geohash: str
    transaction_hash: str
    origin_chain_id: Optional[int] = None
    owner: Optional[str] = None


class CrossChainFailedRequest(BaseModel):
    geohash: str
    error: str
