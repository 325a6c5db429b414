"""
Territory Routes

Claimed territories, claims, proximity, previews and cross-chain callbacks.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from runrealm.api.deps import get_registry, get_state
from runrealm.api.v1.schemas import CrossChainConfirmedRequest, CrossChainFailedRequest
from runrealm.features.territory import (
    ClaimResult,
    LatLngPoint,
    NearbyTerritory,
    Territory,
    TerritoryBounds,
    TerritoryPreview,
    TerritoryRegistry,
)
from runrealm.storage import StateRepository

router = APIRouter()


@router.get("", response_model=List[Territory])
async def list_territories(registry: TerritoryRegistry = Depends(get_registry)):
    """All stored territories, including pending cross-chain claims."""
    return registry.get_claimed_territories()


@router.post("/claim", response_model=ClaimResult)
async def claim_last_run(
    registry: TerritoryRegistry = Depends(get_registry),
    state: StateRepository = Depends(get_state),
):
    """
    Claim a territory from the last completed (or imported) run.

    Failed claims return success=false with the reason in `error`.
    """
    run = state.load_last_run()
    if run is None:
        raise HTTPException(status_code=404, detail="No completed run to claim from")

    if run.external_activity is not None:
        return await registry.claim_external_activity(run)
    return await registry.claim_run(run)


@router.get("/nearby", response_model=List[NearbyTerritory])
async def nearby_territories(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    registry: TerritoryRegistry = Depends(get_registry),
):
    return registry.update_proximity(LatLngPoint(lat=lat, lng=lng))


@router.post("/preview", response_model=TerritoryPreview)
async def preview_territory(
    bounds: TerritoryBounds,
    registry: TerritoryRegistry = Depends(get_registry),
):
    return await registry.get_territory_preview(bounds)


@router.post("/cross-chain/confirmed", response_model=Territory)
async def cross_chain_confirmed(
    body: CrossChainConfirmedRequest,
    registry: TerritoryRegistry = Depends(get_registry),
):
    territory = registry.handle_cross_chain_confirmation(
        body.geohash,
        body.transaction_hash,
        origin_chain_id=body.origin_chain_id,
        owner=body.owner,
    )
    if territory is None:
        raise HTTPException(status_code=404, detail="No pending cross-chain claim for geohash")
    return territory


@router.post("/cross-chain/failed", response_model=Territory)
async def cross_chain_failed(
    body: CrossChainFailedRequest,
    registry: TerritoryRegistry = Depends(get_registry),
):
    territory = registry.handle_cross_chain_failure(body.geohash, body.error)
    if territory is None:
        raise HTTPException(status_code=404, detail="No pending cross-chain claim for geohash")
    return territory
