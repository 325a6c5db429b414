"""
Territory Intent Routes
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from runrealm.api.deps import get_registry
from runrealm.api.v1.schemas import CreateIntentRequest
from runrealm.features.territory import TerritoryIntent, TerritoryRegistry
from runrealm.shared.constants import IntentStatus

router = APIRouter()


@router.post("", response_model=TerritoryIntent, status_code=201)
async def create_intent(
    body: CreateIntentRequest,
    registry: TerritoryRegistry = Depends(get_registry),
):
    return registry.create_intent(
        body.bounds,
        planned_route=body.planned_route,
        estimated_distance=body.estimated_distance,
        estimated_duration=body.estimated_duration,
    )


@router.get("", response_model=List[TerritoryIntent])
async def list_active_intents(registry: TerritoryRegistry = Depends(get_registry)):
    """Active intents, earliest first. Expired ones drop out."""
    return registry.get_active_intents()


@router.delete("/{intent_id}")
async def cancel_intent(
    intent_id: str,
    registry: TerritoryRegistry = Depends(get_registry),
):
    intent = registry.get_intent(intent_id)
    if intent is None:
        raise HTTPException(status_code=404, detail="Intent not found")

    if not registry.cancel_intent(intent_id):
        raise HTTPException(
            status_code=409,
            detail=f"Intent is {intent.status.value} and cannot be cancelled",
        )
    return {"status": IntentStatus.CANCELLED.value, "intent_id": intent_id}
