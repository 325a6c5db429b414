"""
Run Routes

Live run control, location push and activity import.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from runrealm.api.deps import get_location_source, get_registry, get_state, get_tracker
from runrealm.api.v1.schemas import (
    LocationUpdateResponse,
    StartRunRequest,
    StartRunResponse,
    StopRunResponse,
)
from runrealm.features.territory import TerritoryRegistry
from runrealm.features.tracking import (
    ActivityImportError,
    ExternalActivity,
    LocationFix,
    LocationUnavailableError,
    RunAlreadyInProgressError,
    RunLap,
    RunSession,
    RunStats,
    RunTracker,
)
from runrealm.integrations import PushLocationSource
from runrealm.storage import StateRepository

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_GPX_SIZE = 20 * 1024 * 1024  # 20MB


@router.post("/start", response_model=StartRunResponse)
async def start_run(
    body: Optional[StartRunRequest] = None,
    tracker: RunTracker = Depends(get_tracker),
):
    """
    Start a run from the latest pushed location.

    A fix must have been pushed to /runs/location first.
    """
    try:
        if body and body.route:
            run_id = await tracker.start_run_with_route(body.route, body.distance or 0.0)
        else:
            run_id = await tracker.start_run()
    except RunAlreadyInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except LocationUnavailableError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return StartRunResponse(run_id=run_id)


@router.post("/location", response_model=LocationUpdateResponse)
async def push_location(
    fix: LocationFix,
    location_source: PushLocationSource = Depends(get_location_source),
    registry: TerritoryRegistry = Depends(get_registry),
):
    """Push a GPS fix; returns whether the active run accepted it."""
    point = location_source.push(fix)
    nearby = registry.update_proximity(fix)
    return LocationUpdateResponse(accepted=point is not None, point=point, nearby=nearby)


@router.post("/pause", response_model=RunStats)
async def pause_run(tracker: RunTracker = Depends(get_tracker)):
    tracker.pause_run()
    return _current_stats(tracker)


@router.post("/resume", response_model=RunStats)
async def resume_run(tracker: RunTracker = Depends(get_tracker)):
    tracker.resume_run()
    return _current_stats(tracker)


@router.post("/lap", response_model=RunLap)
async def record_lap(tracker: RunTracker = Depends(get_tracker)):
    lap = tracker.record_lap()
    if lap is None:
        raise HTTPException(status_code=409, detail="No run is recording")
    return lap


@router.post("/stop", response_model=StopRunResponse)
async def stop_run(
    tracker: RunTracker = Depends(get_tracker),
    registry: TerritoryRegistry = Depends(get_registry),
):
    """
    Complete the active run.

    Eligible runs come back with their territory: claimed when the run
    fulfilled an intent, otherwise still claimable.
    """
    run = tracker.stop_run()
    if run is None:
        raise HTTPException(status_code=404, detail="No active run")

    territory = await registry.process_completed_run(run)
    return StopRunResponse(run=run, territory=territory)


@router.post("/cancel")
async def cancel_run(tracker: RunTracker = Depends(get_tracker)):
    tracker.cancel_run()
    return {"status": "cancelled"}


@router.get("/current", response_model=Optional[RunSession])
async def get_current_run(tracker: RunTracker = Depends(get_tracker)):
    return tracker.get_current_run()


@router.get("/last", response_model=RunSession)
async def get_last_run(state: StateRepository = Depends(get_state)):
    run = state.load_last_run()
    if run is None:
        raise HTTPException(status_code=404, detail="No completed run")
    return run


@router.post("/import", response_model=RunSession)
async def import_activity(
    activity: ExternalActivity,
    tracker: RunTracker = Depends(get_tracker),
):
    """Import a pre-recorded activity (encoded polyline)."""
    try:
        return tracker.import_external_activity(activity)
    except ActivityImportError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/import/gpx", response_model=RunSession)
async def import_gpx(
    file: UploadFile = File(...),
    tracker: RunTracker = Depends(get_tracker),
):
    """Import a GPX file as a completed run."""
    if not file.filename or not file.filename.lower().endswith('.gpx'):
        raise HTTPException(status_code=400, detail="Only .gpx files are allowed")

    content = await file.read()

    if len(content) == 0:
        raise HTTPException(status_code=400, detail="File is empty")

    if len(content) > MAX_GPX_SIZE:
        raise HTTPException(status_code=400, detail="File too large (max 20MB)")

    try:
        return tracker.import_gpx(content, file.filename)
    except ActivityImportError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _current_stats(tracker: RunTracker) -> RunStats:
    stats = tracker.get_current_stats()
    if stats is None:
        raise HTTPException(status_code=404, detail="No active run")
    return stats
