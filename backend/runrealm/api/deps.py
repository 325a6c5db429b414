"""
Route dependencies.

Services are built once in the application lifespan and kept on app.state.
"""

from fastapi import Request

from runrealm.features.territory import TerritoryRegistry
from runrealm.features.tracking import RunTracker
from runrealm.integrations import PushLocationSource
from runrealm.storage import StateRepository


def get_tracker(request: Request) -> RunTracker:
    return request.app.state.tracker


def get_registry(request: Request) -> TerritoryRegistry:
    return request.app.state.registry


def get_location_source(request: Request) -> PushLocationSource:
    return request.app.state.location_source


def get_state(request: Request) -> StateRepository:
    return request.app.state.state
