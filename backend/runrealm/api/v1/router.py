"""
API Router v1

Combines all route modules.
"""

from fastapi import APIRouter

from runrealm.api.v1.routes import intents, runs, territories

api_router = APIRouter()

api_router.include_router(runs.router, prefix="/runs", tags=["Runs"])
api_router.include_router(territories.router, prefix="/territories", tags=["Territories"])
api_router.include_router(intents.router, prefix="/intents", tags=["Intents"])
