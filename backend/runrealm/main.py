"""
RunRealm API

FastAPI application for GPS run tracking and territory claiming.
"""

from contextlib import asynccontextmanager
import logging
import sys
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from runrealm import __version__
from runrealm.config import Settings, settings
from runrealm.api.v1.router import api_router
from runrealm.features.territory import TerritoryDeriver, TerritoryRegistry
from runrealm.features.tracking import RunTracker, TrackingConfig
from runrealm.integrations import (
    ClaimBackend,
    HttpClaimBackend,
    KeyValueStore,
    PushLocationSource,
    UnavailableClaimBackend,
)
from runrealm.shared.clock import Clock, now_ms
from runrealm.shared.events import EventBus
from runrealm.storage import (
    SqlKeyValueStore,
    StateRepository,
    create_session_factory,
    create_state_engine,
    init_db,
)


# === Logging Setup ===
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)
logger = logging.getLogger(__name__)


def _build_claim_backend(app_settings: Settings) -> ClaimBackend:
    if not app_settings.claim_backend_url:
        logger.info("Claim backend skipped (CLAIM_BACKEND_URL not set)")
        return UnavailableClaimBackend()

    logger.info(f"Claim backend: {app_settings.claim_backend_url}")
    return HttpClaimBackend(
        app_settings.claim_backend_url,
        api_key=app_settings.claim_backend_api_key,
        timeout=app_settings.claim_backend_timeout_seconds,
    )


# === App Creation ===
def create_app(
    app_settings: Settings = settings,
    store: Optional[KeyValueStore] = None,
    claim_backend: Optional[ClaimBackend] = None,
    clock: Clock = now_ms,
) -> FastAPI:
    """
    Build the API.

    store / claim_backend / clock replace the configured ones (tests).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        # Startup
        logger.info("Starting RunRealm API...")

        engine = None
        kv_store = store
        if kv_store is None:
            engine = create_state_engine(app_settings.database_url)
            init_db(engine)
            kv_store = SqlKeyValueStore(create_session_factory(engine))
            logger.info("Database initialized")

        backend = claim_backend or _build_claim_backend(app_settings)
        event_bus = EventBus()
        state = StateRepository(kv_store)
        location_source = PushLocationSource()

        app.state.events = event_bus
        app.state.state = state
        app.state.location_source = location_source
        app.state.tracker = RunTracker(
            location_source,
            event_bus,
            state=state,
            config=TrackingConfig.from_settings(app_settings),
            clock=clock,
        )
        app.state.registry = TerritoryRegistry(
            TerritoryDeriver(backend),
            backend,
            event_bus,
            state=state,
            proximity_threshold=app_settings.proximity_threshold_m,
            intent_expiry_hours=app_settings.intent_expiry_hours,
            home_chain_id=app_settings.home_chain_id,
            clock=clock,
        )

        yield

        # Shutdown
        app.state.tracker.cancel_run()
        if engine is not None:
            engine.dispose()
        logger.info("Shutting down...")

    app = FastAPI(
        title="RunRealm API",
        description="GPS run tracking and territory claiming",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
    )

    # === Middleware ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # === Routes ===
    app.include_router(api_router, prefix="/api/v1")

    # === Health Check ===
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()
