"""
Shared fixtures: fake collaborators, a recording event bus and GPS helpers.
"""

import asyncio
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional

import pytest

from runrealm.features.territory import TerritoryDeriver, TerritoryRegistry
from runrealm.features.tracking import LocationFix, RunTracker, TrackingConfig
from runrealm.integrations import (
    ClaimBackendNotReadyError,
    LocationSourceError,
    TerritoryClaimData,
    WalletInfo,
)
from runrealm.shared.clock import ManualClock
from runrealm.shared.events import EventBus
from runrealm.storage import InMemoryKeyValueStore, StateRepository


ORIGIN_LAT = 40.0
ORIGIN_LNG = -74.0
START_MS = 1_700_000_000_000
FIX_INTERVAL_MS = 5_000
HOME_CHAIN_ID = 7001

# Meters per degree of latitude for EARTH_RADIUS_M
M_PER_DEG_LAT = 6_371_000.0 * math.pi / 180


def offset(lat: float, lng: float, north_m: float, east_m: float) -> tuple[float, float]:
    """Move a coordinate by a number of meters north and east."""
    return (
        lat + north_m / M_PER_DEG_LAT,
        lng + east_m / (M_PER_DEG_LAT * math.cos(math.radians(lat))),
    )


# =============================================================================
# Fakes
# =============================================================================

class FakeLocationSource:
    """Location source driven by the test."""

    def __init__(self, fix: Optional[LocationFix] = None, error: Optional[Exception] = None):
        self.fix = fix
        self.error = error
        self.callback: Optional[Callable] = None

    async def get_current_location(self, high_accuracy: bool = True) -> LocationFix:
        if self.error is not None:
            raise self.error
        if self.fix is None:
            raise LocationSourceError("Location unavailable")
        return self.fix

    def start_watching(self, callback) -> None:
        self.callback = callback

    def stop_watching(self) -> None:
        self.callback = None

    def emit(self, fix: LocationFix):
        return self.callback(fix) if self.callback else None


class FakeClaimBackend:
    """In-memory claim backend recording every call."""

    def __init__(
        self,
        chain_id: int = HOME_CHAIN_ID,
        claimed_geohashes: tuple = (),
        not_ready: bool = False,
        claim_error: Optional[Exception] = None,
        wallet_error: Optional[Exception] = None,
    ):
        self.wallet = WalletInfo(address="0xrunner", chain_id=chain_id)
        self.claimed_geohashes = set(claimed_geohashes)
        self.not_ready = not_ready
        self.claim_error = claim_error
        self.wallet_error = wallet_error
        self.claims: List[TerritoryClaimData] = []
        self.cross_chain_requests: List[tuple] = []

    async def is_geohash_claimed(self, geohash: str) -> bool:
        if self.not_ready:
            raise ClaimBackendNotReadyError("Territory contract not ready")
        return geohash in self.claimed_geohashes

    async def get_wallet(self) -> WalletInfo:
        if self.wallet_error is not None:
            raise self.wallet_error
        return self.wallet

    async def claim_territory(self, data: TerritoryClaimData) -> str:
        if self.claim_error is not None:
            raise self.claim_error
        self.claims.append(data)
        self.claimed_geohashes.add(data.geohash)
        return f"0xtx{len(self.claims)}"

    async def request_cross_chain_claim(self, data: TerritoryClaimData, target_chain_id: int) -> None:
        self.cross_chain_requests.append((data, target_chain_id))


class RecordingEventBus(EventBus):
    """EventBus that also keeps every emitted (name, payload)."""

    def __init__(self):
        super().__init__()
        self.emitted: List[tuple[str, dict[str, Any]]] = []

    def emit(self, event: str, payload: Optional[dict[str, Any]] = None) -> None:
        self.emitted.append((event, payload or {}))
        super().emit(event, payload)

    def names(self) -> List[str]:
        return [name for name, _ in self.emitted]

    def payloads(self, event: str) -> List[dict[str, Any]]:
        return [payload for name, payload in self.emitted if name == event]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def clock():
    return ManualClock(START_MS)


@pytest.fixture
def event_bus():
    return RecordingEventBus()


@pytest.fixture
def make_fix():
    """Fix `north_m`/`east_m` meters from the origin, `step` intervals after start."""

    def _make(
        north_m: float = 0.0,
        east_m: float = 0.0,
        step: int = 0,
        accuracy_m: Optional[float] = 5.0,
        origin: tuple[float, float] = (ORIGIN_LAT, ORIGIN_LNG),
    ) -> LocationFix:
        lat, lng = offset(origin[0], origin[1], north_m, east_m)
        return LocationFix(
            lat=lat,
            lng=lng,
            timestamp_ms=START_MS + step * FIX_INTERVAL_MS,
            accuracy_m=accuracy_m,
        )

    return _make


@pytest.fixture
def square_loop(make_fix):
    """
    Fixes tracing a closed square (north, east, south, west back to start).

    The first fix is the start; the last one lands exactly on it.
    """

    def _loop(side_m: float = 160.0, step_m: float = 20.0, origin=(ORIGIN_LAT, ORIGIN_LNG)) -> List[LocationFix]:
        steps = int(side_m / step_m)
        offsets = [(0.0, 0.0)]
        for i in range(1, steps + 1):
            offsets.append((i * step_m, 0.0))
        for i in range(1, steps + 1):
            offsets.append((side_m, i * step_m))
        for i in range(1, steps + 1):
            offsets.append((side_m - i * step_m, side_m))
        for i in range(1, steps + 1):
            offsets.append((0.0, side_m - i * step_m))
        return [
            make_fix(north, east, step=n, origin=origin)
            for n, (north, east) in enumerate(offsets)
        ]

    return _loop


@pytest.fixture
def location_source():
    return FakeLocationSource()


@pytest.fixture
def claim_backend():
    return FakeClaimBackend()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def state(store):
    return StateRepository(store)


@pytest.fixture
def tracking_config():
    """Smoothing disabled so recorded points match the fed route."""
    return TrackingConfig(smoothing_factor=1.0)


@pytest.fixture
def tracker(location_source, event_bus, state, tracking_config, clock):
    return RunTracker(location_source, event_bus, state=state, config=tracking_config, clock=clock)


@pytest.fixture
def deriver(claim_backend):
    return TerritoryDeriver(claim_backend)


@pytest.fixture
def registry(deriver, claim_backend, event_bus, state, clock):
    return TerritoryRegistry(deriver, claim_backend, event_bus, state=state, clock=clock)


@pytest.fixture
def run_route(tracker, location_source, clock):
    """Record a full run over the given fixes and return the completed session."""

    def _run(fixes: List[LocationFix]):
        location_source.fix = fixes[0]
        asyncio.run(tracker.start_run())
        for fix in fixes[1:]:
            location_source.emit(fix)
        clock.advance(fixes[-1].timestamp_ms - fixes[0].timestamp_ms)
        return tracker.stop_run()

    return _run


@pytest.fixture
def loop_run(run_route, square_loop):
    """Completed, territory-eligible 640m loop."""
    return run_route(square_loop())


@pytest.fixture
def make_gpx():
    """GPX 1.1 track over the given fixes, one point every 5 seconds."""

    def _gpx(fixes: List[LocationFix], name: str = "Morning Loop") -> bytes:
        start = datetime(2024, 1, 1, 8, 0, 0, tzinfo=timezone.utc)
        trkpts = "\n".join(
            f'      <trkpt lat="{f.lat:.7f}" lon="{f.lng:.7f}">'
            f"<ele>10</ele>"
            f"<time>{(start + timedelta(seconds=5 * i)).strftime('%Y-%m-%dT%H:%M:%SZ')}</time>"
            f"</trkpt>"
            for i, f in enumerate(fixes)
        )
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="runrealm-tests" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <name>{name}</name>
    <trkseg>
{trkpts}
    </trkseg>
  </trk>
</gpx>""".encode("utf-8")

    return _gpx
