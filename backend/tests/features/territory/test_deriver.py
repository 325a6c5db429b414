"""
Tests for deriving territories from completed runs.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from runrealm.features.territory import (
    InvalidRunDataError,
    LatLngPoint,
    StaticLandmarkProvider,
    TerritoryAlreadyClaimedError,
    TerritoryBounds,
    TerritoryDeriver,
    TerritoryOverlapError,
)
from runrealm.shared.constants import Rarity, TerritoryStatus


# =============================================================================
# Test Derive
# =============================================================================

class TestDerive:
    """Tests for TerritoryDeriver.derive."""

    def test_derive_from_loop(self, deriver, loop_run):
        """A loop run derives a claimable territory."""
        territory = asyncio.run(deriver.derive(loop_run))

        assert territory.status == TerritoryStatus.CLAIMABLE
        assert territory.geohash == loop_run.geohash
        assert territory.run_id == loop_run.id
        assert territory.owner is None
        assert territory.run_data.point_count == len(loop_run.points)
        assert territory.run_data.distance == loop_run.total_distance

    def test_bounds_cover_points(self, deriver, loop_run):
        """Every point lies inside the derived bounds."""
        bounds = asyncio.run(deriver.derive(loop_run)).bounds

        for point in loop_run.points:
            assert bounds.south <= point.lat <= bounds.north
            assert bounds.west <= point.lng <= bounds.east
        assert bounds.center.lat == pytest.approx((bounds.north + bounds.south) / 2)

    def test_metadata(self, deriver, loop_run):
        """Name, description and landmarks come from the run."""
        metadata = asyncio.run(deriver.derive(loop_run)).metadata

        assert 0 <= metadata.difficulty <= 100
        assert metadata.landmarks == ["Park", "Street", "Neighborhood"]
        assert metadata.name.startswith("Park ")
        assert "°N" in metadata.name and "°W" in metadata.name
        assert f"A {metadata.difficulty}/100 difficulty territory covering 0.6km" in metadata.description
        assert metadata.description.endswith("Features: Park, Street, Neighborhood.")

    def test_session_not_mutated(self, deriver, loop_run):
        """Deriving leaves the session untouched."""
        before = loop_run.model_dump()
        asyncio.run(deriver.derive(loop_run))
        assert loop_run.model_dump() == before

    def test_ids_are_unique(self, deriver, loop_run):
        """Each derivation gets a fresh id."""
        first = asyncio.run(deriver.derive(loop_run))
        second = asyncio.run(deriver.derive(loop_run))
        assert first.id != second.id

    def test_special_location_is_legendary(self, claim_backend, loop_run):
        """A special area makes the territory legendary and names it after the landmark."""
        everywhere = TerritoryBounds(
            north=90, south=-90, east=180, west=-180,
            center=LatLngPoint(lat=0, lng=0),
        )
        deriver = TerritoryDeriver(
            claim_backend,
            StaticLandmarkProvider(landmarks=["Central Park"], special_areas=[everywhere]),
        )

        territory = asyncio.run(deriver.derive(loop_run))

        assert territory.metadata.rarity == Rarity.LEGENDARY
        assert territory.metadata.name.startswith("Central Park ")


# =============================================================================
# Test Derivation Failures
# =============================================================================

class TestDeriveFailures:

    def test_single_point(self, deriver, loop_run):
        """One point is invalid run data."""
        run = loop_run.model_copy(update={"points": loop_run.points[:1]})
        with pytest.raises(InvalidRunDataError, match="Invalid run data"):
            asyncio.run(deriver.derive(run))

    def test_ineligible_run(self, deriver, loop_run):
        """Runs without a region id are invalid run data."""
        run = loop_run.model_copy(update={"geohash": None})
        with pytest.raises(InvalidRunDataError):
            asyncio.run(deriver.derive(run))

    def test_overlap_with_claimed(self, deriver, loop_run):
        """Overlapping an existing territory fails with its reason."""
        existing = asyncio.run(deriver.derive(loop_run))

        with pytest.raises(TerritoryOverlapError) as exc:
            asyncio.run(deriver.derive(loop_run, [existing]))

        assert exc.value.reason == "Territory overlaps with existing claimed territory"

    def test_geohash_already_claimed(self, deriver, claim_backend, loop_run):
        """A geohash claimed on the backend fails derivation."""
        claim_backend.claimed_geohashes.add(loop_run.geohash)

        with pytest.raises(TerritoryAlreadyClaimedError, match="already claimed"):
            asyncio.run(deriver.derive(loop_run))


# =============================================================================
# Test Availability
# =============================================================================

class TestAvailability:
    """Unreachable backends never block derivation."""

    def test_not_ready_assumed_available(self, deriver, claim_backend):
        """A backend that is not ready counts as available."""
        claim_backend.not_ready = True
        assert asyncio.run(deriver.is_geohash_available("abc")) is True

    def test_unexpected_error_assumed_available(self, deriver, claim_backend):
        """Unexpected backend errors count as available."""
        claim_backend.is_geohash_claimed = AsyncMock(side_effect=RuntimeError("rpc down"))
        assert asyncio.run(deriver.is_geohash_available("abc")) is True

    def test_no_backend_assumed_available(self):
        """No backend means available."""
        assert asyncio.run(TerritoryDeriver().is_geohash_available("abc")) is True

    def test_claimed_is_unavailable(self, deriver, claim_backend):
        """A claimed geohash is unavailable."""
        claim_backend.claimed_geohashes.add("abc")
        assert asyncio.run(deriver.is_geohash_available("abc")) is False
