"""
Territory Deriver

RunSession -> Territory pipeline:
1. validate run data (>= 2 points, eligible region id)
2. bounds + center
3. difficulty -> rarity -> reward
4. landmarks -> name/description
5. uniqueness: no overlap with claimed territories, geohash not claimed
6. Territory in `claimable` status

The deriver never mutates the session it is given.
"""

import logging
import uuid
from typing import Iterable, List, Optional

from runrealm.features.tracking.schemas import RunSession
from runrealm.integrations.interfaces import ClaimBackend, ClaimBackendError
from runrealm.shared.constants import TerritoryStatus
from runrealm.shared.formatters import (
    format_coordinate,
    format_distance_km,
    format_duration_minutes,
)

from .exceptions import (
    InvalidRunDataError,
    TerritoryAlreadyClaimedError,
    TerritoryOverlapError,
)
from .geometry import bounds_overlap, compute_bounds
from .landmarks import LandmarkProvider, StaticLandmarkProvider
from .schemas import RunSummary, Territory, TerritoryBounds, TerritoryMetadata
from .scoring import calculate_difficulty, calculate_rarity, calculate_reward

logger = logging.getLogger(__name__)


def generate_territory_id() -> str:
    return f"territory_{uuid.uuid4().hex[:12]}"


class TerritoryDeriver:
    """
    Derives territories from completed runs.

    Usage:
        deriver = TerritoryDeriver(claim_backend)
        territory = await deriver.derive(run, claimed_territories)
    """

    def __init__(
        self,
        claim_backend: Optional[ClaimBackend] = None,
        landmark_provider: Optional[LandmarkProvider] = None,
    ):
        self.claim_backend = claim_backend
        self.landmark_provider = landmark_provider or StaticLandmarkProvider()

    async def derive(
        self,
        session: RunSession,
        claimed: Iterable[Territory] = (),
    ) -> Territory:
        """
        Build a claimable territory from an eligible run.

        Args:
            session: Completed, eligible run
            claimed: Territories already held by the registry

        Raises:
            InvalidRunDataError: Fewer than 2 points or no region id
            TerritoryOverlapError: Bounds intersect a claimed territory
            TerritoryAlreadyClaimedError: Backend reports the geohash as taken
        """
        if not session.geohash or len(session.points) < 2:
            raise InvalidRunDataError()

        bounds = compute_bounds(session.points)
        metadata = self.build_metadata(
            distance=session.total_distance,
            duration=session.total_duration,
            average_speed=session.average_speed,
            bounds=bounds,
        )

        if self.find_conflicts(bounds, claimed):
            raise TerritoryOverlapError()

        if not await self.is_geohash_available(session.geohash):
            raise TerritoryAlreadyClaimedError()

        territory = Territory(
            id=generate_territory_id(),
            geohash=session.geohash,
            bounds=bounds,
            metadata=metadata,
            run_data=RunSummary(
                distance=session.total_distance,
                duration=session.total_duration,
                average_speed=session.average_speed,
                point_count=len(session.points),
            ),
            status=TerritoryStatus.CLAIMABLE,
            run_id=session.id,
        )
        logger.info(
            f"Derived territory {territory.id} from run {session.id}: "
            f"difficulty={metadata.difficulty}, rarity={metadata.rarity.value}"
        )
        return territory

    def build_metadata(
        self,
        distance: float,
        duration: int,
        average_speed: float,
        bounds: TerritoryBounds,
    ) -> TerritoryMetadata:
        """Deterministic metadata from run stats (landmarks come from the provider)."""
        difficulty = calculate_difficulty(distance, average_speed, duration)
        rarity = calculate_rarity(
            difficulty,
            self.landmark_provider.is_special_location(bounds),
        )
        landmarks = self.landmark_provider.identify(bounds)

        return TerritoryMetadata(
            name=self._name(bounds, landmarks),
            description=self._description(distance, duration, difficulty, landmarks),
            landmarks=landmarks,
            difficulty=difficulty,
            rarity=rarity,
            estimated_reward=calculate_reward(difficulty, rarity),
        )

    @staticmethod
    def find_conflicts(
        bounds: TerritoryBounds,
        claimed: Iterable[Territory],
    ) -> List[Territory]:
        """Claimed territories whose bounds overlap the given bounds."""
        return [t for t in claimed if bounds_overlap(bounds, t.bounds)]

    async def is_geohash_available(self, geohash: str) -> bool:
        """
        Ask the claim backend whether the geohash is free.

        When the backend is missing, not ready or failing we assume the
        geohash is available; the contract rejects duplicates at mint time.
        """
        if self.claim_backend is None:
            logger.warning("No claim backend configured, cannot check territory availability")
            return True

        try:
            return not await self.claim_backend.is_geohash_claimed(geohash)
        except ClaimBackendError as e:
            logger.warning(f"Claim backend not ready, assuming {geohash} is available: {e}")
            return True
        except Exception as e:
            logger.error(f"Failed to check territory availability: {e}")
            return True

    @staticmethod
    def _name(bounds: TerritoryBounds, landmarks: List[str]) -> str:
        primary = landmarks[0] if landmarks else "Territory"
        return f"{primary} {format_coordinate(bounds.center.lat, bounds.center.lng)}"

    @staticmethod
    def _description(
        distance: float,
        duration: int,
        difficulty: int,
        landmarks: List[str],
    ) -> str:
        return (
            f"A {difficulty}/100 difficulty territory covering "
            f"{format_distance_km(distance)}, completed in "
            f"{format_duration_minutes(duration)}. "
            f"Features: {', '.join(landmarks)}."
        )
