"""
Territory Registry

Single owner of claimed territories and territory intents:
- intents: create / list active (lazy expiry) / cancel / fulfil from runs
- claims: handshake with the claim backend, including the asynchronous
  cross-chain path confirmed later by geohash
- proximity: claimed territories near the current location

Only the registry writes Territory.status and TerritoryIntent.status.
"""

import logging
import uuid
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from runrealm.features.tracking.schemas import RunSession
from runrealm.integrations.interfaces import ClaimBackend, TerritoryClaimData
from runrealm.shared import events
from runrealm.shared.clock import MS_PER_HOUR, Clock, now_ms
from runrealm.shared.constants import (
    CROSS_CHAIN_PENDING_TX,
    IntentStatus,
    TerritoryStatus,
)
from runrealm.shared.events import EventBus
from runrealm.shared.geo import LatLng, direction_between, distance

from .deriver import TerritoryDeriver
from .exceptions import TerritoryDerivationError
from .geometry import bounds_geohash, bounds_overlap, compute_bounds
from .schemas import (
    ClaimResult,
    CrossChainEntry,
    LatLngPoint,
    NearbyTerritory,
    Territory,
    TerritoryBounds,
    TerritoryIntent,
    TerritoryPreview,
)

if TYPE_CHECKING:
    from runrealm.storage.state import StateRepository

logger = logging.getLogger(__name__)

ELIGIBLE_MESSAGE = "Congratulations! Your run qualifies for territory claiming."
CONFLICT_PENALTY = 25


def generate_intent_id() -> str:
    return f"intent_{uuid.uuid4().hex[:12]}"


class TerritoryRegistry:
    """
    Store and claim orchestration for territories.

    Usage:
        registry = TerritoryRegistry(deriver, claim_backend, bus, state=state)
        result = await registry.claim_run(completed_run)
        nearby = registry.update_proximity(current_location)
    """

    def __init__(
        self,
        deriver: TerritoryDeriver,
        claim_backend: ClaimBackend,
        event_bus: EventBus,
        state: Optional["StateRepository"] = None,
        proximity_threshold: float = 100.0,
        intent_expiry_hours: int = 24,
        home_chain_id: int = 7001,
        clock: Clock = now_ms,
    ):
        self.deriver = deriver
        self.claim_backend = claim_backend
        self.events = event_bus
        self.state = state
        self.proximity_threshold = proximity_threshold
        self.intent_expiry_ms = intent_expiry_hours * MS_PER_HOUR
        self.home_chain_id = home_chain_id
        self.clock = clock

        self._territories: Dict[str, Territory] = {}
        self._intents: Dict[str, TerritoryIntent] = {}
        self._load()

    # =========================================================================
    # Intents
    # =========================================================================

    def create_intent(
        self,
        bounds: TerritoryBounds,
        planned_route: Optional[Sequence[LatLng]] = None,
        estimated_distance: Optional[float] = None,
        estimated_duration: Optional[int] = None,
    ) -> TerritoryIntent:
        """Reserve an area before running it. Expires after intent_expiry_hours."""
        distance_m = estimated_distance or 0.0
        duration_ms = estimated_duration or 0
        average_speed = distance_m / (duration_ms / 1000) if distance_m and duration_ms else 0.0

        metadata = self.deriver.build_metadata(
            distance=distance_m,
            duration=duration_ms,
            average_speed=average_speed,
            bounds=bounds,
        )

        now = self.clock()
        intent = TerritoryIntent(
            id=generate_intent_id(),
            bounds=bounds,
            geohash=bounds_geohash(bounds),
            metadata=metadata,
            created_at=now,
            expires_at=now + self.intent_expiry_ms,
            planned_route=(
                [LatLngPoint(lat=p.lat, lng=p.lng) for p in planned_route]
                if planned_route else None
            ),
            estimated_distance=distance_m,
            estimated_duration=duration_ms,
            status=IntentStatus.ACTIVE,
        )

        self._intents[intent.id] = intent
        self._save_intents()

        logger.info(f"Territory intent {intent.id} created, expires at {intent.expires_at}")
        self.events.emit(events.TERRITORY_INTENT_CREATED, {"intent": intent})
        return intent

    def get_active_intents(self) -> List[TerritoryIntent]:
        """
        Active, unexpired intents, earliest-created first.

        Intents past expires_at are moved to `expired` on the way.
        """
        now = self.clock()
        active: List[TerritoryIntent] = []
        changed = False

        for intent in self._ordered_intents():
            if intent.status != IntentStatus.ACTIVE:
                continue
            if intent.expires_at > now:
                active.append(intent)
            else:
                intent.status = IntentStatus.EXPIRED
                changed = True
                logger.info(f"Territory intent {intent.id} expired")

        if changed:
            self._save_intents()

        return active

    def get_intent(self, intent_id: str) -> Optional[TerritoryIntent]:
        return self._intents.get(intent_id)

    def cancel_intent(self, intent_id: str) -> bool:
        """
        Cancel an active intent.

        Returns:
            False if the intent does not exist or already completed/expired.
            Cancelling twice is a no-op that still returns True.
        """
        intent = self._intents.get(intent_id)
        if not intent:
            return False

        if intent.status == IntentStatus.CANCELLED:
            return True

        if intent.status != IntentStatus.ACTIVE:
            logger.info(f"Intent {intent_id} is {intent.status.value}, not cancelling")
            return False

        intent.status = IntentStatus.CANCELLED
        self._save_intents()

        self.events.emit(events.TERRITORY_INTENT_CANCELLED, {
            "intent": intent,
            "message": f"Intent {intent_id} was cancelled by user",
        })
        return True

    async def fulfill_intent_if_matched(
        self,
        session: RunSession,
        territory: Optional[Territory] = None,
    ) -> Optional[ClaimResult]:
        """
        Turn the first matching active intent into a claimed territory.

        Candidates are tried earliest-created first; only the first intent
        whose bounds overlap the run's bounds is fulfilled. Runs that are
        not territory eligible never fulfil an intent.

        Args:
            session: Completed run
            territory: Territory already derived from session, if any

        Returns:
            The claim result, or None if no intent matched
        """
        if not session.territory_eligible or not session.geohash or not session.points:
            return None

        run_bounds = compute_bounds(session.points)
        match = next(
            (i for i in self.get_active_intents() if bounds_overlap(run_bounds, i.bounds)),
            None,
        )
        if match is None:
            return None

        if territory is None:
            try:
                territory = await self._derive(session)
            except TerritoryDerivationError as e:
                return self._derivation_failed(e, run_id=session.id)

        match.status = IntentStatus.COMPLETED
        self._save_intents()
        territory = territory.model_copy(update={"intent_id": match.id})

        logger.info(f"Run {session.id} fulfilled territory intent {match.id}")
        self.events.emit(events.TERRITORY_INTENT_FULFILLED, {
            "intent": match,
            "territory": territory,
        })
        return await self.request_claim(territory)

    # =========================================================================
    # Runs -> territories
    # =========================================================================

    async def process_completed_run(self, session: RunSession) -> Optional[Territory]:
        """
        Announce an eligible run's territory, then try to fulfil intents.

        Returns:
            The run's territory as stored after intent fulfilment (claimed
            or pending when an intent matched, otherwise claimable), or None
            for ineligible runs and failed derivations
        """
        if not session.territory_eligible or not session.geohash:
            return None

        try:
            territory = await self._derive(session)
        except TerritoryDerivationError as e:
            self._derivation_failed(e, run_id=session.id)
            return None

        self.events.emit(events.TERRITORY_ELIGIBLE, {
            "territory": territory,
            "run": session,
            "message": ELIGIBLE_MESSAGE,
        })

        result = await self.fulfill_intent_if_matched(session, territory)
        if result is not None and result.territory is not None:
            return result.territory
        return territory

    async def claim_run(self, session: RunSession) -> ClaimResult:
        """Derive a territory from a completed run and claim it."""
        if not session.territory_eligible or not session.geohash:
            reason = "Run not eligible for territory claiming"
            if session.eligibility and session.eligibility.reason:
                reason = f"{reason}: {session.eligibility.reason}"
            return self._derivation_failed(TerritoryDerivationError(reason), run_id=session.id)

        territory = self._find_retryable(session.geohash)
        if territory is None:
            try:
                territory = await self._derive(session)
            except TerritoryDerivationError as e:
                return self._derivation_failed(e, run_id=session.id)

        return await self.request_claim(territory)

    async def claim_external_activity(self, session: RunSession) -> ClaimResult:
        """Claim from an imported activity, crediting its source."""
        if not session.territory_eligible or not session.geohash:
            return ClaimResult(
                success=False,
                error="Activity not eligible for territory claiming",
            )

        retry = self._find_retryable(session.geohash)
        if retry is not None:
            return await self.request_claim(retry)

        try:
            territory = await self._derive(session)
        except TerritoryDerivationError as e:
            return self._derivation_failed(e, run_id=session.id)

        activity = session.external_activity
        if activity:
            metadata = territory.metadata.model_copy(update={
                "description": (
                    f"Territory claimed from {activity.source.value} activity: {activity.name}"
                ),
                "landmarks": [*territory.metadata.landmarks, f"Source: {activity.source.value}"],
            })
            territory = territory.model_copy(update={"metadata": metadata})

        return await self.request_claim(territory)

    # =========================================================================
    # Claim handshake
    # =========================================================================

    async def request_claim(self, territory: Territory) -> ClaimResult:
        """
        Claim a territory through the claim backend.

        Home chain: minted directly, stored as `claimed`.
        Other chains: relayed; stored as `claimable` + is_cross_chain until a
        confirmation/failure arrives for its geohash.
        Any backend failure leaves the territory `claimable` and passes the
        error message through unchanged.
        """
        existing = self._territories.get(territory.id)
        if existing and existing.status == TerritoryStatus.CLAIMED:
            return ClaimResult(success=False, territory=existing, error="Territory already claimed")

        try:
            wallet = await self.claim_backend.get_wallet()
            data = TerritoryClaimData(
                geohash=territory.geohash,
                difficulty=territory.metadata.difficulty,
                distance=territory.run_data.distance,
                landmarks=territory.metadata.landmarks,
            )

            if wallet.chain_id != self.home_chain_id:
                data.origin_chain_id = wallet.chain_id
                data.origin_address = wallet.address
                await self.claim_backend.request_cross_chain_claim(data, self.home_chain_id)

                pending = territory.model_copy(deep=True, update={
                    "status": TerritoryStatus.CLAIMABLE,
                    "is_cross_chain": True,
                    "source_chain_id": wallet.chain_id,
                    "cross_chain_history": [
                        *territory.cross_chain_history,
                        CrossChainEntry(chain_id=wallet.chain_id, timestamp=self.clock()),
                    ],
                })
                self._territories[pending.id] = pending
                self._save_territories()

                logger.info(
                    f"Cross-chain claim for {pending.geohash} requested from chain {wallet.chain_id}"
                )
                self.events.emit(events.CROSS_CHAIN_CLAIM_REQUESTED, {
                    "territory_data": data,
                    "target_chain_id": self.home_chain_id,
                })
                return ClaimResult(
                    success=True,
                    territory=pending,
                    transaction_hash=CROSS_CHAIN_PENDING_TX,
                )

            transaction_hash = await self.claim_backend.claim_territory(data)

        except Exception as e:
            logger.error(f"Territory claiming failed: {e}")
            rolled_back = territory.model_copy(update={"status": TerritoryStatus.CLAIMABLE})
            self.events.emit(events.TERRITORY_CLAIM_FAILED, {
                "territory": rolled_back,
                "error": str(e) or "Unknown error occurred",
            })
            return ClaimResult(
                success=False,
                territory=rolled_back,
                error=str(e) or "Unknown error occurred",
            )

        claimed = territory.model_copy(deep=True, update={
            "status": TerritoryStatus.CLAIMED,
            "owner": wallet.address,
            "claimed_at": self.clock(),
            "transaction_hash": transaction_hash,
            "chain_id": wallet.chain_id,
        })
        self._territories[claimed.id] = claimed
        self._save_territories()

        logger.info(f"Territory {claimed.id} claimed: tx {transaction_hash}")
        self.events.emit(events.TERRITORY_CLAIMED, {
            "territory": claimed,
            "transaction_hash": transaction_hash,
        })
        return ClaimResult(success=True, territory=claimed, transaction_hash=transaction_hash)

    def handle_cross_chain_confirmation(
        self,
        geohash: str,
        transaction_hash: str,
        origin_chain_id: Optional[int] = None,
        owner: Optional[str] = None,
    ) -> Optional[Territory]:
        """Mark the pending cross-chain territory for geohash as claimed."""
        pending = self._find_pending_cross_chain(geohash)
        if pending is None:
            logger.warning(f"No pending cross-chain territory for confirmation of {geohash}")
            return None

        history = [entry.model_copy() for entry in pending.cross_chain_history]
        if history:
            history[-1].transaction_hash = transaction_hash

        confirmed = pending.model_copy(update={
            "status": TerritoryStatus.CLAIMED,
            "transaction_hash": transaction_hash,
            "cross_chain_claim_tx_hash": transaction_hash,
            "chain_id": self.home_chain_id,
            "owner": owner or pending.owner,
            "claimed_at": self.clock(),
            "cross_chain_history": history,
        })
        self._territories[confirmed.id] = confirmed
        self._save_territories()

        logger.info(f"Cross-chain territory claim for {geohash} confirmed: tx {transaction_hash}")
        self.events.emit(events.TERRITORY_CLAIMED, {
            "territory": confirmed,
            "transaction_hash": transaction_hash,
            "is_cross_chain": True,
            "source_chain_id": origin_chain_id or pending.source_chain_id,
        })
        return confirmed

    def handle_cross_chain_failure(self, geohash: str, error: str) -> Optional[Territory]:
        """Roll the pending cross-chain territory for geohash back to claimable."""
        pending = self._find_pending_cross_chain(geohash)
        if pending is None:
            logger.warning(f"No pending cross-chain territory for failure of {geohash}")
            return None

        history = list(pending.cross_chain_history)
        if history and not history[-1].transaction_hash:
            history.pop()

        failed = pending.model_copy(update={
            "status": TerritoryStatus.CLAIMABLE,
            "is_cross_chain": False,
            "cross_chain_history": history,
        })
        self._territories[failed.id] = failed
        self._save_territories()

        logger.info(f"Cross-chain territory claim for {geohash} failed: {error}")
        self.events.emit(events.TERRITORY_CLAIM_FAILED, {
            "territory": failed,
            "error": error,
            "is_cross_chain": True,
        })
        return failed

    # =========================================================================
    # Queries
    # =========================================================================

    def get_claimed_territories(self) -> List[Territory]:
        """Every stored territory, including pending cross-chain claims."""
        return list(self._territories.values())

    def get_territory(self, territory_id: str) -> Optional[Territory]:
        return self._territories.get(territory_id)

    def update_proximity(self, location: LatLng) -> List[NearbyTerritory]:
        """
        Claimed territories within proximity_threshold of location.

        Recomputed on every call, nearest first.
        """
        nearby: List[NearbyTerritory] = []

        for territory in self._territories.values():
            if territory.status != TerritoryStatus.CLAIMED:
                continue
            center = territory.bounds.center
            meters = distance(location, center)
            if meters <= self.proximity_threshold:
                nearby.append(NearbyTerritory(
                    territory=territory,
                    distance=meters,
                    direction=direction_between(location, center),
                ))

        nearby.sort(key=lambda n: n.distance)

        self.events.emit(events.TERRITORY_NEARBY_UPDATED, {
            "count": len(nearby),
            "territories": nearby,
        })
        return nearby

    async def get_territory_preview(self, bounds: TerritoryBounds) -> TerritoryPreview:
        """What a claim over bounds would look like right now."""
        geohash = bounds_geohash(bounds)
        is_available = await self.deriver.is_geohash_available(geohash)
        metadata = self.deriver.build_metadata(
            distance=0.0,
            duration=0,
            average_speed=0.0,
            bounds=bounds,
        )
        conflicts = self.deriver.find_conflicts(bounds, self._territories.values())

        if not is_available:
            claimability = 0
        elif not conflicts:
            claimability = 100
        else:
            claimability = max(0, 100 - len(conflicts) * CONFLICT_PENALTY)

        return TerritoryPreview(
            bounds=bounds,
            geohash=geohash,
            metadata=metadata,
            is_available=is_available,
            conflicting_territories=conflicts,
            estimated_claimability=claimability,
        )

    # =========================================================================
    # Internals
    # =========================================================================

    async def _derive(self, session: RunSession) -> Territory:
        return await self.deriver.derive(session, self._territories.values())

    def _derivation_failed(
        self,
        error: TerritoryDerivationError,
        run_id: Optional[str] = None,
    ) -> ClaimResult:
        logger.info(f"Territory derivation failed for run {run_id}: {error.reason}")
        self.events.emit(events.TERRITORY_CLAIM_FAILED, {
            "territory": None,
            "error": error.reason,
            "run_id": run_id,
        })
        return ClaimResult(success=False, error=error.reason)

    def _find_pending_cross_chain(self, geohash: str) -> Optional[Territory]:
        for territory in self._territories.values():
            if (
                territory.geohash == geohash
                and territory.is_cross_chain
                and territory.status == TerritoryStatus.CLAIMABLE
            ):
                return territory
        return None

    def _find_retryable(self, geohash: str) -> Optional[Territory]:
        """Stored territory left claimable by a failed cross-chain claim."""
        for territory in self._territories.values():
            if (
                territory.geohash == geohash
                and territory.status == TerritoryStatus.CLAIMABLE
                and not territory.is_cross_chain
            ):
                return territory
        return None

    def _ordered_intents(self) -> List[TerritoryIntent]:
        return sorted(self._intents.values(), key=lambda i: (i.created_at, i.id))

    def _load(self) -> None:
        if self.state is None:
            return
        self._territories = {t.id: t for t in self.state.load_territories()}
        self._intents = self.state.load_intents()
        logger.info(
            f"Loaded {len(self._territories)} territories and {len(self._intents)} intents"
        )
        self.get_active_intents()

    def _save_territories(self) -> None:
        if self.state is not None:
            self.state.save_territories(list(self._territories.values()))

    def _save_intents(self) -> None:
        if self.state is not None:
            self.state.save_intents(self._intents)
