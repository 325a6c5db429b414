"""
Run Tracker

State machine for a single live run:

    start -> recording <-> paused -> completed
             recording|paused -> cancelled

Consumes location fixes while recording, filters and smooths them into
points/segments, keeps live stats, and decides territory eligibility when
the run is stopped. Completed runs are handed out as deep copies.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, List, Optional

from runrealm.integrations.interfaces import LocationSource, LocationSourceError
from runrealm.shared import events
from runrealm.shared.clock import Clock, now_ms
from runrealm.shared.constants import RunStatus
from runrealm.shared.events import EventBus

from . import eligibility, importer
from .config import TrackingConfig
from .exceptions import LocationUnavailableError, RunAlreadyInProgressError
from .filters import aggregate_segments, build_segment, check_admission, smooth
from .schemas import (
    ExternalActivity,
    LocationFix,
    RunLap,
    RunPoint,
    RunSession,
    RunStats,
)

if TYPE_CHECKING:
    from runrealm.storage.state import StateRepository

logger = logging.getLogger(__name__)


class RunTracker:
    """
    Live run tracking.

    Collaborators are injected; the tracker never touches territory state.

    Usage:
        tracker = RunTracker(location_source, bus, state=StateRepository(store))
        run_id = await tracker.start_run()
        tracker.process_location_update(fix)  # usually via start_watching
        completed = tracker.stop_run()
    """

    def __init__(
        self,
        location_source: LocationSource,
        event_bus: EventBus,
        state: Optional["StateRepository"] = None,
        config: TrackingConfig | None = None,
        clock: Clock = now_ms,
    ):
        self.location_source = location_source
        self.events = event_bus
        self.state = state
        self.config = config or TrackingConfig()
        self.clock = clock

        self.current_run: Optional[RunSession] = None
        self._last_point: Optional[RunPoint] = None
        self._last_lap_distance = 0.0
        self._last_lap_time = 0
        self._stats_task: Optional[asyncio.Task] = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start_run(self) -> str:
        """
        Start a new run from the current location.

        Returns:
            The new run id

        Raises:
            RunAlreadyInProgressError: A run is recording or paused
            LocationUnavailableError: No starting fix; no session is created
        """
        if self.current_run and self.current_run.status in (RunStatus.RECORDING, RunStatus.PAUSED):
            raise RunAlreadyInProgressError()

        try:
            fix = await self.location_source.get_current_location(True)
        except (LocationSourceError, asyncio.TimeoutError) as e:
            logger.error(f"Failed to start run: {e}")
            raise LocationUnavailableError(f"Failed to start run: {e}") from e

        start_point = RunPoint.from_fix(fix)
        run_id = importer.generate_run_id()

        self.current_run = RunSession(
            id=run_id,
            start_time=self.clock(),
            points=[start_point],
            status=RunStatus.RECORDING,
        )
        self._last_point = start_point
        self._last_lap_distance = 0.0
        self._last_lap_time = 0

        self.location_source.start_watching(self.process_location_update)
        self._start_stats_ticker()

        logger.info(f"Run {run_id} started at {start_point.lat:.5f},{start_point.lng:.5f}")
        self.events.emit(events.RUN_STARTED, {
            "run_id": run_id,
            "start_point": start_point,
            "timestamp": self.clock(),
        })
        self._emit_status_changed()
        return run_id

    async def start_run_with_route(
        self,
        coordinates: List[Any],
        distance: float,
    ) -> str:
        """Start a run and announce the planned route it follows."""
        run_id = await self.start_run()
        self.events.emit(events.RUN_PLANNED_ROUTE_ACTIVATED, {
            "run_id": run_id,
            "coordinates": coordinates,
            "distance": distance,
        })
        return run_id

    def pause_run(self) -> None:
        """Pause recording. No-op unless recording."""
        if not self.current_run or self.current_run.status != RunStatus.RECORDING:
            return

        self.current_run.status = RunStatus.PAUSED
        self.location_source.stop_watching()
        self._stop_stats_ticker()

        self.events.emit(events.RUN_PAUSED, {
            "run_id": self.current_run.id,
            "timestamp": self.clock(),
            "stats": self.get_current_stats(),
        })
        self._emit_status_changed()

    def resume_run(self) -> None:
        """Resume a paused run. No-op unless paused."""
        if not self.current_run or self.current_run.status != RunStatus.PAUSED:
            return

        self.current_run.status = RunStatus.RECORDING
        self.location_source.start_watching(self.process_location_update)
        self._start_stats_ticker()

        self.events.emit(events.RUN_RESUMED, {
            "run_id": self.current_run.id,
            "timestamp": self.clock(),
            "stats": self.get_current_stats(),
        })
        self._emit_status_changed()

    def record_lap(self) -> Optional[RunLap]:
        """Append a lap checkpoint. Only while recording."""
        run = self.current_run
        if not run or run.status != RunStatus.RECORDING:
            return None

        total_time = self.clock() - run.start_time
        lap = RunLap(
            lap_number=len(run.laps) + 1,
            time=total_time - self._last_lap_time,
            distance=run.total_distance - self._last_lap_distance,
            total_time=total_time,
        )
        run.laps.append(lap)

        self._last_lap_time = total_time
        self._last_lap_distance = run.total_distance

        self.events.emit(events.RUN_LAP, {"lap": lap, "run_id": run.id})
        return lap

    def stop_run(self) -> Optional[RunSession]:
        """
        Complete the run.

        Freezes duration, recomputes stats, evaluates eligibility and saves
        the run. Returns a deep copy, or None when there is nothing to stop.
        """
        run = self.current_run
        if not run or run.status.is_terminal:
            return None

        run.status = RunStatus.COMPLETED
        run.end_time = self.clock()
        run.total_duration = run.end_time - run.start_time

        self.location_source.stop_watching()
        self._stop_stats_ticker()

        self._update_stats()
        eligibility.apply(run, self.config)

        completed = run.model_copy(deep=True)
        logger.info(
            f"Run {completed.id} completed: {completed.total_distance:.0f}m in "
            f"{completed.total_duration / 1000:.0f}s, eligible={completed.territory_eligible}"
        )

        self.events.emit(events.RUN_COMPLETED, {
            "run": completed,
            "stats": self.get_current_stats(),
            "territory_eligible": completed.territory_eligible,
            "eligibility": completed.eligibility,
        })
        self._emit_status_changed()

        self._save_run(completed)
        return completed

    def cancel_run(self) -> None:
        """Discard the run without evaluating eligibility. Idempotent."""
        run = self.current_run
        if not run or run.status.is_terminal:
            return

        run.status = RunStatus.CANCELLED
        self.location_source.stop_watching()
        self._stop_stats_ticker()

        logger.info(f"Run {run.id} cancelled")
        self.events.emit(events.RUN_CANCELLED, {
            "run_id": run.id,
            "timestamp": self.clock(),
        })

        self.current_run = None
        self._last_point = None

    # =========================================================================
    # Location processing
    # =========================================================================

    def process_location_update(self, fix: LocationFix) -> Optional[RunPoint]:
        """
        Admit a fix into the active run.

        Returns:
            The accepted (smoothed) point, or None if the fix was dropped
        """
        run = self.current_run
        if not run or run.status != RunStatus.RECORDING:
            return None

        if check_admission(fix, self._last_point, self.config) is not None:
            return None

        point = smooth(self._last_point, fix, self.config.smoothing_factor)
        segment = build_segment(self._last_point, point)
        run.segments.append(segment)
        run.points.append(point)
        self._update_stats()
        self._last_point = point

        self.events.emit(events.RUN_POINT_ADDED, {
            "point": point,
            "segment": segment,
            "stats": self.get_current_stats(),
        })
        return point

    # =========================================================================
    # External activities
    # =========================================================================

    def import_external_activity(self, activity: ExternalActivity) -> RunSession:
        """
        Build a completed run from a pre-recorded activity.

        Independent of the live run; the live session is untouched.
        """
        session = importer.import_external_activity(activity, self.config)
        self._save_run(session)
        self.events.emit(events.RUN_IMPORTED, {
            "run": session,
            "source": activity.source.value,
        })
        return session.model_copy(deep=True)

    def import_gpx(self, content: bytes, name: str = "uploaded.gpx") -> RunSession:
        """Build a completed run from a GPX upload."""
        session = importer.import_gpx(content, self.config, name)
        self._save_run(session)
        self.events.emit(events.RUN_IMPORTED, {
            "run": session,
            "source": session.external_activity.source.value,
        })
        return session.model_copy(deep=True)

    # =========================================================================
    # Stats
    # =========================================================================

    def get_current_stats(self) -> Optional[RunStats]:
        run = self.current_run
        if not run:
            return None

        end = run.end_time if run.end_time is not None else self.clock()
        return RunStats(
            run_id=run.id,
            distance=run.total_distance,
            duration=end - run.start_time,
            average_speed=run.average_speed,
            max_speed=run.max_speed,
            point_count=len(run.points),
            segment_count=len(run.segments),
            lap_count=len(run.laps),
            status=run.status,
            territory_eligible=run.territory_eligible,
        )

    def get_current_run(self) -> Optional[RunSession]:
        """Snapshot of the current run (a copy, never the live object)."""
        return self.current_run.model_copy(deep=True) if self.current_run else None

    def _update_stats(self) -> None:
        run = self.current_run
        total_distance, average_speed, max_speed = aggregate_segments(run.segments)
        run.total_distance = total_distance
        if run.segments:
            run.average_speed = average_speed
            run.max_speed = max_speed

    def _emit_status_changed(self) -> None:
        self.events.emit(events.RUN_STATUS_CHANGED, {
            "status": self.current_run.status,
            "run_id": self.current_run.id,
            "stats": self.get_current_stats(),
        })

    # =========================================================================
    # Live stats ticker
    # =========================================================================

    def _start_stats_ticker(self) -> None:
        self._stop_stats_ticker()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; live stats ticker not started")
            return
        self._stats_task = loop.create_task(self._stats_loop())

    def _stop_stats_ticker(self) -> None:
        if self._stats_task is not None:
            self._stats_task.cancel()
            self._stats_task = None

    async def _stats_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.stats_interval_seconds)
            run = self.current_run
            if run and run.status == RunStatus.RECORDING:
                self.events.emit(events.RUN_STATS_UPDATED, {
                    "stats": self.get_current_stats(),
                    "run_id": run.id,
                })

    # =========================================================================
    # Persistence
    # =========================================================================

    def _save_run(self, session: RunSession) -> None:
        if self.state is None:
            return
        if not self.state.save_last_run(session):
            logger.warning(f"Run {session.id} was not saved")
