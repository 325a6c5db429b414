"""
Run tracking module.

Usage:
    from runrealm.features.tracking import RunTracker, TrackingConfig
    from runrealm.features.tracking import RunSession, LocationFix

Components:
- RunTracker: live run state machine (start/pause/resume/lap/stop/cancel)
- TrackingConfig: admission and eligibility thresholds
- eligibility: distance + loop rules shared by live and imported runs
- importer: polyline / GPX activity import
"""

from .schemas import (
    EligibilityResult,
    ExternalActivity,
    LocationFix,
    RunLap,
    RunPoint,
    RunSegment,
    RunSession,
    RunStats,
)
from .config import TrackingConfig
from .exceptions import (
    ActivityImportError,
    LocationUnavailableError,
    RunAlreadyInProgressError,
    RunTrackingError,
)
from .service import RunTracker

__all__ = [
    # Schemas
    "EligibilityResult",
    "ExternalActivity",
    "LocationFix",
    "RunLap",
    "RunPoint",
    "RunSegment",
    "RunSession",
    "RunStats",
    # Config
    "TrackingConfig",
    # Errors
    "ActivityImportError",
    "LocationUnavailableError",
    "RunAlreadyInProgressError",
    "RunTrackingError",
    # Service
    "RunTracker",
]
