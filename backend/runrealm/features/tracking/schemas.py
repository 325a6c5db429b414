"""
Run tracking schemas.

Pydantic models for location fixes, run points/segments/laps and sessions.
Distances are meters, durations milliseconds, speeds m/s, timestamps epoch ms.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from runrealm.shared.constants import ActivitySource, RunStatus


class LocationFix(BaseModel):
    """Raw sample from a location source. Accuracy may be missing or poor."""

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    timestamp_ms: int
    accuracy_m: Optional[float] = None
    altitude: Optional[float] = None
    speed_mps: Optional[float] = None


class RunPoint(BaseModel):
    """A fix accepted into a run (possibly smoothed)."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    timestamp: int
    accuracy: Optional[float] = None
    altitude: Optional[float] = None
    speed: Optional[float] = None

    @classmethod
    def from_fix(cls, fix: LocationFix) -> "RunPoint":
        return cls(
            lat=fix.lat,
            lng=fix.lng,
            timestamp=fix.timestamp_ms,
            accuracy=fix.accuracy_m,
            altitude=fix.altitude,
            speed=fix.speed_mps,
        )


class RunSegment(BaseModel):
    """Straight line between two consecutive run points."""

    model_config = ConfigDict(frozen=True)

    id: str
    start_point: RunPoint
    end_point: RunPoint
    distance: float
    duration: int
    average_speed: float
    geometry: dict[str, Any]


class RunLap(BaseModel):
    """Operator-triggered checkpoint."""

    model_config = ConfigDict(frozen=True)

    lap_number: int
    time: int  # ms since previous lap
    distance: float  # meters since previous lap
    total_time: int  # ms since run start


class ExternalActivity(BaseModel):
    """Pre-recorded activity from a fitness platform or GPX upload."""

    id: str
    source: ActivitySource
    name: str
    start_time: int
    distance: float
    duration: int
    polyline: Optional[str] = None
    average_speed: float = 0.0
    max_speed: Optional[float] = None
    elevation_gain: Optional[float] = None
    source_url: Optional[str] = None


class EligibilityResult(BaseModel):
    """
    Outcome of the territory eligibility check.

    Carries both measured and required values so the UI can explain
    why a run did not qualify.
    """

    eligible: bool
    meets_distance: bool
    is_loop: bool
    total_distance: float
    required_distance: float
    loop_deviation: Optional[float] = None
    allowed_deviation: float
    reason: Optional[str] = None


class RunSession(BaseModel):
    """
    Aggregate root for a single run.

    Owned by the RunTracker while active. Completed sessions are handed
    out as deep copies.
    """

    id: str
    start_time: int
    end_time: Optional[int] = None
    points: List[RunPoint] = Field(default_factory=list)
    segments: List[RunSegment] = Field(default_factory=list)
    laps: List[RunLap] = Field(default_factory=list)
    total_distance: float = 0.0
    total_duration: int = 0
    average_speed: float = 0.0
    max_speed: float = 0.0
    status: RunStatus = RunStatus.RECORDING
    territory_eligible: bool = False
    geohash: Optional[str] = None
    eligibility: Optional[EligibilityResult] = None
    external_activity: Optional[ExternalActivity] = None

    @property
    def first_point(self) -> Optional[RunPoint]:
        return self.points[0] if self.points else None


class RunStats(BaseModel):
    """Live statistics for the active run."""

    run_id: str
    distance: float
    duration: int
    average_speed: float
    max_speed: float
    point_count: int
    segment_count: int
    lap_count: int
    status: RunStatus
    territory_eligible: bool
