"""
GPS fix admission, smoothing and segment construction.

Admission order matters and mirrors what the tracker promises:
accuracy -> time gap -> movement -> smoothing.
"""

import logging
import uuid
from typing import Optional, Sequence

from runrealm.shared.geo import distance

from .config import TrackingConfig
from .schemas import LocationFix, RunPoint, RunSegment

logger = logging.getLogger(__name__)


REJECT_ACCURACY = "low_accuracy"
REJECT_TOO_SOON = "too_soon"
REJECT_TOO_CLOSE = "too_close"


def check_admission(
    fix: LocationFix,
    last_point: Optional[RunPoint],
    config: TrackingConfig,
) -> Optional[str]:
    """
    Decide whether a fix may become a run point.

    Args:
        fix: Incoming location fix
        last_point: Last accepted point, None for the first fix
        config: Tracking thresholds

    Returns:
        None if accepted, otherwise one of the REJECT_* reasons
    """
    if fix.accuracy_m is not None and fix.accuracy_m > config.min_accuracy:
        logger.info(f"Skipping inaccurate GPS reading: {fix.accuracy_m}m")
        return REJECT_ACCURACY

    if last_point is None:
        return None

    if fix.timestamp_ms - last_point.timestamp < config.min_time_between_points:
        logger.debug("Skipping GPS reading: too soon after previous point")
        return REJECT_TOO_SOON

    moved = distance(last_point, fix)
    if moved < config.min_distance_between_points:
        logger.debug(f"Skipping GPS reading: moved only {moved:.1f}m")
        return REJECT_TOO_CLOSE

    return None


def smooth(last_point: RunPoint, fix: LocationFix, factor: float) -> RunPoint:
    """
    Exponential smoothing of lat/lng towards the new fix.

    Timestamp and accuracy pass through unsmoothed.
    """
    return RunPoint(
        lat=last_point.lat + factor * (fix.lat - last_point.lat),
        lng=last_point.lng + factor * (fix.lng - last_point.lng),
        timestamp=fix.timestamp_ms,
        accuracy=fix.accuracy_m,
        altitude=fix.altitude,
        speed=fix.speed_mps,
    )


def generate_segment_id() -> str:
    return f"segment_{uuid.uuid4().hex[:12]}"


def build_segment(start: RunPoint, end: RunPoint) -> RunSegment:
    """Create the segment between two consecutive points."""
    length = distance(start, end)
    duration = end.timestamp - start.timestamp
    average_speed = length / (duration / 1000) if duration > 0 else 0.0

    return RunSegment(
        id=generate_segment_id(),
        start_point=start,
        end_point=end,
        distance=length,
        duration=duration,
        average_speed=average_speed,
        geometry={
            "type": "LineString",
            "coordinates": [
                [start.lng, start.lat],
                [end.lng, end.lat],
            ],
        },
    )


def build_segments(points: Sequence[RunPoint]) -> list[RunSegment]:
    """Pairwise segments for an already-ordered point list."""
    return [build_segment(points[i], points[i + 1]) for i in range(len(points) - 1)]


def aggregate_segments(segments: Sequence[RunSegment]) -> tuple[float, float, float]:
    """
    Recompute run totals from scratch.

    Average speed is the unweighted mean of segment speeds.

    Returns:
        (total_distance, average_speed, max_speed)
    """
    total_distance = sum(s.distance for s in segments)
    if not segments:
        return total_distance, 0.0, 0.0

    speeds = [s.average_speed for s in segments]
    return total_distance, sum(speeds) / len(speeds), max(speeds)
