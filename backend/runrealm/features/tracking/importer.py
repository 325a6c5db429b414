"""
External activity import.

Turns pre-recorded activities (encoded polylines from fitness platforms,
or uploaded GPX files) into completed RunSessions. Eligibility goes
through the same rules as live runs.
"""

import logging
import uuid
from typing import List, Optional, Tuple

import gpxpy
import gpxpy.gpx
import polyline

from runrealm.shared.constants import ActivitySource, RunStatus
from runrealm.shared.geo import calculate_total_distance

from . import eligibility
from .config import TrackingConfig
from .exceptions import ActivityImportError
from .filters import aggregate_segments, build_segments
from .schemas import ExternalActivity, RunPoint, RunSession

logger = logging.getLogger(__name__)

POLYLINE_PRECISION = 5


def generate_run_id() -> str:
    return f"run_{uuid.uuid4().hex[:12]}"


def decode_polyline_to_points(encoded: Optional[str]) -> List[RunPoint]:
    """
    Decode an encoded polyline into run points.

    Timestamps are unknown for polylines and are set to 0.
    """
    if not encoded:
        return []

    try:
        coordinates = polyline.decode(encoded, POLYLINE_PRECISION)
    except (ValueError, IndexError, TypeError) as e:
        raise ActivityImportError(f"Invalid polyline: {e}") from e

    return [RunPoint(lat=lat, lng=lng, timestamp=0) for lat, lng in coordinates]


def build_imported_session(
    activity: ExternalActivity,
    points: List[RunPoint],
    config: TrackingConfig,
) -> RunSession:
    """
    Build a completed session from an activity and its decoded points.

    Total distance is recomputed from the synthesized segments so that
    eligibility matches a live run over the same points. Speeds come from
    the segments when they carry timing, otherwise from the activity.
    """
    segments = build_segments(points)
    total_distance, average_speed, max_speed = aggregate_segments(segments)

    if not any(s.duration > 0 for s in segments):
        average_speed = activity.average_speed
        max_speed = activity.max_speed or activity.average_speed

    session = RunSession(
        id=generate_run_id(),
        start_time=activity.start_time,
        end_time=activity.start_time + activity.duration,
        points=points,
        segments=segments,
        total_distance=total_distance,
        total_duration=activity.duration,
        average_speed=average_speed,
        max_speed=max_speed,
        status=RunStatus.COMPLETED,
        external_activity=activity,
    )
    return eligibility.apply(session, config)


def import_external_activity(
    activity: ExternalActivity,
    config: TrackingConfig,
) -> RunSession:
    """Decode the activity polyline and build a completed session."""
    points = decode_polyline_to_points(activity.polyline)
    session = build_imported_session(activity, points, config)
    logger.info(
        f"Imported {activity.source.value} activity {activity.id}: "
        f"{len(points)} points, {session.total_distance:.0f}m, "
        f"eligible={session.territory_eligible}"
    )
    return session


def parse_gpx(content: bytes, name: str = "uploaded.gpx") -> Tuple[ExternalActivity, List[RunPoint]]:
    """
    Parse GPX content into an activity description and its points.

    Args:
        content: GPX file content as bytes
        name: Fallback activity name

    Returns:
        (ExternalActivity, points)

    Raises:
        ActivityImportError: If GPX is invalid or has no points
    """
    try:
        gpx = gpxpy.parse(content.decode('utf-8'))
    except Exception as e:
        logger.error(f"Failed to parse GPX: {e}")
        raise ActivityImportError(f"Invalid GPX file: {e}") from e

    raw: List[gpxpy.gpx.GPXTrackPoint] = []
    for track in gpx.tracks:
        for segment in track.segments:
            raw.extend(segment.points)

    # From routes (if no tracks)
    if not raw:
        for route in gpx.routes:
            raw.extend(route.points)

    if not raw:
        raise ActivityImportError("GPX file contains no track or route points")

    points = [
        RunPoint(
            lat=p.latitude,
            lng=p.longitude,
            timestamp=int(p.time.timestamp() * 1000) if p.time else 0,
            altitude=p.elevation,
        )
        for p in raw
    ]

    start_time = points[0].timestamp
    duration = max(0, points[-1].timestamp - start_time)
    track_name = gpx.name or (gpx.tracks[0].name if gpx.tracks else None)

    activity = ExternalActivity(
        id=f"gpx_{uuid.uuid4().hex[:12]}",
        source=ActivitySource.GPX,
        name=track_name or name,
        start_time=start_time,
        distance=calculate_total_distance(points),
        duration=duration,
    )
    return activity, points


def import_gpx(content: bytes, config: TrackingConfig, name: str = "uploaded.gpx") -> RunSession:
    """Parse a GPX upload and build a completed session."""
    activity, points = parse_gpx(content, name)
    session = build_imported_session(activity, points, config)
    average_speed = (
        session.total_distance / (session.total_duration / 1000)
        if session.total_duration > 0 else 0.0
    )
    session.external_activity = activity.model_copy(update={"average_speed": average_speed})
    logger.info(
        f"Imported GPX '{activity.name}': {len(points)} points, "
        f"{session.total_distance:.0f}m, eligible={session.territory_eligible}"
    )
    return session
