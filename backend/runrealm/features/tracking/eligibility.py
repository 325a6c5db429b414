"""
Territory eligibility rules.

A run qualifies when it is long enough AND closes a loop (ends near its
start). Live runs and imported activities both go through `evaluate`, so
the same point sequence always gets the same answer.
"""

from typing import Sequence

from runrealm.shared.geo import distance

from .config import TrackingConfig
from .schemas import EligibilityResult, RunPoint, RunSession


def evaluate(
    points: Sequence[RunPoint],
    total_distance: float,
    config: TrackingConfig,
) -> EligibilityResult:
    """
    Check distance and loop requirements.

    Args:
        points: Ordered run points
        total_distance: Sum of segment distances (meters)
        config: Tracking thresholds

    Returns:
        EligibilityResult with measured vs required values
    """
    meets_distance = total_distance >= config.territory_min_distance

    if len(points) < 2:
        return EligibilityResult(
            eligible=False,
            meets_distance=meets_distance,
            is_loop=False,
            total_distance=total_distance,
            required_distance=config.territory_min_distance,
            loop_deviation=None,
            allowed_deviation=config.territory_max_deviation,
            reason="Run needs at least two recorded points",
        )

    deviation = distance(points[0], points[-1])
    is_loop = deviation <= config.territory_max_deviation

    reasons = []
    if not meets_distance:
        reasons.append(
            f"Distance {total_distance:.0f}m is below the required "
            f"{config.territory_min_distance:.0f}m"
        )
    if not is_loop:
        reasons.append(
            f"Run ended {deviation:.0f}m from its start, more than the allowed "
            f"{config.territory_max_deviation:.0f}m"
        )

    return EligibilityResult(
        eligible=meets_distance and is_loop,
        meets_distance=meets_distance,
        is_loop=is_loop,
        total_distance=total_distance,
        required_distance=config.territory_min_distance,
        loop_deviation=deviation,
        allowed_deviation=config.territory_max_deviation,
        reason="; ".join(reasons) or None,
    )


def session_region_id(start_point: RunPoint, created_at_ms: int) -> str:
    """
    Session-unique region id for an eligible run.

    NOT a real geohash: it has no spatial-prefix property. It only has to be
    unique within this process, so rounded start coordinates plus the
    session creation time are enough.
    """
    return f"{start_point.lat:.4f}_{start_point.lng:.4f}_{created_at_ms}"


def apply(session: RunSession, config: TrackingConfig) -> RunSession:
    """Evaluate eligibility and stamp the result onto the session."""
    result = evaluate(session.points, session.total_distance, config)
    session.eligibility = result
    session.territory_eligible = result.eligible
    session.geohash = (
        session_region_id(session.first_point, session.start_time)
        if result.eligible else None
    )
    return session
