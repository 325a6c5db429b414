"""
Run tracking configuration.

Thresholds used by the admission filter and the eligibility check.
"""

from dataclasses import dataclass

from runrealm.config import Settings


@dataclass(frozen=True)
class TrackingConfig:
    """Configuration for fix admission and territory eligibility."""

    # Fixes with a worse reported accuracy are dropped (meters)
    min_accuracy: float = 20.0

    # Minimum gap between accepted fixes (ms)
    min_time_between_points: int = 1000

    # Minimum movement between accepted fixes (meters)
    min_distance_between_points: float = 5.0

    # Exponential smoothing weight for the new fix, 0..1
    smoothing_factor: float = 0.3

    # A run must cover at least this much to claim a territory (meters)
    territory_min_distance: float = 500.0

    # ...and end within this distance of its start (meters)
    territory_max_deviation: float = 50.0

    # Live stats emission period while recording (seconds)
    stats_interval_seconds: float = 2.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "TrackingConfig":
        return cls(
            min_accuracy=settings.min_accuracy_m,
            min_time_between_points=settings.min_point_interval_ms,
            min_distance_between_points=settings.min_distance_between_points_m,
            smoothing_factor=settings.smoothing_factor,
            territory_min_distance=settings.territory_min_distance_m,
            territory_max_deviation=settings.territory_max_deviation_m,
            stats_interval_seconds=settings.stats_interval_seconds,
        )
