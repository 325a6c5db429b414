"""
Shared utilities (NOT business logic).

Usage:
    from runrealm.shared import haversine, EventBus
    from runrealm.shared.formatters import format_distance_km
"""
from .geo import (
    haversine,
    distance,
    bearing,
    compass_direction,
    direction_between,
    calculate_total_distance,
    envelope,
    EARTH_RADIUS_M,
)
from .formatters import (
    format_distance_km,
    format_duration_minutes,
    format_coordinate,
)
from .constants import (
    RunStatus,
    TerritoryStatus,
    IntentStatus,
    Rarity,
    ActivitySource,
)
from .clock import Clock, ManualClock, now_ms
from .events import EventBus

__all__ = [
    # geo
    "haversine",
    "distance",
    "bearing",
    "compass_direction",
    "direction_between",
    "calculate_total_distance",
    "envelope",
    "EARTH_RADIUS_M",
    # formatters
    "format_distance_km",
    "format_duration_minutes",
    "format_coordinate",
    # constants
    "RunStatus",
    "TerritoryStatus",
    "IntentStatus",
    "Rarity",
    "ActivitySource",
    # clock
    "Clock",
    "ManualClock",
    "now_ms",
    # events
    "EventBus",
]
