"""
Territory scoring rules.

Difficulty (0-100) combines three capped components:
- distance: 40 points at 5 km
- pace:     30 points at 5 m/s average
- duration: 30 points at 1 hour
"""

from runrealm.shared.clock import MS_PER_HOUR
from runrealm.shared.constants import RARITY_MULTIPLIERS, Rarity

FULL_CREDIT_DISTANCE_M = 5000.0
FULL_CREDIT_SPEED_MPS = 5.0
FULL_CREDIT_DURATION_MS = float(MS_PER_HOUR)

DISTANCE_WEIGHT = 40
SPEED_WEIGHT = 30
DURATION_WEIGHT = 30

LEGENDARY_THRESHOLD = 90
EPIC_THRESHOLD = 70
RARE_THRESHOLD = 50


def _component(value: float, full_credit: float, weight: int) -> float:
    return min(max(value, 0.0) / full_credit, 1.0) * weight


def calculate_difficulty(
    distance_m: float,
    average_speed_mps: float,
    duration_ms: float,
) -> int:
    """
    Difficulty score.

    Monotonic in each input and clamped to [0, 100].
    """
    score = (
        _component(distance_m, FULL_CREDIT_DISTANCE_M, DISTANCE_WEIGHT) +
        _component(average_speed_mps, FULL_CREDIT_SPEED_MPS, SPEED_WEIGHT) +
        _component(duration_ms, FULL_CREDIT_DURATION_MS, DURATION_WEIGHT)
    )
    return int(round(score))


def calculate_rarity(difficulty: int, is_special_location: bool = False) -> Rarity:
    """Rarity tier from difficulty; special locations are always legendary."""
    if difficulty >= LEGENDARY_THRESHOLD or is_special_location:
        return Rarity.LEGENDARY
    if difficulty >= EPIC_THRESHOLD:
        return Rarity.EPIC
    if difficulty >= RARE_THRESHOLD:
        return Rarity.RARE
    return Rarity.COMMON


def calculate_reward(difficulty: int, rarity: Rarity) -> int:
    """Difficulty scaled by the rarity multiplier."""
    return int(round(difficulty * RARITY_MULTIPLIERS.get(rarity, 1.0)))
