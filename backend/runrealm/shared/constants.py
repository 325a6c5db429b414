"""
Unified constants for run and territory states.

This module provides a single source of truth for status naming
across the entire application.
"""

from enum import Enum


class RunStatus(str, Enum):
    """
    Lifecycle of a RunSession.

    recording <-> paused -> completed
    recording|paused -> cancelled
    """
    RECORDING = "recording"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.CANCELLED)


class TerritoryStatus(str, Enum):
    """Only the TerritoryRegistry writes this field."""
    CLAIMABLE = "claimable"
    CLAIMED = "claimed"
    CONTESTED = "contested"
    EXPIRED = "expired"


class IntentStatus(str, Enum):
    """Lifecycle of a TerritoryIntent."""
    ACTIVE = "active"
    COMPLETED = "completed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Rarity(str, Enum):
    """Territory rarity tiers, lowest to highest."""
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class ActivitySource(str, Enum):
    """
    Where an imported activity came from.

    GPX is our own upload path; the rest are fitness platforms.
    """
    STRAVA = "strava"
    GARMIN = "garmin"
    APPLE_HEALTH = "apple_health"
    GOOGLE_FIT = "google_fit"
    GPX = "gpx"


# Reward multiplier applied to difficulty for each rarity
RARITY_MULTIPLIERS: dict[Rarity, float] = {
    Rarity.COMMON: 1.0,
    Rarity.RARE: 1.5,
    Rarity.EPIC: 2.0,
    Rarity.LEGENDARY: 3.0,
}


# Persistence keys (single slot each)
LAST_RUN_KEY = "runrealm_last_run"
CLAIMED_TERRITORIES_KEY = "runrealm_claimed_territories"
TERRITORY_INTENTS_KEY = "runrealm_territory_intents"


# Transaction id reported while a cross-chain claim awaits confirmation
CROSS_CHAIN_PENDING_TX = "cross-chain-pending"
