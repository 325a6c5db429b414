"""
External collaborators: location, claim backend, storage protocols.

Usage:
    from runrealm.integrations import HttpClaimBackend, PushLocationSource
"""
from .interfaces import (
    ClaimBackend,
    ClaimBackendError,
    ClaimBackendNotReadyError,
    KeyValueStore,
    LocationSource,
    LocationSourceError,
    TerritoryClaimData,
    WalletInfo,
    WalletNotConnectedError,
)
from .claim_backend import HttpClaimBackend, UnavailableClaimBackend
from .location import PushLocationSource

__all__ = [
    # Protocols
    "ClaimBackend",
    "KeyValueStore",
    "LocationSource",
    # Errors
    "ClaimBackendError",
    "ClaimBackendNotReadyError",
    "LocationSourceError",
    "WalletNotConnectedError",
    # Data
    "TerritoryClaimData",
    "WalletInfo",
    # Implementations
    "HttpClaimBackend",
    "PushLocationSource",
    "UnavailableClaimBackend",
]
