"""
Collaborator interfaces.

The tracker and the registry never look services up globally; they take
these capabilities in their constructors so tests can pass fakes.

- LocationSource: device GPS (or the HTTP push adapter)
- ClaimBackend: wallet + territory contract
- KeyValueStore: durable string storage
"""

from typing import TYPE_CHECKING, Callable, List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel

if TYPE_CHECKING:
    from runrealm.features.tracking.schemas import LocationFix


# =============================================================================
# Exceptions
# =============================================================================

class LocationSourceError(Exception):
    """Location could not be obtained (permission denied, timeout, unavailable)."""
    pass


class ClaimBackendError(Exception):
    """Base claim backend error. The message is shown to the user as-is."""

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ClaimBackendNotReadyError(ClaimBackendError):
    """Contract/backend not ready (wrong network, not deployed, offline)."""
    pass


class WalletNotConnectedError(ClaimBackendError):
    """No wallet connected."""

    def __init__(self, message: str = "Wallet not connected"):
        super().__init__(message)


# =============================================================================
# Data passed to the claim backend
# =============================================================================

class WalletInfo(BaseModel):
    """Connected wallet."""

    address: str
    chain_id: int


class TerritoryClaimData(BaseModel):
    """Payload minted on-chain for a territory."""

    geohash: str
    difficulty: int
    distance: float
    landmarks: List[str]
    origin_chain_id: Optional[int] = None
    origin_address: Optional[str] = None


# =============================================================================
# Protocols
# =============================================================================

@runtime_checkable
class LocationSource(Protocol):
    """Produces location fixes."""

    async def get_current_location(self, high_accuracy: bool = True) -> "LocationFix":
        """Return a single fix or raise LocationSourceError."""
        ...

    def start_watching(self, callback: Callable[["LocationFix"], None]) -> None:
        """Deliver every new fix to callback until stop_watching()."""
        ...

    def stop_watching(self) -> None:
        ...


@runtime_checkable
class ClaimBackend(Protocol):
    """Wallet and territory contract."""

    async def is_geohash_claimed(self, geohash: str) -> bool:
        """May raise ClaimBackendNotReadyError."""
        ...

    async def get_wallet(self) -> WalletInfo:
        """Raise WalletNotConnectedError if no wallet is connected."""
        ...

    async def claim_territory(self, data: TerritoryClaimData) -> str:
        """Mint on the home chain; returns the transaction hash."""
        ...

    async def request_cross_chain_claim(
        self,
        data: TerritoryClaimData,
        target_chain_id: int,
    ) -> None:
        """
        Ask the backend to relay a claim from another chain.

        Confirmation or failure arrives later as a separate event keyed by
        geohash.
        """
        ...


@runtime_checkable
class KeyValueStore(Protocol):
    """Durable string key-value storage."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...
