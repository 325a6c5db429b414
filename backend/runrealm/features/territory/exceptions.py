"""
Territory derivation errors.

Each carries a human-readable reason that is passed through unchanged to
claim-failed events and API responses.
"""


class TerritoryDerivationError(Exception):
    """Base derivation failure."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidRunDataError(TerritoryDerivationError):
    """Run has fewer than 2 points or was never confirmed eligible."""

    def __init__(self, reason: str = "Invalid run data for territory creation"):
        super().__init__(reason)


class TerritoryOverlapError(TerritoryDerivationError):
    """Bounds intersect an already-claimed territory."""

    def __init__(self, reason: str = "Territory overlaps with existing claimed territory"):
        super().__init__(reason)


class TerritoryAlreadyClaimedError(TerritoryDerivationError):
    """Claim backend reports the geohash as already claimed."""

    def __init__(self, reason: str = "Territory already claimed on blockchain"):
        super().__init__(reason)
