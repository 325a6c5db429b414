"""
Push-based location source.

The server has no GPS; clients POST fixes and this adapter forwards them
to whoever is watching (the run tracker).
"""

import logging
from typing import Callable, Optional

from runrealm.features.tracking.schemas import LocationFix

from .interfaces import LocationSourceError

logger = logging.getLogger(__name__)


class PushLocationSource:
    """
    LocationSource fed by push().

    get_current_location() returns the most recent pushed fix.
    """

    def __init__(self):
        self._latest: Optional[LocationFix] = None
        self._callback: Optional[Callable[[LocationFix], object]] = None

    @property
    def is_watching(self) -> bool:
        return self._callback is not None

    def push(self, fix: LocationFix):
        """
        Record a fix and deliver it to the watcher.

        Returns:
            Whatever the watcher returns (the accepted point), or None
        """
        self._latest = fix
        if self._callback is None:
            return None
        return self._callback(fix)

    async def get_current_location(self, high_accuracy: bool = True) -> LocationFix:
        if self._latest is None:
            raise LocationSourceError("Location unavailable")
        return self._latest

    def start_watching(self, callback: Callable[[LocationFix], object]) -> None:
        self._callback = callback
        logger.debug("Location watching started")

    def stop_watching(self) -> None:
        self._callback = None
        logger.debug("Location watching stopped")
