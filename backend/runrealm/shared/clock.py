"""
Clock helpers.

Services take a `Clock` (a zero-argument callable returning epoch ms)
so tests can drive time explicitly.
"""
import time
from typing import Callable

Clock = Callable[[], int]

MS_PER_HOUR = 60 * 60 * 1000


def now_ms() -> int:
    """Current Unix time in milliseconds."""
    return int(time.time() * 1000)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start_ms: int = 0):
        self.current_ms = start_ms

    def __call__(self) -> int:
        return self.current_ms

    def advance(self, ms: int) -> int:
        self.current_ms += ms
        return self.current_ms
