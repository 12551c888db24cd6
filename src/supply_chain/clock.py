"""Timestamp sources."""

import time
from typing import Protocol


class Clock(Protocol):
    """Anything that returns the current time as integer nanoseconds."""

    def now(self) -> int: ...


class SystemClock:
    """Wall clock in nanoseconds since the epoch, never going backwards.

    If the system time steps back, the last returned value is repeated until
    the wall clock catches up.
    """

    def __init__(self) -> None:
        self._last = 0

    def now(self) -> int:
        self._last = max(time.time_ns(), self._last)
        return self._last
