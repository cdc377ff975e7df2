"""Time source used by the cache for expiry decisions."""

import time
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current time in seconds."""

    def now(self) -> float: ...


class SystemClock:
    """Wall-clock time from the operating system."""

    def now(self) -> float:
        return time.time()
