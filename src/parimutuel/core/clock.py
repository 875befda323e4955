"""
Logical clock sources

The ledger reads the clock once per operation and treats the reading as
authoritative. Readings are integer seconds.
"""

import threading
import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """Wall clock, truncated to whole seconds"""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """
    Settable monotonic clock for simulations and tests

    Moving the clock backwards raises ValueError.
    """

    def __init__(self, start: int = 0):
        self._now = int(start)
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            return self._now

    def set(self, timestamp: int) -> int:
        with self._lock:
            if timestamp < self._now:
                raise ValueError(f"Clock cannot move backwards: {timestamp} < {self._now}")
            self._now = int(timestamp)
            return self._now

    def advance(self, seconds: int = 1) -> int:
        if seconds < 0:
            raise ValueError(f"Cannot advance by negative duration {seconds}")
        with self._lock:
            self._now += int(seconds)
            return self._now
