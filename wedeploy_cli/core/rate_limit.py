"""Minimal rate limiter for polling loops"""

import threading
import time
from typing import Callable, Optional


class RateLimiter:
    """
    Allows one event per interval (burst of 1).

    The first wait() returns immediately; later calls block until the
    interval since the previous event has elapsed.
    """

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self._clock = clock
        self._lock = threading.Lock()
        self._next: Optional[float] = None

    def reserve(self) -> float:
        """Reserve the next slot and return how long to wait for it."""
        with self._lock:
            now = self._clock()
            if self._next is None or self._next <= now:
                self._next = now + self.interval
                return 0.0
            delay = self._next - now
            self._next += self.interval
            return delay

    def wait(self, stop: Optional[threading.Event] = None) -> bool:
        """
        Block until the next slot.

        Returns:
            False if stop was set while waiting, True otherwise
        """
        delay = self.reserve()
        if stop is None:
            if delay > 0:
                time.sleep(delay)
            return True
        if delay > 0:
            return not stop.wait(delay)
        return not stop.is_set()
