"""
Single-lane rate limiter for outbound API calls.
"""

import logging
import threading
import time
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MIN_INTERVAL = 0.5  # seconds between dispatches


class RateLimiter:
    """
    Runs scheduled calls one at a time, spaced at least ``min_interval``
    seconds apart (measured between call starts).

    Callers are admitted in the order they acquire the gate. The limiter
    owns its clock state; create one per destination and pass it to the
    component that dispatches requests.
    """

    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if min_interval < 0:
            raise ValueError("min_interval must be non-negative")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_dispatch: Optional[float] = None
        self._dispatched = 0

    def schedule(self, fn: Callable[..., T], *args, **kwargs) -> T:
        """
        Run ``fn`` once the gate is free and the minimum interval has elapsed.

        Returns whatever ``fn`` returns; exceptions raised by ``fn``
        propagate to the caller and release the gate.
        """
        with self._lock:
            self._wait_for_slot()
            self._last_dispatch = self._clock()
            self._dispatched += 1
            return fn(*args, **kwargs)

    def _wait_for_slot(self):
        if self._last_dispatch is None:
            return
        delay = self._last_dispatch + self.min_interval - self._clock()
        if delay > 0:
            logger.debug(f"Rate limit: waiting {delay:.3f}s")
            self._sleep(delay)

    @property
    def dispatched(self) -> int:
        """Number of calls started through this limiter."""
        return self._dispatched
