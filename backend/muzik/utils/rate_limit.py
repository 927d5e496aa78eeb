"""Per-client fixed-window rate limiting.

Guards the YouTube search proxy so one client cannot burn through the
daily API quota. Each client identity gets a counter that resets when its
window has elapsed. A request that is rejected still counts, so hammering
the endpoint keeps the client locked out until the window rolls over.

Fixed windows allow a burst of up to 2x the limit across a window edge.
State is O(1) per client; stale clients are dropped by ``sweep()``, which
``run_periodic_sweep`` calls on a timer outside the request path.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


@dataclass
class RateLimitEntry:
    count: int
    window_start: float


class FixedWindowRateLimiter:
    """Counts requests per client identity within fixed time windows."""

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self._max_requests = max_requests
        self._window = window_seconds
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_seconds(self) -> float:
        return self._window

    @property
    def retry_after(self) -> int:
        """Seconds a rejected client is told to wait (one full window)."""
        return int(self._window)

    def allow(self, identity: str | None) -> bool:
        """Record a request from ``identity`` and report whether it may proceed.

        Clients without a usable identity share the ``"unknown"`` bucket.
        """
        identity = identity or UNKNOWN_CLIENT
        now = self._clock()
        with self._lock:
            entry = self._entries.get(identity)
            if entry is None or now - entry.window_start > self._window:
                self._entries[identity] = RateLimitEntry(count=1, window_start=now)
                return True
            entry.count += 1
            return entry.count <= self._max_requests

    def sweep(self) -> int:
        """Forget clients idle for more than two windows. Returns how many."""
        now = self._clock()
        cutoff = 2 * self._window
        removed = 0
        with self._lock:
            for identity in list(self._entries):
                if now - self._entries[identity].window_start > cutoff:
                    del self._entries[identity]
                    removed += 1
        return removed

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()


async def run_periodic_sweep(limiter: FixedWindowRateLimiter, interval_seconds: float) -> None:
    """Call ``limiter.sweep()`` every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = limiter.sweep()
        except Exception:
            logger.exception("[RATE] Sweep failed")
            continue
        if removed:
            logger.info(f"[RATE] Swept {removed} stale clients ({limiter.size()} tracked)")
