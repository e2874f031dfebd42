# marketing_site/services/rate_limiter.py
"""In-memory sliding-window rate limiter for public form submissions."""
from __future__ import annotations

import math
import threading
import time
from collections import OrderedDict, deque
from typing import Callable, Deque, Optional

from marketing_site.core.logging import get_structlog_logger

logger = get_structlog_logger(__name__)


class SlidingWindowRateLimiter:
    """
    Admit at most ``limit`` attempts per client key within a trailing
    ``window`` of seconds.

    State lives in process memory and resets on restart. Checking and
    recording happen under one lock so concurrent callers can never be
    admitted more than ``limit`` times per window.

    Args:
        limit: Maximum admitted attempts per window
        window: Window length in seconds
        max_keys: Optional cap on tracked keys; the least recently used key
            is evicted when exceeded. ``None`` keeps every key.
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        limit: int = 5,
        window: float = 300.0,
        max_keys: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window <= 0:
            raise ValueError("window must be positive")
        if max_keys is not None and max_keys < 1:
            raise ValueError("max_keys must be at least 1")

        self.limit = limit
        self.window = window
        self.max_keys = max_keys
        self._clock = clock
        self._events: "OrderedDict[str, Deque[float]]" = OrderedDict()
        self._lock = threading.Lock()

    def admit(self, key: str) -> bool:
        """Record an attempt for ``key`` and return whether it is allowed."""
        with self._lock:
            now = self._clock()
            events = self._prune(key, now)

            if len(events) >= self.limit:
                return False

            events.append(now)
            self._events[key] = events
            self._events.move_to_end(key)
            self._evict_overflow()
            return True

    def retry_after(self, key: str) -> int:
        """Seconds until ``key`` would be admitted again (0 if it would be now)."""
        with self._lock:
            now = self._clock()
            events = self._prune(key, now)
            if len(events) < self.limit:
                return 0
            # The attempt that frees a slot is the one `limit` positions from the end
            oldest_blocking = events[len(events) - self.limit]
            return max(1, math.ceil(oldest_blocking + self.window - now))

    def sweep(self) -> int:
        """Drop keys with no attempts left in the window; return how many."""
        with self._lock:
            now = self._clock()
            cutoff = now - self.window
            idle = [key for key, events in self._events.items() if not events or events[-1] <= cutoff]
            for key in idle:
                del self._events[key]

        if idle:
            logger.debug("rate_limit.swept", removed=len(idle))
        return len(idle)

    def reset(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def _prune(self, key: str, now: float) -> Deque[float]:
        # Caller holds the lock
        events = self._events.get(key)
        if events is None:
            return deque()

        cutoff = now - self.window
        while events and events[0] <= cutoff:
            events.popleft()
        return events

    def _evict_overflow(self) -> None:
        # Caller holds the lock
        if self.max_keys is None:
            return
        while len(self._events) > self.max_keys:
            evicted, _ = self._events.popitem(last=False)
            logger.debug("rate_limit.evicted", client_id=evicted[:50])
