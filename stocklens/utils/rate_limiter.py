"""Rate limiting utilities to respect API limits."""

import time
from collections import deque
from typing import Callable


class RateLimiter:
    """Sliding-window rate limiter.

    Non-blocking: callers ask ``try_acquire()`` and treat a refusal as a
    rate-limit failure rather than sleeping.
    """

    def __init__(self, calls_per_minute: int = 60, clock: Callable[[], float] = time.time):
        self.calls_per_minute = calls_per_minute
        self.clock = clock
        self._timestamps: deque[float] = deque()

    def try_acquire(self) -> bool:
        """Record a call and return True if the budget allows it."""
        now = self.clock()
        # Remove timestamps older than 60 seconds
        while self._timestamps and now - self._timestamps[0] >= 60:
            self._timestamps.popleft()
        if len(self._timestamps) >= self.calls_per_minute:
            return False
        self._timestamps.append(now)
        return True

    @property
    def remaining(self) -> int:
        now = self.clock()
        recent = sum(1 for ts in self._timestamps if now - ts < 60)
        return max(0, self.calls_per_minute - recent)
