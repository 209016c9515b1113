import time
from collections import deque
from typing import Callable, Deque, Dict

RATE_LIMITED = "Too many requests from this IP, please try again later."


class SlidingWindowRateLimiter:
    """
    Per-client request limiter over a sliding time window.

    Counters live in the worker process only; with N workers the effective
    global limit is N times `max_requests`.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    def admit(self, key: str) -> bool:
        """Record a request from `key`; False if it exceeds the window budget."""
        now = self.clock()
        self._sweep(now)

        window = self.hits.setdefault(key, deque())
        self._expire(window, now)

        if len(window) >= self.max_requests:
            return False

        window.append(now)
        return True

    def _expire(self, window: Deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while window and window[0] <= cutoff:
            window.popleft()

    def _sweep(self, now: float) -> None:
        """Drop clients with no hits left in the window, at most once per window."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now

        for key in list(self.hits):
            window = self.hits[key]
            self._expire(window, now)
            if not window:
                del self.hits[key]
