"""Sliding-window rate limiter for upstream requests."""

import time
from collections import deque
from typing import Callable

DEFAULT_MAX_REQUESTS = 10
DEFAULT_WINDOW = 60.0  # 1 minute


class RateLimiter:
    """Admission control counting only requests inside the trailing window.

    Timestamps are kept oldest first and pruned lazily before every check.
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window: float = DEFAULT_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the rate limiter.

        Args:
            max_requests: Requests allowed within one window.
            window: Window length in seconds.
            clock: Monotonic time source in seconds.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window <= 0:
            raise ValueError("window must be > 0")

        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._timestamps: deque[float] = deque()

    @property
    def pending(self) -> int:
        """Number of requests still counted against the window."""
        self._prune(self._clock())
        return len(self._timestamps)

    def can_proceed(self) -> bool:
        """Check whether a new request is currently permitted."""
        self._prune(self._clock())
        return len(self._timestamps) < self.max_requests

    def record(self) -> None:
        """Record a dispatched request.

        Call only after a request was actually sent, never per attempt.
        """
        self._timestamps.append(self._clock())

    def time_until_next_slot(self) -> float:
        """Seconds until the oldest request leaves the window (0 if free now)."""
        if self.can_proceed():
            return 0.0
        oldest = self._timestamps[0]
        return max(0.0, oldest + self.window - self._clock())

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._timestamps.clear()

    def _prune(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self.window:
            self._timestamps.popleft()
