"""
Earn Rate Limiting Service

WHY: Cap how fast a single staff account can award stamps, so a stolen
token or a stuck client cannot drain a store's loyalty budget.

Fixed window per (store_id, user_id):
- A window opens on the first request and lasts RATE_WINDOW_MS
- A new window starts only when now - window_start > RATE_WINDOW_MS
- Denied calls still count against the window
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable

from ..time_utils import now_ms


# Configuration constants
RATE_MAX_PER_MIN = 20
RATE_WINDOW_MS = 60 * 1000


class RateLimitedError(Exception):
    """Raised when a (store, user) pair exceeded its window budget."""

    def __init__(self, message: str = "Rate limit exceeded", retry_after_seconds: int | None = None):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


@dataclass
class RateWindow:
    start_ms: int
    count: int


class RateLimiter:
    def __init__(
        self,
        *,
        max_per_window: int = RATE_MAX_PER_MIN,
        window_ms: int = RATE_WINDOW_MS,
        clock: Callable[[], int] = now_ms,
    ):
        self.max_per_window = max_per_window
        self.window_ms = window_ms
        self._clock = clock
        self._windows: dict[tuple[str, str], RateWindow] = {}
        self._lock = threading.Lock()

    def allow(self, store_id: str, user_id: str) -> bool:
        key = (store_id, user_id)
        now = self._clock()

        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window.start_ms > self.window_ms:
                window = RateWindow(start_ms=now, count=0)
                self._windows[key] = window
            window.count += 1
            return window.count <= self.max_per_window

    def check(self, store_id: str, user_id: str) -> None:
        """allow() that raises RateLimitedError instead of returning False."""
        if not self.allow(store_id, user_id):
            raise RateLimitedError(retry_after_seconds=self.retry_after_seconds(store_id, user_id))

    def retry_after_seconds(self, store_id: str, user_id: str) -> int:
        """
        Seconds until the current window for the key closes.

        Returns 0 when there is no open window.
        """
        now = self._clock()
        with self._lock:
            window = self._windows.get((store_id, user_id))
            if window is None:
                return 0
            remaining_ms = window.start_ms + self.window_ms - now
        if remaining_ms < 0:
            return 0
        # Round up; the window only closes once elapsed exceeds window_ms
        return remaining_ms // 1000 + 1

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._windows)
