"""Sliding-window admission control keyed by client address."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict

LOGGER = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
DEFAULT_WINDOW = 60.0
DEFAULT_MAX_KEYS = 10_000


class _Window:
    __slots__ = ("lock", "timestamps", "retired")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.timestamps: Deque[float] = deque()
        # Set once the window is removed from the table; callers holding a
        # reference must fetch a fresh one instead of recording here.
        self.retired = False

    def purge(self, cutoff: float) -> None:
        while self.timestamps and self.timestamps[0] <= cutoff:
            self.timestamps.popleft()


class RateLimiter:
    """Thread-safe sliding-window limiter.

    Each key owns a lock so the check-and-record step is atomic per key while
    distinct keys proceed in parallel. The key table has a soft bound: when it
    is full, keys with no timestamps left in the window are swept. Windows that
    still hold timestamps are never dropped, so the table grows past
    ``max_keys`` rather than handing an evicted key a fresh quota.
    """

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        window: float = DEFAULT_WINDOW,
        *,
        max_keys: int = DEFAULT_MAX_KEYS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window <= 0:
            raise ValueError("window must be positive")
        self.limit = limit
        self.window = window
        self.max_keys = max(1, max_keys)
        self._clock = clock
        self._table_lock = threading.Lock()
        self._windows: Dict[str, _Window] = {}

    def __len__(self) -> int:
        with self._table_lock:
            return len(self._windows)

    def _window_for(self, key: str, now: float) -> _Window:
        with self._table_lock:
            window = self._windows.get(key)
            if window is not None:
                return window
            if len(self._windows) >= self.max_keys:
                self._sweep_locked(now)
                if len(self._windows) >= self.max_keys:
                    LOGGER.warning(
                        "Rate limiter tracking %d live keys (soft limit %d)",
                        len(self._windows) + 1,
                        self.max_keys,
                    )
            window = _Window()
            self._windows[key] = window
            return window

    def allow(self, key: str) -> bool:
        """Record a request for ``key`` and return whether it is admitted."""
        while True:
            now = self._clock()
            window = self._window_for(key, now)
            with window.lock:
                if window.retired:
                    continue
                window.purge(now - self.window)
                if len(window.timestamps) >= self.limit:
                    return False
                window.timestamps.append(now)
                return True

    def remaining(self, key: str) -> int:
        now = self._clock()
        with self._table_lock:
            window = self._windows.get(key)
        if window is None:
            return self.limit
        with window.lock:
            window.purge(now - self.window)
            return max(0, self.limit - len(window.timestamps))

    def sweep(self) -> int:
        """Drop keys with no timestamps inside the window; return how many."""
        with self._table_lock:
            return self._sweep_locked(self._clock())

    def _sweep_locked(self, now: float) -> int:
        cutoff = now - self.window
        stale = []
        for key, window in self._windows.items():
            with window.lock:
                window.purge(cutoff)
                if not window.timestamps:
                    window.retired = True
                    stale.append(key)
        for key in stale:
            del self._windows[key]
        if stale:
            LOGGER.debug("Rate limiter swept %d stale keys", len(stale))
        return len(stale)
