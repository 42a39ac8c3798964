"""In-memory fixed-window rate limiters for API requests."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from pesxchange.config import settings

logger = logging.getLogger(__name__)


@dataclass
class RateLimitWindow:
    """Request count for one identifier inside the current window."""

    count: int
    window_start: float


class InMemoryRateLimiter:
    """Per-identifier request counter with a fixed window."""

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 60,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Maximum number of requests allowed in window
            window_seconds: Time window in seconds
            max_entries: Maximum number of identifiers tracked at once
            clock: Monotonic time source in seconds
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._windows: Dict[str, RateLimitWindow] = {}  # identifier -> window
        # Sync routes run on a thread pool, so the map needs a real mutex
        self._lock = threading.Lock()

    def _expired(self, window: RateLimitWindow, now: float) -> bool:
        return now > window.window_start + self.window_seconds

    def _make_room(self, now: float) -> None:
        """Drop expired windows, then the oldest one if still at capacity."""
        for identifier in [k for k, w in self._windows.items() if self._expired(w, now)]:
            del self._windows[identifier]
        if len(self._windows) >= self.max_entries:
            oldest = next(iter(self._windows))
            del self._windows[oldest]

    def check_and_consume(self, identifier: str) -> bool:
        """
        Count a request for ``identifier``.

        Returns:
            bool: False once the identifier reached ``max_requests`` in the
            current window, True otherwise.
        """
        with self._lock:
            now = self._clock()
            window = self._windows.get(identifier)

            if window is None or self._expired(window, now):
                if window is None and len(self._windows) >= self.max_entries:
                    self._make_room(now)
                self._windows[identifier] = RateLimitWindow(count=1, window_start=now)
                return True

            if window.count >= self.max_requests:
                logger.info(f"Rate limit exceeded for {identifier}")
                return False

            window.count += 1
            return True

    def retry_after(self, identifier: str) -> int:
        """Seconds until the identifier's current window resets."""
        with self._lock:
            window = self._windows.get(identifier)
            if window is None:
                return 0
            remaining = window.window_start + self.window_seconds - self._clock()
            return max(0, int(remaining + 0.999))

    def __len__(self) -> int:
        return len(self._windows)


# Singleton instances - created lazily with settings
_api_rate_limiter: Optional[InMemoryRateLimiter] = None
_profile_update_rate_limiter: Optional[InMemoryRateLimiter] = None
_profile_stats_rate_limiter: Optional[InMemoryRateLimiter] = None
_auth_rate_limiter: Optional[InMemoryRateLimiter] = None


def get_api_rate_limiter() -> InMemoryRateLimiter:
    """Limiter shared by message reads and (with a ``send_`` prefix) sends."""
    global _api_rate_limiter
    if _api_rate_limiter is None:
        _api_rate_limiter = InMemoryRateLimiter(
            max_requests=settings.API_RATE_LIMIT,
            window_seconds=settings.API_RATE_WINDOW_SECONDS,
            max_entries=settings.RATE_LIMIT_MAX_ENTRIES,
        )
    return _api_rate_limiter


def get_profile_update_rate_limiter() -> InMemoryRateLimiter:
    global _profile_update_rate_limiter
    if _profile_update_rate_limiter is None:
        _profile_update_rate_limiter = InMemoryRateLimiter(
            max_requests=settings.PROFILE_UPDATE_RATE_LIMIT,
            window_seconds=settings.PROFILE_UPDATE_RATE_WINDOW_SECONDS,
            max_entries=settings.RATE_LIMIT_MAX_ENTRIES,
        )
    return _profile_update_rate_limiter


def get_profile_stats_rate_limiter() -> InMemoryRateLimiter:
    global _profile_stats_rate_limiter
    if _profile_stats_rate_limiter is None:
        _profile_stats_rate_limiter = InMemoryRateLimiter(
            max_requests=settings.PROFILE_STATS_RATE_LIMIT,
            window_seconds=settings.PROFILE_STATS_RATE_WINDOW_SECONDS,
            max_entries=settings.RATE_LIMIT_MAX_ENTRIES,
        )
    return _profile_stats_rate_limiter


def get_auth_rate_limiter() -> InMemoryRateLimiter:
    global _auth_rate_limiter
    if _auth_rate_limiter is None:
        _auth_rate_limiter = InMemoryRateLimiter(
            max_requests=settings.AUTH_RATE_LIMIT,
            window_seconds=settings.AUTH_RATE_WINDOW_SECONDS,
            max_entries=settings.RATE_LIMIT_MAX_ENTRIES,
        )
    return _auth_rate_limiter
