"""
Fixed-window rate limiting for entry creation.

The counter itself sits behind ``CounterStore`` so it can live in a shared
key-value store with TTL support instead of process memory. The bundled
``InMemoryCounterStore`` is process local: each replica counts separately.
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional, Protocol, Tuple

from hourbook.config.settings import HourbookConfig
from hourbook.errors import RateLimitError

logger = logging.getLogger(__name__)


class CounterStore(Protocol):
    """Atomic counter with expiry, e.g. Redis ``INCR`` + ``EXPIRE``."""

    def increment(self, key: str, ttl_seconds: float) -> int:
        """Increment ``key`` and return the new count.

        A missing or expired key starts a fresh window that expires
        ``ttl_seconds`` after this call.
        """
        ...


class InMemoryCounterStore:
    """
    Process-local counter store with an injectable clock.

    Features:
    - Window starts at the first hit for a key
    - Expired keys are evicted on access
    - Thread-safe
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._counters: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def increment(self, key: str, ttl_seconds: float) -> int:
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            count, expires_at = self._counters.get(key, (0, now + ttl_seconds))
            count += 1
            self._counters[key] = (count, expires_at)
            return count

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._counters.items() if now >= expires_at]
        for key in expired:
            del self._counters[key]

    def __len__(self) -> int:
        return len(self._counters)


class FixedWindowRateLimiter:
    """
    Rejects more than ``max_requests`` hits per key within one window.

    Example:
        >>> limiter = FixedWindowRateLimiter(InMemoryCounterStore(), max_requests=10)
        >>> limiter.check("user-1")  # raises RateLimitError on the 11th call
    """

    def __init__(
        self,
        store: CounterStore,
        max_requests: int = 10,
        window_seconds: float = 60.0,
        prefix: str = "entry-create",
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.prefix = prefix

    @classmethod
    def from_config(
        cls, config: HourbookConfig, store: Optional[CounterStore] = None
    ) -> "FixedWindowRateLimiter":
        """Limiter sized by ``RATE_LIMIT_MAX_REQUESTS`` and ``RATE_LIMIT_WINDOW_SECONDS``."""
        return cls(
            store if store is not None else InMemoryCounterStore(),
            max_requests=config.rate_limit_max_requests,
            window_seconds=config.rate_limit_window_seconds,
        )

    def check(self, key: str) -> None:
        """Count a hit for ``key``.

        Raises:
            RateLimitError: If the window's limit is exceeded
        """
        count = self.store.increment(f"{self.prefix}:{key}", self.window_seconds)
        if count > self.max_requests:
            logger.warning(f"Rate limit exceeded for {key} ({count}/{self.max_requests})")
            raise RateLimitError("Too many requests. Please wait a moment.")
