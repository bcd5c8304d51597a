"""Unit tests for the fixed-window rate limiter."""

import pytest

from hourbook.config import HourbookConfig
from hourbook.errors import RateLimitError
from hourbook.services.rate_limiter import FixedWindowRateLimiter, InMemoryCounterStore


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestFixedWindowRateLimiter:
    """Test window counting and expiry."""

    def test_allows_up_to_limit(self):
        limiter = FixedWindowRateLimiter(InMemoryCounterStore(FakeClock()), max_requests=3)
        for _ in range(3):
            limiter.check("user-1")

        with pytest.raises(RateLimitError, match="Too many requests"):
            limiter.check("user-1")

    def test_keys_are_independent(self):
        limiter = FixedWindowRateLimiter(InMemoryCounterStore(FakeClock()), max_requests=1)
        limiter.check("user-1")
        limiter.check("user-2")

    def test_window_resets_after_expiry(self):
        clock = FakeClock()
        store = InMemoryCounterStore(clock)
        limiter = FixedWindowRateLimiter(store, max_requests=1, window_seconds=60)

        limiter.check("user-1")
        clock.now = 59.9
        with pytest.raises(RateLimitError):
            limiter.check("user-1")

        clock.now = 60.0
        limiter.check("user-1")

    def test_expired_keys_are_evicted(self):
        clock = FakeClock()
        store = InMemoryCounterStore(clock)
        store.increment("a", 10)
        store.increment("b", 10)
        assert len(store) == 2

        clock.now = 11
        store.increment("c", 10)
        assert len(store) == 1

    @pytest.mark.parametrize("kwargs", [{"max_requests": 0}, {"window_seconds": 0}])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(InMemoryCounterStore(), **kwargs)

    def test_from_config(self):
        config = HourbookConfig(
            _env_file=None, rate_limit_max_requests=1, rate_limit_window_seconds=30
        )
        store = InMemoryCounterStore(FakeClock())
        limiter = FixedWindowRateLimiter.from_config(config, store)

        assert limiter.store is store
        assert limiter.window_seconds == 30
        limiter.check("user-1")
        with pytest.raises(RateLimitError):
            limiter.check("user-1")
