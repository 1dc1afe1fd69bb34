# Overview: Pytest coverage for the fixed-window earn rate limiter.

import pytest

from conftest import ManualClock
from stampcard.services.rate_limit_service import (
    RATE_MAX_PER_MIN,
    RATE_WINDOW_MS,
    RateLimitedError,
    RateLimiter,
)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(clock=clock)


class TestFixedWindow:
    def test_twenty_allowed_twenty_first_denied(self, limiter):
        results = [limiter.allow("s1", "u1") for _ in range(RATE_MAX_PER_MIN + 1)]
        assert results[:RATE_MAX_PER_MIN] == [True] * RATE_MAX_PER_MIN
        assert results[-1] is False

    def test_denied_calls_keep_counting(self, limiter, clock):
        for _ in range(RATE_MAX_PER_MIN + 5):
            limiter.allow("s1", "u1")
        clock.advance(RATE_WINDOW_MS // 2)
        assert limiter.allow("s1", "u1") is False

    def test_window_does_not_reset_at_exact_boundary(self, limiter, clock):
        for _ in range(RATE_MAX_PER_MIN):
            limiter.allow("s1", "u1")
        clock.advance(RATE_WINDOW_MS)
        assert limiter.allow("s1", "u1") is False

    def test_window_resets_once_elapsed_exceeds_sixty_seconds(self, limiter, clock):
        for _ in range(RATE_MAX_PER_MIN + 1):
            limiter.allow("s1", "u1")
        clock.advance(RATE_WINDOW_MS + 1)
        assert limiter.allow("s1", "u1") is True
        # Fresh window started at count 1
        for _ in range(RATE_MAX_PER_MIN - 1):
            assert limiter.allow("s1", "u1") is True
        assert limiter.allow("s1", "u1") is False

    def test_keys_are_independent(self, limiter):
        for _ in range(RATE_MAX_PER_MIN + 1):
            limiter.allow("s1", "u1")
        assert limiter.allow("s1", "u2") is True
        # Same user id in another store is another key
        assert limiter.allow("s2", "u1") is True
        assert limiter.tracked_keys() == 3


class TestCheckAndRetryAfter:
    def test_check_raises_with_retry_after(self, limiter, clock):
        for _ in range(RATE_MAX_PER_MIN):
            limiter.check("s1", "u1")
        clock.advance(15_000)

        with pytest.raises(RateLimitedError) as exc_info:
            limiter.check("s1", "u1")

        assert str(exc_info.value) == "Rate limit exceeded"
        assert exc_info.value.retry_after_seconds == 46

    def test_retry_after_without_window_is_zero(self, limiter):
        assert limiter.retry_after_seconds("s1", "nobody") == 0

    def test_retry_after_after_window_closed_is_zero(self, limiter, clock):
        limiter.allow("s1", "u1")
        clock.advance(RATE_WINDOW_MS + 1)
        assert limiter.retry_after_seconds("s1", "u1") == 0
