"""
Unit Tests for the initiation rate limiters
"""

from unittest.mock import Mock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from stkpay.services.rate_limiter import InMemoryRateLimiter, RedisRateLimiter


class TestInMemoryRateLimiter:

    @pytest.fixture
    def limiter(self, clock):
        return InMemoryRateLimiter(max_requests=10, window_seconds=60, clock=clock)

    def test_eleventh_call_in_window_rejected(self, limiter, clock):
        for _ in range(10):
            assert limiter.allow("10.0.0.1") is True
            clock.advance(1)

        assert limiter.allow("10.0.0.1") is False

    def test_first_call_after_rollover_admitted(self, limiter, clock):
        for _ in range(10):
            limiter.allow("10.0.0.1")
        assert limiter.allow("10.0.0.1") is False

        clock.advance(61)

        assert limiter.allow("10.0.0.1") is True

    def test_window_still_closed_at_reset_instant(self, limiter, clock):
        for _ in range(10):
            limiter.allow("10.0.0.1")

        clock.advance(60)

        assert limiter.allow("10.0.0.1") is False

    def test_keys_are_independent(self, limiter):
        for _ in range(10):
            limiter.allow("10.0.0.1")

        assert limiter.allow("10.0.0.1") is False
        assert limiter.allow("10.0.0.2") is True

    def test_rejected_calls_do_not_extend_window(self, limiter, clock):
        for _ in range(10):
            limiter.allow("10.0.0.1")
        for _ in range(5):
            clock.advance(10)
            limiter.allow("10.0.0.1")

        clock.advance(11)

        assert limiter.allow("10.0.0.1") is True

    def test_sweep_drops_stale_windows(self, limiter, clock):
        limiter.allow("10.0.0.1")
        clock.advance(30)
        limiter.allow("10.0.0.2")
        clock.advance(31)

        assert limiter.sweep() == 1
        assert len(limiter) == 1


class TestRedisRateLimiter:

    @pytest.fixture
    def limiter(self, redis_client, clock):
        # Start on a window boundary so the bucket does not roll mid-test
        clock.now = 1_700_000_040.0
        return RedisRateLimiter(redis_client, max_requests=10, window_seconds=60, clock=clock)

    def test_eleventh_call_in_window_rejected(self, limiter):
        results = [limiter.allow("10.0.0.1") for _ in range(11)]

        assert results == [True] * 10 + [False]

    def test_next_window_admitted(self, limiter, clock):
        for _ in range(11):
            limiter.allow("10.0.0.1")

        clock.advance(60)

        assert limiter.allow("10.0.0.1") is True

    def test_counter_key_expires_with_window(self, limiter, redis_client, clock):
        limiter.allow("10.0.0.1")

        key = f"rate_limit:10.0.0.1:{int(clock() / 60)}"
        assert redis_client.get(key) == "1"
        assert 0 < redis_client.ttl(key) <= 60

    def test_fails_open_when_redis_unavailable(self, clock):
        broken = Mock()
        broken.get.side_effect = RedisConnectionError("connection refused")
        limiter = RedisRateLimiter(broken, max_requests=1, window_seconds=60, clock=clock)

        assert limiter.allow("10.0.0.1") is True
        assert limiter.allow("10.0.0.1") is True
