"""Unit tests for the fixed-window counter."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from modules.core.ratelimit import FixedWindowCounter, RateLimit, RateLimitDecision

pytestmark = pytest.mark.unit

NUM_WORKERS = 20


class TestRateLimitParse:
    def test_parse(self):
        assert RateLimit.parse("100/900") == RateLimit(max_requests=100, window=900)

    @pytest.mark.parametrize("rate", ["0/900", "10/0", "abc", "10/x"])
    def test_invalid(self, rate):
        with pytest.raises(ValueError):
            RateLimit.parse(rate)


class TestRetryAfter:
    def test_rounds_up(self):
        decision = RateLimitDecision(allowed=False, count=4, limit=3, reset_at=100.0)
        assert decision.retry_after(40.2) == 60

    def test_never_below_one(self):
        decision = RateLimitDecision(allowed=False, count=4, limit=3, reset_at=100.0)
        assert decision.retry_after(100.0) == 1


class TestFixedWindowCounter:
    @pytest.fixture()
    def counter(self, clock, rate_limit_counter):
        return FixedWindowCounter(key_prefix=rate_limit_counter.key_prefix, clock=clock)

    def test_counts_up_to_ceiling(self, counter):
        limit = RateLimit(max_requests=2, window=60)
        decisions = [counter.hit("general", "1.2.3.4", limit) for _ in range(3)]
        assert [d.count for d in decisions] == [1, 2, 3]
        assert [d.allowed for d in decisions] == [True, True, False]

    def test_reset_at_is_window_end(self, counter, clock):
        limit = RateLimit(max_requests=2, window=60)
        decision = counter.hit("general", "1.2.3.4", limit)
        assert decision.reset_at == counter.window_start(clock.now, 60) + 60
        assert decision.reset_at > clock.now

    def test_tiers_are_independent(self, counter):
        limit = RateLimit(max_requests=1, window=60)
        assert counter.hit("general", "1.2.3.4", limit).allowed
        assert counter.hit("strict", "1.2.3.4", limit).allowed
        assert not counter.hit("general", "1.2.3.4", limit).allowed

    def test_clients_are_independent(self, counter):
        limit = RateLimit(max_requests=1, window=60)
        assert counter.hit("general", "1.2.3.4", limit).allowed
        assert counter.hit("general", "5.6.7.8", limit).allowed

    def test_new_window_starts_from_zero(self, counter, clock):
        limit = RateLimit(max_requests=1, window=60)
        counter.hit("general", "1.2.3.4", limit)
        assert not counter.hit("general", "1.2.3.4", limit).allowed

        clock.advance(60)
        decision = counter.hit("general", "1.2.3.4", limit)
        assert decision.allowed
        assert decision.count == 1


class TestFixedWindowCounterConcurrency:
    """Simultaneous hits from one client are each counted exactly once."""

    def test_concurrent_burst_is_never_undercounted(self, clock, rate_limit_counter):
        counter = FixedWindowCounter(key_prefix=rate_limit_counter.key_prefix, clock=clock)
        limit = RateLimit(max_requests=NUM_WORKERS, window=60)
        barrier = threading.Barrier(NUM_WORKERS)

        def hit(_):
            barrier.wait()
            return counter.hit("general", "9.9.9.9", limit)

        with ThreadPoolExecutor(max_workers=NUM_WORKERS) as pool:
            decisions = list(pool.map(hit, range(NUM_WORKERS)))

        assert sorted(d.count for d in decisions) == list(range(1, NUM_WORKERS + 1))
        assert all(d.allowed for d in decisions)

        overflow = counter.hit("general", "9.9.9.9", limit)
        assert overflow.count == NUM_WORKERS + 1
        assert not overflow.allowed
