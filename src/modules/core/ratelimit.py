"""Fixed-window request counters stored in the Django cache.

Each (tier, client) pair gets one counter per wall-clock window. The key
embeds the window start, so a new window starts from zero without any
reset job; stale keys expire with the window.

Counting relies on ``cache.add`` (create-if-absent) followed by
``cache.incr``. Both are atomic on Redis (``SET NX`` / ``INCR``) and on the
local-memory backend (guarded by its lock), so concurrent bursts from the
same client are never undercounted.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable

from django.core.cache import caches


@dataclass(frozen=True)
class RateLimit:
    """Ceiling of ``max_requests`` per ``window`` seconds."""

    max_requests: int
    window: int

    @classmethod
    def parse(cls, rate: str) -> RateLimit:
        """Parse ``"<max>/<window seconds>"``, e.g. ``"100/900"``."""
        num, _, period = rate.partition("/")
        max_requests, window = int(num), int(period)
        if max_requests < 1 or window < 1:
            raise ValueError(f"Invalid rate limit {rate!r}.")
        return cls(max_requests=max_requests, window=window)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    count: int
    limit: int
    reset_at: float

    def retry_after(self, now: float) -> int:
        """Whole seconds until the current window resets (at least 1)."""
        return max(1, math.ceil(self.reset_at - now))


class FixedWindowCounter:
    """Shared counter store; one instance per process, owned by the core app."""

    def __init__(
        self,
        cache_alias: str = "default",
        key_prefix: str = "ratelimit",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cache_alias = cache_alias
        self.key_prefix = key_prefix
        self.clock = clock

    @property
    def cache(self):
        return caches[self.cache_alias]

    def window_start(self, now: float, window: int) -> int:
        return int(now // window) * window

    def hit(self, tier: str, ident: str, limit: RateLimit) -> RateLimitDecision:
        """Count one request for ``ident`` in ``tier`` and decide on it."""
        now = self.clock()
        start = self.window_start(now, limit.window)
        key = f"{self.key_prefix}:{tier}:{ident}:{start}"

        if self.cache.add(key, 1, timeout=limit.window):
            count = 1
        else:
            try:
                count = self.cache.incr(key)
            except ValueError:
                # expired between add() and incr()
                self.cache.add(key, 1, timeout=limit.window)
                count = 1

        return RateLimitDecision(
            allowed=count <= limit.max_requests,
            count=count,
            limit=limit.max_requests,
            reset_at=start + limit.window,
        )
