"""Fixed-window request throttling keyed by caller address.

The counter state lives in an explicit store object so its lifecycle is
owned by whoever builds it (the app, or a test):

- InMemoryCounterStore: per-process dict behind a lock
- RedisCounterStore: shared counters for multi-worker deployments
"""
from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Protocol, Tuple

from transfercheck.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    retry_after: int = 0


class CounterStore(Protocol):
    def hit(self, key: str, window_seconds: int) -> Tuple[int, float]:
        """Count one request for ``key``; return (count, seconds until reset)."""
        ...


class InMemoryCounterStore:
    """Process-local counters. One read-modify-write per hit, under a lock."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._buckets: Dict[str, Tuple[int, float]] = {}

    def hit(self, key: str, window_seconds: int) -> Tuple[int, float]:
        with self._lock:
            now = self._clock()
            count, reset_at = self._buckets.get(key, (0, 0.0))
            if reset_at <= now:
                count, reset_at = 0, now + window_seconds
            count += 1
            self._buckets[key] = (count, reset_at)
            return count, reset_at - now

    def clear(self) -> None:
        with self._lock:
            self._buckets.clear()


class RedisCounterStore:
    """Counters in Redis: INCR plus a first-hit EXPIRE, in one transaction."""

    def __init__(self, client, prefix: str = "transfercheck:ratelimit:"):
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str) -> "RedisCounterStore":
        import redis

        return cls(redis.Redis.from_url(url))

    def hit(self, key: str, window_seconds: int) -> Tuple[int, float]:
        name = f"{self._prefix}{key}"
        pipe = self._client.pipeline(transaction=True)
        pipe.incr(name)
        pipe.expire(name, window_seconds, nx=True)
        pipe.pttl(name)
        count, _, ttl_ms = pipe.execute()
        remaining = ttl_ms / 1000 if ttl_ms and ttl_ms > 0 else float(window_seconds)
        return int(count), remaining


class FixedWindowRateLimiter:
    """``admit(caller_id)`` allows ``limit`` requests per window per caller."""

    def __init__(self, store: CounterStore, limit: int = 20, window_seconds: int = 60):
        self.store = store
        self.limit = limit
        self.window_seconds = window_seconds

    def admit(self, caller_id: str) -> RateDecision:
        count, remaining = self.store.hit(caller_id, self.window_seconds)
        if count <= self.limit:
            return RateDecision(allowed=True)
        retry_after = max(1, math.ceil(remaining))
        logger.info("Rate limit exceeded for %s (retry after %ss)", caller_id, retry_after)
        return RateDecision(allowed=False, retry_after=retry_after)


def build_rate_limiter() -> FixedWindowRateLimiter:
    settings = get_settings()
    if settings.rate_limit_redis_url:
        store: CounterStore = RedisCounterStore.from_url(settings.rate_limit_redis_url)
    else:
        store = InMemoryCounterStore()
    return FixedWindowRateLimiter(
        store,
        limit=settings.rate_limit_per_minute,
        window_seconds=settings.rate_limit_window_seconds,
    )
