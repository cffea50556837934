"""Rate limiters with in-memory default and optional Redis backend.

Two budgets use this module: the per-client API limit enforced by the HTTP
middleware, and the process-wide upstream budget that every outbound Google /
OSM / OpenWeather call must acquire before it is sent.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Optional, Union

import redis

from roadtrip.security.redact import redact_sensitive
from roadtrip.shared.exceptions import PlanTimeoutError

_logger = logging.getLogger("roadtrip.rate-limit")
_DEFAULT_PREFIX = "roadtrip:ratelimit:"


class InMemoryRateLimiter:
    """Thread-safe sliding-window limiter."""

    backend = "memory"

    def __init__(self, max_requests: int, window_seconds: float):
        self._max = max(1, int(max_requests))
        self._window = max(0.001, float(window_seconds))
        self._counters: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        now = time.monotonic()
        with self._lock:
            hits = [t for t in self._counters.get(key, []) if now - t < self._window]
            if len(hits) >= self._max:
                self._counters[key] = hits
                return False
            hits.append(now)
            self._counters[key] = hits
            return True


class RedisRateLimiter:
    """Redis-backed fixed-window limiter for multi-instance deployments."""

    backend = "redis"

    def __init__(
        self,
        redis_url: str,
        max_requests: int,
        window_seconds: float,
        prefix: str = _DEFAULT_PREFIX,
    ):
        self._max = max(1, int(max_requests))
        self._window = max(1, int(round(window_seconds)))
        self._prefix = prefix
        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._client.ping()

    def _key(self, key: str, bucket: int) -> str:
        return f"{self._prefix}{key}:{bucket}"

    def allow(self, key: str) -> bool:
        bucket = int(time.time()) // self._window
        redis_key = self._key(key, bucket)
        count = self._client.incr(redis_key)
        if count == 1:
            self._client.expire(redis_key, self._window + 5)
        return int(count) <= self._max


RateLimiter = Union[InMemoryRateLimiter, RedisRateLimiter]


def get_rate_limiter(
    max_requests: int,
    window_seconds: float,
    *,
    prefix: str = _DEFAULT_PREFIX,
) -> RateLimiter:
    redis_url = os.getenv("RATE_LIMIT_REDIS_URL") or os.getenv("REDIS_URL")
    if redis_url:
        try:
            limiter = RedisRateLimiter(redis_url, max_requests, window_seconds, prefix=prefix)
            _logger.info("Rate limiter initialized with Redis backend")
            return limiter
        except (redis.RedisError, ValueError) as exc:
            _logger.warning(
                "Failed to initialize Redis rate limiter, fallback to memory: %s",
                redact_sensitive(str(exc)),
            )
    return InMemoryRateLimiter(max_requests=max_requests, window_seconds=window_seconds)


def acquire(
    limiter: RateLimiter,
    key: str,
    *,
    max_wait_seconds: float,
    poll_seconds: float = 0.02,
) -> None:
    """Block until ``key`` has budget; give up after ``max_wait_seconds``."""
    give_up_at = time.monotonic() + max(0.0, max_wait_seconds)
    while not limiter.allow(key):
        if time.monotonic() >= give_up_at:
            raise PlanTimeoutError(f"rate limit budget for {key} not available within {max_wait_seconds:.1f}s")
        time.sleep(poll_seconds)


_upstream_limiter: Optional[RateLimiter] = None
_upstream_lock = threading.Lock()


def get_upstream_limiter() -> RateLimiter:
    """Shared budget for all outbound collaborator calls in this process."""
    global _upstream_limiter
    if _upstream_limiter is None:
        with _upstream_lock:
            if _upstream_limiter is None:
                per_second = int(os.getenv("UPSTREAM_RATE_LIMIT_PER_SECOND", "20") or "20")
                _upstream_limiter = get_rate_limiter(
                    max_requests=per_second,
                    window_seconds=1,
                    prefix=f"{_DEFAULT_PREFIX}upstream:",
                )
    return _upstream_limiter


def reset_upstream_limiter() -> None:
    global _upstream_limiter
    with _upstream_lock:
        _upstream_limiter = None


__all__ = [
    "InMemoryRateLimiter",
    "RateLimiter",
    "RedisRateLimiter",
    "acquire",
    "get_rate_limiter",
    "get_upstream_limiter",
    "reset_upstream_limiter",
]
