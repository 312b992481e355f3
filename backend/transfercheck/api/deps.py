# backend/transfercheck/api/deps.py
from __future__ import annotations

"""
Shared FastAPI dependencies: caller identity, throttling, event sink.

Each collaborator is provided through a dependency so tests (and
alternative deployments) can swap it with `app.dependency_overrides`.
"""

from functools import lru_cache

from fastapi import Depends, Request

from transfercheck.config import get_settings
from transfercheck.services.diagnostics.error_classifier import RateLimitExceeded
from transfercheck.services.events import CeleryEventSink, EventSink, NullEventSink
from transfercheck.services.ratelimit import FixedWindowRateLimiter, build_rate_limiter


def get_caller_id(request: Request) -> str:
    """Best-effort caller address: proxy headers first, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


@lru_cache(maxsize=1)
def get_rate_limiter() -> FixedWindowRateLimiter:
    return build_rate_limiter()


def enforce_rate_limit(
    caller_id: str = Depends(get_caller_id),
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
) -> str:
    """Admit the caller or raise RateLimitExceeded; returns the caller id."""
    decision = limiter.admit(caller_id)
    if not decision.allowed:
        raise RateLimitExceeded(decision.retry_after)
    return caller_id


def get_event_sink() -> EventSink:
    if not get_settings().events_enabled:
        return NullEventSink()
    return CeleryEventSink()
