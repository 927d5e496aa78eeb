"""Shared in-memory building blocks: expiring cache and rate limiter."""

from .cache import CacheEntry, ExpiringCache, search_cache_key
from .rate_limit import (
    UNKNOWN_CLIENT,
    FixedWindowRateLimiter,
    RateLimitEntry,
    run_periodic_sweep,
)

__all__ = [
    "CacheEntry",
    "ExpiringCache",
    "search_cache_key",
    "UNKNOWN_CLIENT",
    "FixedWindowRateLimiter",
    "RateLimitEntry",
    "run_periodic_sweep",
]
