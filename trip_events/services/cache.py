"""
Aggregation result cache.

Keeps recent AggregationResults in memory so repeated identical queries
(same pipeline, city and date range) skip the provider fan-out for
CACHE_TTL_SECONDS. Used by the HTTP layer only; the aggregation core never
reads it.
"""

import logging
import time
from datetime import date

from trip_events.models.events import AggregationResult

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 1800  # 30 minutes


class _CacheEntry:
    """In-memory cache entry with TTL tracking."""

    __slots__ = ("result", "timestamp")

    def __init__(self, result: AggregationResult, timestamp: float) -> None:
        self.result = result
        self.timestamp = timestamp


# Module-level cache, shared across requests
_cache: dict[str, _CacheEntry] = {}


def cache_key(pipeline: str, city: str, start_date: date, end_date: date) -> str:
    """Build the cache key. The city keeps its casing; only whitespace is stripped."""
    return f"{pipeline}|{city.strip()}|{start_date.isoformat()}|{end_date.isoformat()}"


def get_cached(key: str) -> AggregationResult | None:
    """Get the cached result if the entry is within the TTL, else None."""
    entry = _cache.get(key)
    if entry is None:
        return None
    if (time.time() - entry.timestamp) >= CACHE_TTL_SECONDS:
        return None
    return entry.result


def set_cached(key: str, result: AggregationResult) -> None:
    """Store a result with the current timestamp and evict expired entries."""
    _cache[key] = _CacheEntry(result=result, timestamp=time.time())
    clear_expired_cache()


def clear_cache() -> None:
    """Clear all cached entries. Useful for testing."""
    _cache.clear()


def clear_expired_cache() -> None:
    """Remove cache entries older than CACHE_TTL_SECONDS."""
    now = time.time()
    expired = [
        key for key, entry in _cache.items()
        if (now - entry.timestamp) >= CACHE_TTL_SECONDS
    ]
    for key in expired:
        del _cache[key]
    if expired:
        logger.debug("Evicted %d expired cache entries", len(expired))
