"""Search orchestration: rate limit, cache, then provider.

Per request:
    RateCheck  -> fail: RateLimitedError
    CacheLookup -> hit: return cached videos
    ProviderFetch -> error: propagate (nothing cached)
                  -> success: store and return

The limiter is consulted before the cache by default, so a client that
has exhausted its budget is refused even for results we already hold.
``rate_limit_cache_hits=False`` switches to serving cache hits without
charging the limiter; only misses are then rate limited.

The rate check and key computation happen before the provider call is
awaited. No lock is held across the await, so two concurrent misses for
the same key may both reach the provider.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from muzik.models import ConfigurationError, ProviderError, RateLimitedError, Video
from muzik.utils import ExpiringCache, FixedWindowRateLimiter, search_cache_key

logger = logging.getLogger(__name__)

_LOG_QUERY_MAX = 50


def _redact(query: str) -> str:
    """Render a user query for logs: truncated and repr-quoted."""
    if len(query) > _LOG_QUERY_MAX:
        query = query[:_LOG_QUERY_MAX] + "..."
    return repr(query)


class SearchProvider(ABC):
    """External video search backend called on cache misses."""

    @abstractmethod
    async def search(self, query: str, max_results: int) -> list[Video]:
        """Fetch ``max_results`` videos for ``query``.

        Raises:
            ProviderError: The call failed or returned unusable data.
            ConfigurationError: The provider is missing credentials.
        """


@dataclass
class SearchOutcome:
    videos: list[Video]
    cache_hit: bool


class SearchOrchestrator:
    """Answers video searches with as few provider calls as possible.

    Attributes:
        _cache: Results keyed by ``search_cache_key(query, max_results)``.
        _limiter: Per-client request budget.
        _provider: Called only on cache misses.
    """

    def __init__(
        self,
        provider: SearchProvider,
        cache: ExpiringCache[str, list[Video]],
        limiter: FixedWindowRateLimiter,
        rate_limit_cache_hits: bool = True,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._limiter = limiter
        self._rate_limit_cache_hits = rate_limit_cache_hits

    @property
    def rate_limit_cache_hits(self) -> bool:
        """Whether cache hits are charged against the client's budget."""
        return self._rate_limit_cache_hits

    @property
    def cache(self) -> ExpiringCache[str, list[Video]]:
        return self._cache

    @property
    def limiter(self) -> FixedWindowRateLimiter:
        return self._limiter

    def _check_rate_limit(self, client_identity: str | None) -> None:
        if not self._limiter.allow(client_identity):
            logger.info(f"[RATE] Limited client {client_identity or 'unknown'}")
            raise RateLimitedError(
                retry_after=self._limiter.retry_after,
                max_requests=self._limiter.max_requests,
            )

    async def search(
        self, query: str, max_results: int, client_identity: str | None
    ) -> SearchOutcome:
        """Search videos for ``query``, serving repeats from the cache.

        Raises:
            ValueError: ``query`` is empty or whitespace.
            RateLimitedError: The client is over its budget.
            ProviderError / ConfigurationError: From the provider, unchanged.
        """
        if not query or not query.strip():
            raise ValueError("Search query is required")

        if self._rate_limit_cache_hits:
            self._check_rate_limit(client_identity)

        key = search_cache_key(query, max_results)
        cached = self._cache.get(key)
        if cached is not None:
            logger.info(f"[SEARCH] Cache HIT for {_redact(query)}")
            return SearchOutcome(videos=cached, cache_hit=True)

        if not self._rate_limit_cache_hits:
            self._check_rate_limit(client_identity)

        logger.info(f"[SEARCH] Cache MISS for {_redact(query)}, calling provider")
        try:
            videos = await self._provider.search(query, max_results)
        except ProviderError as e:
            logger.warning(f"[SEARCH] Provider failed for {_redact(query)}: {e.message}")
            raise
        except ConfigurationError as e:
            logger.error(f"[SEARCH] {e.message}")
            raise
        self._cache.set(key, videos)
        return SearchOutcome(videos=videos, cache_hit=False)

    def clear_cache(self) -> int:
        removed = self._cache.clear()
        logger.info(f"[SEARCH] Cleared {removed} cached searches")
        return removed

    def stats(self) -> dict:
        return {"searchEntries": self._cache.size(), "maxSize": self._cache.capacity}
