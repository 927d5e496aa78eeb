"""Client for the Muzik search proxy with a local result cache.

Mirrors the server cache on the consumer side (5 min TTL, 50 entries) so
repeated searches in one session never leave the process. There is no
rate limiter here: the client only sees its own traffic.

Cancelling the awaiting task (the user typed a new query) aborts the HTTP
call and leaves the cache untouched.
"""

import logging
from typing import Optional

import httpx

from muzik.config import CLIENT_SEARCH_CACHE_MAX_SIZE, CLIENT_SEARCH_CACHE_TTL_SECONDS
from muzik.models import Video
from muzik.utils import ExpiringCache, search_cache_key

logger = logging.getLogger(__name__)


class SearchRequestError(Exception):
    """The backend answered the search with an error status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SearchRateLimitedError(SearchRequestError):
    """The backend rejected the search with 429."""

    def __init__(self, message: str, retry_after: Optional[int]) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Search failed"
    if not isinstance(body, dict):
        return "Search failed"
    return body.get("message") or body.get("error") or "Search failed"


class VideoSearchClient:
    """Searches YouTube through the backend proxy."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000/api",
        cache: Optional[ExpiringCache[str, list[Video]]] = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        if cache is None:
            cache = ExpiringCache(
                capacity=CLIENT_SEARCH_CACHE_MAX_SIZE,
                ttl_seconds=CLIENT_SEARCH_CACHE_TTL_SECONDS,
            )
        self._cache = cache
        self._transport = transport
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def cache(self) -> ExpiringCache[str, list[Video]]:
        return self._cache

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def search_youtube(self, query: str, max_results: int = 20) -> list[Video]:
        """Search videos, answering from the local cache when possible.

        Raises:
            SearchRateLimitedError: The backend returned 429.
            SearchRequestError: Any other non-2xx response.
        """
        key = search_cache_key(query, max_results)
        cached = self._cache.get(key)
        if cached is not None:
            logger.info(f"[Client Cache HIT] {query!r}")
            return cached

        response = await self._get_client().get(
            f"{self._base_url}/proxy/youtube-search",
            params={"q": query, "maxResults": max_results},
        )

        if response.status_code == 429:
            retry_after = response.headers.get("retry-after")
            raise SearchRateLimitedError(
                _error_message(response),
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if response.is_error:
            raise SearchRequestError(_error_message(response), response.status_code)

        data = response.json()
        videos = [Video.model_validate(v) for v in data.get("videos") or []]

        # Empty results are not worth remembering
        if videos:
            self._cache.set(key, videos)
        return videos

    def clear_search_cache(self) -> None:
        self._cache.clear()
