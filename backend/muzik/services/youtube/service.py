"""YouTube Data API client for video search.

Architecture:
- Shared httpx client with connection pooling (created lazily, recreated if closed)
- Hard timeout on every call (10s by default)
- Every failure mode is raised as ``ProviderError`` so callers never cache it
- API key read at call time: a missing key fails the request, not the process
"""

import logging
import os
from typing import Any, Optional

import httpx

from muzik.models import ConfigurationError, ProviderError, Video
from muzik.services.search import SearchProvider

logger = logging.getLogger(__name__)


def normalize_item(item: dict[str, Any]) -> Optional[Video]:
    """Convert a raw ``search`` item into a ``Video``.

    Returns None for results that are not videos (channels, playlists).
    """
    video_id = (item.get("id") or {}).get("videoId")
    if not video_id:
        return None
    snippet = item.get("snippet") or {}
    thumbnails = snippet.get("thumbnails") or {}
    thumbnail = (thumbnails.get("medium") or {}).get("url") or (
        thumbnails.get("default") or {}
    ).get("url")
    return Video(
        video_id=video_id,
        title=snippet.get("title") or "",
        description=snippet.get("description") or "",
        thumbnail=thumbnail,
        channel_title=snippet.get("channelTitle"),
        published_at=snippet.get("publishedAt"),
    )


class YouTubeSearchService(SearchProvider):
    """Search provider backed by the YouTube Data API v3."""

    SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
    IFRAME_API_URL = "https://www.youtube.com/iframe_api"

    HEADERS = {
        "User-Agent": "Muzik/1.0",
        "Accept": "application/json",
    }

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else os.getenv("YOUTUBE_API_KEY")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=self.HEADERS,
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def search(self, query: str, max_results: int) -> list[Video]:
        """Search YouTube for videos.

        Args:
            query: Free-text search query, sent as typed.
            max_results: Number of results to request (YouTube caps at 50).

        Returns:
            Normalized videos in YouTube's ranking order.

        Raises:
            ConfigurationError: No API key is configured.
            ProviderError: Network failure, timeout, non-2xx status,
                an ``error`` payload or a body that is not valid JSON.
        """
        if not self._api_key:
            raise ConfigurationError("YouTube API key not configured")

        params = {
            "part": "snippet",
            "type": "video",
            "q": query,
            "maxResults": max_results,
            "key": self._api_key,
        }

        client = self._get_client()
        try:
            response = await client.get(self.SEARCH_URL, params=params)
        except httpx.TimeoutException:
            raise ProviderError(f"YouTube API timed out after {self._timeout}s") from None
        except httpx.HTTPError as e:
            raise ProviderError(f"Error fetching from YouTube API: {type(e).__name__}") from e

        try:
            data = response.json()
        except ValueError:
            raise ProviderError(
                f"Error parsing YouTube response (status {response.status_code})"
            ) from None

        if not isinstance(data, dict):
            raise ProviderError("Error parsing YouTube response")

        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ProviderError(message or "Unknown error")

        if response.status_code >= 400:
            raise ProviderError(f"YouTube API returned status {response.status_code}")

        videos = []
        for item in data.get("items") or []:
            video = normalize_item(item)
            if video is not None:
                videos.append(video)
        return videos

    async def fetch_iframe_api(self) -> str:
        """Fetch the YouTube iframe player script.

        Served through our backend for networks that block youtube.com
        script loads. Redirects are followed.
        """
        client = self._get_client()
        try:
            response = await client.get(self.IFRAME_API_URL, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderError(str(e) or type(e).__name__) from e
        return response.text
