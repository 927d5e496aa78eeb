"""Consumer-side helpers: cached search client and network quality monitor."""

from .network import (
    ConnectionInfo,
    NetworkQualityMonitor,
    classify_connection,
    get_optimal_player_vars,
    get_optimal_quality,
    get_thumbnail_size,
    get_thumbnail_url,
)
from .search import SearchRateLimitedError, SearchRequestError, VideoSearchClient

__all__ = [
    "ConnectionInfo",
    "NetworkQualityMonitor",
    "classify_connection",
    "get_optimal_player_vars",
    "get_optimal_quality",
    "get_thumbnail_size",
    "get_thumbnail_url",
    "SearchRateLimitedError",
    "SearchRequestError",
    "VideoSearchClient",
]
