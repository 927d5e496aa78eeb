"""Muzik Services.

Service layer components:
- Search: rate limiter + in-memory cache in front of a search provider
- YouTube: YouTube Data API search provider and iframe API fetcher
"""

from .search import SearchOrchestrator, SearchOutcome, SearchProvider
from .youtube import YouTubeSearchService, normalize_item

__all__ = [
    # Search
    "SearchOrchestrator",
    "SearchOutcome",
    "SearchProvider",
    # YouTube
    "YouTubeSearchService",
    "normalize_item",
]
