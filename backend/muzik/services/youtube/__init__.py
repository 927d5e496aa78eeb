"""YouTube service module.

Provides the YouTube Data API search provider and the iframe API fetcher.
"""

from .service import YouTubeSearchService, normalize_item

__all__ = [
    "YouTubeSearchService",
    "normalize_item",
]
