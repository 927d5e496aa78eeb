"""Core data models for the Muzik search backend.

Pydantic models for YouTube search results as the frontend consumes them,
plus the network quality levels shared with the client utilities.
JSON field names stay camelCase to match the existing Vue frontend.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NetworkQuality(str, Enum):
    """Connection quality levels used to pick player and thumbnail sizes."""

    GOOD = "good"
    MEDIUM = "medium"
    SLOW = "slow"
    OFFLINE = "offline"


class Video(BaseModel):
    """A YouTube search result normalized to a fixed shape.

    Built from the raw ``search`` item: ``id.videoId`` plus the ``snippet``
    fields. ``thumbnail`` is the medium-resolution image when YouTube
    provides one, otherwise the default-resolution image.
    """

    model_config = ConfigDict(populate_by_name=True)

    video_id: str = Field(..., min_length=1, alias="videoId", description="YouTube video ID")
    title: str = Field(default="", description="Video title")
    description: str = Field(default="", description="Snippet description")
    thumbnail: Optional[str] = Field(None, description="Thumbnail URL (medium, else default)")
    channel_title: Optional[str] = Field(
        None, alias="channelTitle", description="Uploading channel name"
    )
    published_at: Optional[str] = Field(
        None, alias="publishedAt", description="ISO-8601 publish timestamp"
    )


class SearchResponse(BaseModel):
    """Response body of the YouTube search proxy."""

    videos: list[Video] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error body returned by the proxy routes."""

    error: str = Field(..., description="Short error title")
    message: Optional[str] = Field(None, description="Human-readable detail")


class CacheStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_entries: int = Field(..., ge=0, alias="searchEntries")
    max_size: int = Field(..., ge=1, alias="maxSize")


class RateLimiterStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tracked_clients: int = Field(..., ge=0, alias="trackedClients")


class ProxyHealthResponse(BaseModel):
    """Health/diagnostics of the search proxy."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = "ok"
    service: str = "proxy"
    timestamp: str
    cache: CacheStats
    rate_limiter: RateLimiterStats = Field(..., alias="rateLimiter")
