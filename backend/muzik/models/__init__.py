"""Data models and error types."""

from .core import (
    CacheStats,
    ErrorResponse,
    NetworkQuality,
    ProxyHealthResponse,
    RateLimiterStats,
    SearchResponse,
    Video,
)
from .errors import ConfigurationError, MuzikError, ProviderError, RateLimitedError

__all__ = [
    "CacheStats",
    "ErrorResponse",
    "NetworkQuality",
    "ProxyHealthResponse",
    "RateLimiterStats",
    "SearchResponse",
    "Video",
    "ConfigurationError",
    "MuzikError",
    "ProviderError",
    "RateLimitedError",
]
