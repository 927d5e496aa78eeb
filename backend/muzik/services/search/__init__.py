"""Search orchestration: rate limiter + cache + provider."""

from .service import SearchOrchestrator, SearchOutcome, SearchProvider

__all__ = [
    "SearchOrchestrator",
    "SearchOutcome",
    "SearchProvider",
]
