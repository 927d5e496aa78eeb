"""Error taxonomy for the search pipeline.

Cache misses, expired entries and over-limit checks are plain values
(``None`` / ``False``), not exceptions. These exceptions cover the cases
that abort a search request.
"""


class MuzikError(Exception):
    """Base class for errors surfaced to HTTP callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RateLimitedError(MuzikError):
    """The client exhausted its search budget for the current window."""

    def __init__(self, retry_after: int, max_requests: int = 10) -> None:
        period = "minute" if retry_after == 60 else f"{retry_after} seconds"
        super().__init__(
            f"Please wait before searching again. Max {max_requests} searches per {period}."
        )
        self.retry_after = retry_after
        self.max_requests = max_requests


class ProviderError(MuzikError):
    """The YouTube API call failed or returned unusable data."""


class ConfigurationError(MuzikError):
    """A required setting (the YouTube API key) is missing."""
