"""Configuration for the Muzik search backend.

Loads ``backend/.env`` (if present) on import, then reads settings from
environment variables. Real environment variables always win over .env,
so deployments configure everything through the platform.

Environment Variables:
- YOUTUBE_API_KEY: Required for the search proxy
- SEARCH_CACHE_TTL_SECONDS: Optional, defaults to 600
- SEARCH_CACHE_MAX_SIZE: Optional, defaults to 200
- RATE_LIMIT_MAX_REQUESTS: Optional, defaults to 10
- RATE_LIMIT_WINDOW_SECONDS: Optional, defaults to 60
- RATE_LIMIT_SWEEP_INTERVAL: Optional, defaults to 300
  (the five integers above must be positive)
- SEARCH_RATE_LIMIT_CACHE_HITS: Optional, defaults to true. When false,
  cache hits are served without touching the rate limiter
- TRUST_PROXY_HEADERS: Optional, defaults to false. Only enable behind a
  reverse proxy that overwrites X-Forwarded-For; otherwise clients can
  pick their own rate-limit bucket
- YOUTUBE_TIMEOUT_SECONDS: Optional, defaults to 10
- CORS_ALLOWED_ORIGINS: Optional, comma-separated origins
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# muzik/config.py -> muzik/ -> backend/
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH, override=False)

# Server-side search cache
SEARCH_CACHE_TTL_SECONDS = 600
SEARCH_CACHE_MAX_SIZE = 200

# Per-IP limits on the search proxy
RATE_LIMIT_MAX_REQUESTS = 10
RATE_LIMIT_WINDOW_SECONDS = 60
RATE_LIMIT_SWEEP_INTERVAL = 300

# Client-side mirrors
CLIENT_SEARCH_CACHE_TTL_SECONDS = 300
CLIENT_SEARCH_CACHE_MAX_SIZE = 50
NETWORK_CACHE_TTL_SECONDS = 120
NETWORK_PROBE_TIMEOUT_SECONDS = 3.0

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:3000"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_positive_int(name: str, default: int) -> int:
    value = _env_int(name, default)
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Resolved backend settings."""

    youtube_api_key: Optional[str] = None
    youtube_timeout_seconds: float = 10.0
    search_cache_ttl_seconds: int = SEARCH_CACHE_TTL_SECONDS
    search_cache_max_size: int = SEARCH_CACHE_MAX_SIZE
    rate_limit_max_requests: int = RATE_LIMIT_MAX_REQUESTS
    rate_limit_window_seconds: int = RATE_LIMIT_WINDOW_SECONDS
    rate_limit_sweep_interval: int = RATE_LIMIT_SWEEP_INTERVAL
    rate_limit_cache_hits: bool = True
    trust_proxy_headers: bool = False
    cors_origins: list[str] = field(
        default_factory=lambda: DEFAULT_CORS_ORIGINS.split(",")
    )


def get_settings() -> Settings:
    """Read settings from the environment.

    Not cached: tests change environment variables between app instances.
    """
    origins = os.getenv("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS)
    return Settings(
        youtube_api_key=os.getenv("YOUTUBE_API_KEY") or None,
        youtube_timeout_seconds=_env_float("YOUTUBE_TIMEOUT_SECONDS", 10.0),
        search_cache_ttl_seconds=_env_positive_int("SEARCH_CACHE_TTL_SECONDS", SEARCH_CACHE_TTL_SECONDS),
        search_cache_max_size=_env_positive_int("SEARCH_CACHE_MAX_SIZE", SEARCH_CACHE_MAX_SIZE),
        rate_limit_max_requests=_env_positive_int("RATE_LIMIT_MAX_REQUESTS", RATE_LIMIT_MAX_REQUESTS),
        rate_limit_window_seconds=_env_positive_int("RATE_LIMIT_WINDOW_SECONDS", RATE_LIMIT_WINDOW_SECONDS),
        rate_limit_sweep_interval=_env_positive_int("RATE_LIMIT_SWEEP_INTERVAL", RATE_LIMIT_SWEEP_INTERVAL),
        rate_limit_cache_hits=_env_bool("SEARCH_RATE_LIMIT_CACHE_HITS", True),
        trust_proxy_headers=_env_bool("TRUST_PROXY_HEADERS", False),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )
