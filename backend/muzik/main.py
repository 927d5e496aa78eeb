"""Muzik FastAPI Application.

Main entry point for the search proxy backend.

Run with:
    uvicorn muzik.main:app --reload
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from muzik.api import error_response, router
from muzik.config import Settings, get_settings
from muzik.models import ConfigurationError, ErrorResponse, ProviderError, RateLimitedError
from muzik.services import SearchOrchestrator, SearchProvider, YouTubeSearchService
from muzik.utils import ExpiringCache, FixedWindowRateLimiter, run_periodic_sweep

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup: background sweep of idle rate-limit entries
    sweeper = asyncio.create_task(
        run_periodic_sweep(
            app.state.search_orchestrator.limiter,
            app.state.settings.rate_limit_sweep_interval,
        )
    )
    yield
    # Shutdown
    sweeper.cancel()
    try:
        await sweeper
    except asyncio.CancelledError:
        pass
    await app.state.youtube_service.close()


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[SearchProvider] = None,
    clock: Callable[[], float] = time.monotonic,
) -> FastAPI:
    """Build the application with fresh cache and limiter instances.

    Args:
        settings: Resolved settings; read from the environment if omitted.
        provider: Search provider override (tests pass a fake).
        clock: Time source shared by the cache and the limiter.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Muzik API",
        description="Video, film and music catalogue backend",
        version="1.0.0",
        lifespan=lifespan,
    )

    youtube_service = YouTubeSearchService(
        api_key=settings.youtube_api_key or "",
        timeout=settings.youtube_timeout_seconds,
    )
    app.state.settings = settings
    app.state.youtube_service = youtube_service
    app.state.search_orchestrator = SearchOrchestrator(
        provider=provider or youtube_service,
        cache=ExpiringCache(
            capacity=settings.search_cache_max_size,
            ttl_seconds=settings.search_cache_ttl_seconds,
            clock=clock,
        ),
        limiter=FixedWindowRateLimiter(
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
            clock=clock,
        ),
        rate_limit_cache_hits=settings.rate_limit_cache_hits,
    )

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Cache", "Retry-After"],
    )

    # Global exception handlers
    @app.exception_handler(RateLimitedError)
    async def rate_limited_handler(request: Request, exc: RateLimitedError):
        """Over-budget clients get 429 with a Retry-After hint."""
        return error_response(
            429,
            ErrorResponse(error="Too many requests", message=exc.message),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(ProviderError)
    async def provider_error_handler(request: Request, exc: ProviderError):
        return error_response(500, ErrorResponse(error="YouTube API error", message=exc.message))

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        return error_response(500, ErrorResponse(error=exc.message))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors."""
        logger.exception(f"Unhandled error on {request.url.path}")
        return error_response(500, ErrorResponse(error="Internal server error", message=str(exc)))

    # Include API routes
    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
