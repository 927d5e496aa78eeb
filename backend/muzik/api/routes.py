"""API routes for the Muzik search proxy.

- GET    /proxy/youtube-search        cached, rate-limited YouTube search
- DELETE /proxy/youtube-search/cache  drop every cached search
- GET    /proxy/youtube-api           YouTube iframe API script via our backend
- GET    /proxy/health                proxy health and cache diagnostics

Services live on ``app.state`` (built in ``muzik.main.create_app``) so each
app instance, and each test, gets its own cache and limiter.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, Response

from muzik.models import (
    CacheStats,
    ErrorResponse,
    ProviderError,
    ProxyHealthResponse,
    RateLimiterStats,
    SearchResponse,
)
from muzik.services import SearchOrchestrator, YouTubeSearchService
from muzik.utils import UNKNOWN_CLIENT

logger = logging.getLogger(__name__)

router = APIRouter()

IFRAME_CACHE_CONTROL = "public, max-age=3600"


def error_response(status_code: int, body: ErrorResponse, headers: dict | None = None) -> JSONResponse:
    """Render an error body, omitting ``message`` when there is none."""
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def get_orchestrator(request: Request) -> SearchOrchestrator:
    return request.app.state.search_orchestrator


def get_youtube_service(request: Request) -> YouTubeSearchService:
    return request.app.state.youtube_service


def client_identity(request: Request) -> str:
    """Identify the caller for rate limiting.

    The socket peer address, unless ``trust_proxy_headers`` is set, in
    which case the first ``X-Forwarded-For`` hop wins. The header is
    client-controlled, so it only counts behind a proxy that rewrites it.
    """
    if request.app.state.settings.trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("/proxy/youtube-search", response_model=SearchResponse, responses=ERROR_RESPONSES)
async def search_youtube(
    request: Request,
    q: str = Query(..., min_length=1, description="Search keywords"),
    max_results: int = Query(10, ge=1, le=50, alias="maxResults", description="Number of results"),
):
    """Search YouTube through the server-side cache.

    Responses carry ``X-Cache: HIT|MISS``. Rate limiting, provider and
    configuration errors are rendered by the app's exception handlers.
    """
    if not q.strip():
        return error_response(400, ErrorResponse(error="Search query is required"))

    orchestrator = get_orchestrator(request)
    outcome = await orchestrator.search(q, max_results, client_identity(request))

    body = SearchResponse(videos=outcome.videos).model_dump(mode="json", by_alias=True)
    return JSONResponse(
        content=body,
        headers={
            "X-Cache": "HIT" if outcome.cache_hit else "MISS",
            "Cache-Control": f"public, max-age={int(orchestrator.cache.ttl)}",
        },
    )


@router.delete("/proxy/youtube-search/cache")
async def clear_search_cache(request: Request) -> dict:
    """Drop all cached searches so the next requests go to YouTube."""
    removed = get_orchestrator(request).clear_cache()
    return {"cleared": removed}


@router.get("/proxy/youtube-api")
async def proxy_youtube_iframe_api(request: Request):
    """Serve the YouTube iframe API script from our origin.

    Helps clients behind proxies that block youtube.com script loads.
    """
    try:
        script = await get_youtube_service(request).fetch_iframe_api()
    except ProviderError as e:
        logger.warning(f"[PROXY] iframe API fetch failed: {e.message}")
        return error_response(
            500, ErrorResponse(error="Error proxying YouTube API", message=e.message)
        )
    return Response(
        content=script,
        media_type="text/javascript; charset=utf-8",
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET",
            "Cache-Control": IFRAME_CACHE_CONTROL,
        },
    )


@router.get("/proxy/health", response_model=ProxyHealthResponse, response_model_by_alias=True)
async def proxy_health(request: Request) -> ProxyHealthResponse:
    """Proxy health with cache and rate limiter sizes."""
    orchestrator = get_orchestrator(request)
    stats = orchestrator.stats()
    return ProxyHealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        cache=CacheStats(search_entries=stats["searchEntries"], max_size=stats["maxSize"]),
        rate_limiter=RateLimiterStats(tracked_clients=orchestrator.limiter.size()),
    )
