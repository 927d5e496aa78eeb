"""HTTP-level tests for the search proxy routes."""

import httpx
import pytest
from fastapi.testclient import TestClient

from muzik.config import Settings
from muzik.main import create_app
from muzik.models import ProviderError
from muzik.services import YouTubeSearchService

SEARCH_URL = "/api/proxy/youtube-search"


@pytest.fixture
def settings() -> Settings:
    return Settings(youtube_api_key="test-key")


@pytest.fixture
def app(settings, provider, clock):
    return create_app(settings=settings, provider=provider, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def search(client, q="lofi", max_results=5, ip="1.2.3.4"):
    return client.get(
        SEARCH_URL,
        params={"q": q, "maxResults": max_results},
        headers={"X-Forwarded-For": ip},
    )


class TestSearchEndpoint:
    def test_miss_then_hit(self, client, provider) -> None:
        first = search(client)
        assert first.status_code == 200
        assert first.headers["X-Cache"] == "MISS"
        assert first.headers["Cache-Control"] == "public, max-age=600"
        videos = first.json()["videos"]
        assert len(videos) == 5
        assert videos[0]["videoId"] == "vid0"
        assert videos[0]["channelTitle"] == "Channel"

        health = client.get("/api/proxy/health").json()
        assert health["cache"] == {"searchEntries": 1, "maxSize": 200}

        second = search(client)
        assert second.status_code == 200
        assert second.headers["X-Cache"] == "HIT"
        assert second.json() == first.json()
        assert provider.calls == [("lofi", 5)]

    def test_default_max_results(self, client, provider) -> None:
        response = client.get(SEARCH_URL, params={"q": "jazz"})
        assert response.status_code == 200
        assert provider.calls == [("jazz", 10)]

    def test_case_insensitive_cache(self, client, provider) -> None:
        search(client, q="  LoFi ")
        response = search(client, q="lofi")
        assert response.headers["X-Cache"] == "HIT"
        assert len(provider.calls) == 1

    def test_missing_query(self, client) -> None:
        assert client.get(SEARCH_URL).status_code == 422

    def test_blank_query(self, client, provider) -> None:
        response = search(client, q="   ")
        assert response.status_code == 400
        assert response.json() == {"error": "Search query is required"}
        assert provider.calls == []

    def test_max_results_out_of_range(self, client) -> None:
        assert search(client, max_results=51).status_code == 422
        assert search(client, max_results=0).status_code == 422


class TestRateLimiting:
    def test_eleventh_search_rejected(self, client) -> None:
        for i in range(10):
            assert search(client, q=f"q{i}").status_code == 200

        response = search(client, q="one more")
        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        assert response.json() == {
            "error": "Too many requests",
            "message": "Please wait before searching again. Max 10 searches per minute.",
        }

    def test_cached_query_still_rate_limited(self, client, provider) -> None:
        for _ in range(10):
            search(client)
        assert search(client).status_code == 429
        assert len(provider.calls) == 1

    def test_budget_restored_after_window(self, client, clock) -> None:
        for _ in range(11):
            search(client)
        clock.advance(61)
        assert search(client).status_code == 200

    def test_spoofed_forwarded_for_shares_peer_bucket(self, client, provider) -> None:
        for i in range(10):
            assert search(client, q=f"q{i}", ip=f"9.9.9.{i}").status_code == 200

        response = search(client, q="one more", ip="9.9.9.99")
        assert response.status_code == 429
        assert len(provider.calls) == 10

    def test_health_reports_tracked_clients(self, client) -> None:
        search(client, ip="10.0.0.1")
        search(client, ip="10.0.0.2")
        health = client.get("/api/proxy/health").json()
        assert health["status"] == "ok"
        assert health["service"] == "proxy"
        assert health["rateLimiter"] == {"trackedClients": 1}


class TestTrustedProxy:
    @pytest.fixture
    def settings(self) -> Settings:
        return Settings(youtube_api_key="test-key", trust_proxy_headers=True)

    def test_clients_limited_separately(self, client) -> None:
        for _ in range(11):
            search(client, ip="10.0.0.1")
        assert search(client, ip="10.0.0.2").status_code == 200

    def test_first_forwarded_hop_identifies_client(self, client) -> None:
        for _ in range(10):
            search(client, ip="5.6.7.8, 10.0.0.1")
        assert search(client, ip="5.6.7.8").status_code == 429

    def test_health_reports_tracked_clients(self, client) -> None:
        search(client, ip="10.0.0.1")
        search(client, ip="10.0.0.2")
        health = client.get("/api/proxy/health").json()
        assert health["rateLimiter"] == {"trackedClients": 2}


class TestErrors:
    def test_provider_error(self, client, provider) -> None:
        provider.errors.append(ProviderError("quotaExceeded"))
        response = search(client)
        assert response.status_code == 500
        assert response.json() == {"error": "YouTube API error", "message": "quotaExceeded"}

        retry = search(client)
        assert retry.status_code == 200
        assert retry.headers["X-Cache"] == "MISS"
        assert len(provider.calls) == 2

    def test_missing_api_key(self, clock) -> None:
        app = create_app(settings=Settings(youtube_api_key=None), clock=clock)
        with TestClient(app) as client:
            response = search(client)
        assert response.status_code == 500
        assert response.json() == {"error": "YouTube API key not configured"}

    def test_error_bodies_documented(self, client) -> None:
        schema = client.get("/openapi.json").json()
        assert "ErrorResponse" in schema["components"]["schemas"]
        responses = schema["paths"][SEARCH_URL]["get"]["responses"]
        for status in ("400", "429", "500"):
            assert responses[status]["content"]["application/json"]["schema"] == {
                "$ref": "#/components/schemas/ErrorResponse"
            }


class TestCacheManagement:
    def test_clear_cache(self, client, provider) -> None:
        search(client)
        response = client.delete(f"{SEARCH_URL}/cache")
        assert response.json() == {"cleared": 1}
        assert search(client).headers["X-Cache"] == "MISS"
        assert len(provider.calls) == 2


class TestIframeProxy:
    def test_serves_script(self, app, client) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="var YT = {};"))
        app.state.youtube_service = YouTubeSearchService(api_key="k", transport=transport)

        response = client.get("/api/proxy/youtube-api")
        assert response.status_code == 200
        assert response.text == "var YT = {};"
        assert response.headers["content-type"].startswith("text/javascript")
        assert response.headers["Cache-Control"] == "public, max-age=3600"

    def test_upstream_failure(self, app, client) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        app.state.youtube_service = YouTubeSearchService(api_key="k", transport=transport)

        response = client.get("/api/proxy/youtube-api")
        assert response.status_code == 500
        assert response.json()["error"] == "Error proxying YouTube API"


def test_root_health(client) -> None:
    assert client.get("/health").json() == {"status": "healthy"}
