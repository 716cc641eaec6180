"""
Tests for the backend-proxy coach and its HTTP client.

httpx.MockTransport stands in for the backend; its call log doubles as a
network spy.
"""
import json

import httpx
import pytest

from clients.api_client import ApiClient
from clients.proxy_coach import (
    ANALYZE_ENDPOINT,
    CHAT_ENDPOINT,
    EMPTY_REPLY_MESSAGE,
    NOT_LOGGED_IN_MESSAGE,
    OFFLINE_MESSAGE,
    ProxyCoach,
)
from conftest import sample_analysis
from core.exceptions import AuthenticationRequiredError, BackendDeploymentError
from schemas import SKILLS

BASE_URL = "https://api.athleon.test"


class Backend:
    """Mock backend that records every request."""

    def __init__(self, handler):
        self.handler = handler
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


def _proxy(backend, token="jwt-token"):
    http = httpx.AsyncClient(transport=httpx.MockTransport(backend))
    return ProxyCoach(ApiClient(BASE_URL, http_client=http), token_provider=lambda: token)


def _never_called(request):
    raise AssertionError(f"unexpected network call to {request.url}")


class TestChat:
    @pytest.mark.asyncio
    async def test_no_token_means_no_network(self):
        backend = Backend(_never_called)
        reply = await _proxy(backend, token=None).chat("How do I run faster?")

        assert reply == NOT_LOGGED_IN_MESSAGE
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_posts_message_with_bearer_token(self):
        backend = Backend(lambda r: httpx.Response(200, json={"message": "Do interval sprints."}))
        reply = await _proxy(backend).chat("How do I run faster?", ["earlier turn"])

        assert reply == "Do interval sprints."
        request = backend.requests[0]
        assert request.method == "POST"
        assert str(request.url) == BASE_URL + CHAT_ENDPOINT
        assert request.headers["Authorization"] == "Bearer jwt-token"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"message": "How do I run faster?"}

    @pytest.mark.asyncio
    async def test_missing_message_field_uses_placeholder(self):
        backend = Backend(lambda r: httpx.Response(200, json={}))
        assert await _proxy(backend).chat("Hi") == EMPTY_REPLY_MESSAGE

    @pytest.mark.asyncio
    async def test_server_error_returns_offline_text(self):
        backend = Backend(lambda r: httpx.Response(500, json={"error": "Internal Server Error"}))
        assert await _proxy(backend).chat("Hi") == OFFLINE_MESSAGE

    @pytest.mark.asyncio
    async def test_network_failure_returns_offline_text(self):
        def _refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert await _proxy(Backend(_refuse)).chat("Hi") == OFFLINE_MESSAGE

    @pytest.mark.asyncio
    async def test_html_error_page_returns_offline_text(self):
        backend = Backend(lambda r: httpx.Response(404, html="<html>Not here</html>"))
        assert await _proxy(backend).chat("Hi") == OFFLINE_MESSAGE


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_no_token_raises_before_any_network_call(self):
        backend = Backend(_never_called)
        with pytest.raises(AuthenticationRequiredError):
            await _proxy(backend, token="").analyze("tennis", "Served 20 aces")
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_returns_server_analysis(self):
        expected = sample_analysis(score=91)
        backend = Backend(lambda r: httpx.Response(200, json=expected.to_wire()))

        result = await _proxy(backend).analyze("tennis", "Served 20 aces")

        assert result == expected
        request = backend.requests[0]
        assert str(request.url) == BASE_URL + ANALYZE_ENDPOINT
        assert json.loads(request.content) == {"sport": "tennis", "description": "Served 20 aces"}

    @pytest.mark.asyncio
    async def test_failure_returns_fixed_fallback(self):
        backend = Backend(lambda r: httpx.Response(503, json={"error": "Service Unavailable"}))

        result = await _proxy(backend).analyze("tennis", "Served 20 aces")

        assert result.score == 75
        assert [s.skill for s in result.skill_breakdown] == list(SKILLS)
        assert all(s.value == 70 and s.full_mark == 100 for s in result.skill_breakdown)
        assert result.insights[0] == "Could not connect to analysis server"


class TestApiClient:
    @pytest.mark.asyncio
    async def test_html_failure_raises_deployment_error(self):
        backend = Backend(lambda r: httpx.Response(502, html="<html>Bad gateway</html>"))
        api = ApiClient(BASE_URL, http_client=httpx.AsyncClient(transport=httpx.MockTransport(backend)))

        with pytest.raises(BackendDeploymentError):
            await api.get("/api/health")

    @pytest.mark.asyncio
    async def test_no_authorization_header_without_token(self):
        backend = Backend(lambda r: httpx.Response(200, json={"status": "ok"}))
        async with ApiClient(BASE_URL + "/", http_client=httpx.AsyncClient(transport=httpx.MockTransport(backend))) as api:
            response = await api.get("/api/health")

        assert response.json() == {"status": "ok"}
        assert "Authorization" not in backend.requests[0].headers
        assert str(backend.requests[0].url) == BASE_URL + "/api/health"
