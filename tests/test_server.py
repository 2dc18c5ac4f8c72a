"""Tests for the FastAPI app: routes, error handlers and middleware."""

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import VALID_KEY, gemini_envelope, mock_http
from cr8_chat.dependencies import get_fallback_generator, get_http_client, get_settings
from cr8_chat.main import app
from cr8_chat.services.fallback import GREETING, FallbackGenerator
from cr8_chat.services.knowledge import KNOWLEDGE_BASE

client = TestClient(app, raise_server_exceptions=False)


class FirstChoice:
    def choice(self, seq):
        return seq[0]


@pytest.fixture
def configure(make_settings):
    """Override app settings and the upstream transport for one test."""

    def _configure(handler=None, **settings_overrides):
        app_settings = make_settings(**settings_overrides)

        async def http_client():
            return mock_http(handler or (lambda r: httpx.Response(500)))

        app.dependency_overrides[get_settings] = lambda: app_settings
        app.dependency_overrides[get_http_client] = http_client
        app.dependency_overrides[get_fallback_generator] = lambda: FallbackGenerator(rng=FirstChoice())
        return app_settings

    yield _configure
    app.dependency_overrides.clear()


def answer_text(body: dict) -> str:
    return body["candidates"][0]["content"]["parts"][0]["text"]


class TestChat:
    def test_fallback_without_key(self, configure):
        configure()
        response = client.post("/api/chat", json={"prompt": "Hello there"})
        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "fallback"
        assert data["reason"] == "no_api_key"
        assert answer_text(data) == GREETING.candidates[0]

    def test_gemini_answer(self, configure):
        configure(lambda r: httpx.Response(200, json=gemini_envelope(" Hi from Gemini ")), gemini_api_key=VALID_KEY)
        response = client.post("/api/chat", json={"prompt": "Hello"})
        assert response.status_code == 200
        assert response.json() == {
            "candidates": [{"content": {"parts": [{"text": "Hi from Gemini"}], "role": "model"}}],
            "source": "gemini",
        }

    def test_gemini_alias(self, configure):
        configure()
        response = client.post("/api/gemini", json={"prompt": "contact?"})
        assert response.status_code == 200
        assert response.json()["source"] == "fallback"

    def test_upstream_timeout(self, configure):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        configure(handler, gemini_api_key=VALID_KEY)
        data = client.post("/api/chat", json={"prompt": "Hello"}).json()
        assert data["source"] == "fallback"
        assert data["reason"] == "timeout"

    def test_upstream_server_error(self, configure):
        configure(lambda r: httpx.Response(503, text="unavailable"), gemini_api_key=VALID_KEY)
        data = client.post("/api/chat", json={"prompt": "Hello"}).json()
        assert data["reason"] == "server_error"
        assert answer_text(data)

    def test_empty_prompt(self, configure):
        configure()
        response = client.post("/api/chat", json={"prompt": ""})
        assert response.status_code == 400
        assert response.json()["code"] == "missing_or_wrong_type"

    def test_too_long_prompt(self, configure):
        configure()
        response = client.post("/api/chat", json={"prompt": "x" * 10_001})
        assert response.status_code == 400
        assert response.json()["code"] == "too_long"

    @pytest.mark.parametrize("payload", [{"prompt": None}, {"prompt": 3}, {"prompt": ["a"]}, {}, [1, 2]])
    def test_wrong_type(self, configure, payload):
        configure()
        response = client.post("/api/chat", json=payload)
        assert response.status_code == 400

    def test_invalid_json(self, configure):
        configure()
        response = client.post(
            "/api/chat", content=b"{not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid prompt provided"

    def test_no_body(self, configure):
        configure()
        assert client.post("/api/chat").status_code == 400


class TestHealth:
    def test_health(self, configure):
        configure(gemini_api_key=VALID_KEY, rate_limit_enabled=False)
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["gemini_configured"] is True
        assert data["gemini_key_format_valid"] is True
        assert data["redis_connected"] is None
        assert data["uptime_s"] >= 0
        assert data["timestamp"]

    def test_health_without_key(self, configure):
        configure(rate_limit_enabled=False)
        data = client.get("/api/health").json()
        assert data["gemini_configured"] is False
        assert data["gemini_key_format_valid"] is False

    def test_gemini_check_success(self, configure):
        configure(lambda r: httpx.Response(200, json=gemini_envelope("pong")), gemini_api_key=VALID_KEY)
        data = client.get("/api/test-gemini").json()
        assert data["status"] == "success"
        assert data["response"] == "pong"

    def test_gemini_check_without_key(self, configure):
        configure()
        data = client.get("/api/test-gemini").json()
        assert data["status"] == "error"
        assert data["reason"] == "no_api_key"


class TestTrainingData:
    def test_default_knowledge_base(self, configure):
        configure()
        data = client.get("/api/training-data").json()
        assert data["data"] == KNOWLEDGE_BASE
        assert "creativscr8@gmail.com" in data["data"]
        assert data["timestamp"]

    def test_override(self, configure):
        configure(training_data="Custom CR8 facts")
        assert client.get("/api/training-data").json()["data"] == "Custom CR8 facts"


class TestMiddleware:
    def test_unknown_route_is_json_404(self, configure):
        configure()
        response = client.get("/api/nope")
        assert response.status_code == 404
        assert response.json() == {
            "error": "Not found",
            "message": "The requested endpoint was not found",
        }

    def test_security_headers(self, configure):
        configure()
        response = client.get("/api/training-data")
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "SAMEORIGIN"
        assert "content-security-policy" not in response.headers

    def test_request_id(self, configure):
        configure()
        response = client.get("/api/training-data")
        assert response.headers["x-request-id"]

    def test_cors_allowed_origin(self, configure):
        configure()
        response = client.options(
            "/api/chat",
            headers={
                "Origin": "https://cr8-agency.netlify.app",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://cr8-agency.netlify.app"

    def test_cors_unknown_origin(self, configure):
        configure()
        response = client.post(
            "/api/chat", json={"prompt": "hi"}, headers={"Origin": "https://evil.example.com"}
        )
        assert "access-control-allow-origin" not in response.headers
