"""Shared test configuration and fixtures."""

import os

# Must be set before cr8_chat.config builds the module-level settings
os.environ["GEMINI_API_KEY"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PROMETHEUS_ENABLED"] = "false"
os.environ["TRAINING_DATA"] = ""

import httpx
import pytest

from cr8_chat.config import Settings

VALID_KEY = "AIzaSyTest0123456789abcdefghijklmnopq"


def gemini_envelope(text: str | None, finish_reason: str = "STOP") -> dict:
    """A generateContent response body with one candidate."""
    content = {"role": "model", "parts": [{"text": text}] if text is not None else []}
    return {"candidates": [{"content": content, "finishReason": finish_reason}]}


def mock_http(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        return Settings(**overrides)

    return _make


@pytest.fixture
def recorded_requests():
    """List that upstream handlers append the requests they receive to."""
    return []
