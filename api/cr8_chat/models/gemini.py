import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

import httpx

from cr8_chat.config import settings
from cr8_chat.middleware.metrics import UPSTREAM_DURATION
from cr8_chat.services.knowledge import SYSTEM_PROMPT, build_upstream_prompt

logger = logging.getLogger("cr8")

GENERATION_CONFIG = {
    "temperature": 0.8,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 1024,
    "stopSequences": ["User:", "Human:"],
}

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]

ERROR_BODY_MAX_CHARS = 500


class FailureKind(str, Enum):
    NO_API_KEY = "no_api_key"
    INVALID_API_KEY_FORMAT = "invalid_api_key_format"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    API_ERROR = "api_error"
    BAD_REQUEST = "bad_request"
    INVALID_API_KEY = "invalid_api_key"
    FORBIDDEN = "forbidden"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    SAFETY_BLOCKED = "safety_blocked"
    EMPTY_RESPONSE = "empty_response"


# Misconfiguration rather than an upstream problem
CONFIG_FAILURES = {FailureKind.NO_API_KEY, FailureKind.INVALID_API_KEY_FORMAT}


@dataclass(frozen=True)
class UpstreamSuccess:
    text: str


@dataclass(frozen=True)
class UpstreamFailure:
    kind: FailureKind
    detail: str = ""


UpstreamResult = Union[UpstreamSuccess, UpstreamFailure]


def classify_status(status_code: int) -> FailureKind:
    if status_code == 400:
        return FailureKind.BAD_REQUEST
    if status_code == 401:
        return FailureKind.INVALID_API_KEY
    if status_code == 403:
        return FailureKind.FORBIDDEN
    if status_code == 429:
        return FailureKind.RATE_LIMITED
    if status_code >= 500:
        return FailureKind.SERVER_ERROR
    return FailureKind.API_ERROR


def build_request_body(prompt: str, system_prompt: str = SYSTEM_PROMPT) -> dict:
    return {
        "contents": [{"parts": [{"text": build_upstream_prompt(prompt, system_prompt)}]}],
        "generationConfig": GENERATION_CONFIG,
        "safetySettings": SAFETY_SETTINGS,
    }


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _first(value: Any) -> dict:
    return _as_dict(value[0]) if isinstance(value, list) and value else {}


def extract_answer(data: Any) -> UpstreamResult:
    """Pull the first candidate's text out of a generateContent envelope."""
    if not isinstance(data, dict):
        return UpstreamFailure(FailureKind.API_ERROR, "response body is not a JSON object")

    block_reason = _as_dict(data.get("promptFeedback")).get("blockReason")
    if block_reason:
        return UpstreamFailure(FailureKind.SAFETY_BLOCKED, f"prompt blocked: {block_reason}")

    first = _first(data.get("candidates"))
    if first.get("finishReason") == "SAFETY":
        return UpstreamFailure(FailureKind.SAFETY_BLOCKED, "candidate blocked by safety filters")

    text = _first(_as_dict(first.get("content")).get("parts")).get("text")
    if not isinstance(text, str) or not text.strip():
        return UpstreamFailure(FailureKind.EMPTY_RESPONSE, "no candidate text")

    return UpstreamSuccess(text.strip())


class GeminiClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        model: str = "",
        base_url: str = "",
        key_prefix: str = "",
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.client = client
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.key_prefix = key_prefix or settings.gemini_key_prefix
        self.system_prompt = system_prompt

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def call(self, prompt: str, api_key: str | None, timeout_s: float) -> UpstreamResult:
        """Make at most one generateContent call and classify the outcome.

        Never raises for anticipated failures: missing or malformed keys,
        timeouts, transport errors, HTTP errors, safety blocks and empty
        answers all come back as UpstreamFailure.
        """
        if not api_key:
            return UpstreamFailure(FailureKind.NO_API_KEY, "no API key configured")
        if not api_key.startswith(self.key_prefix):
            return UpstreamFailure(
                FailureKind.INVALID_API_KEY_FORMAT,
                f"API key should start with {self.key_prefix!r}",
            )

        start = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self.client.post(
                    self.url,
                    params={"key": api_key},
                    json=build_request_body(prompt, self.system_prompt),
                    timeout=timeout_s,
                ),
                timeout=timeout_s,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return UpstreamFailure(FailureKind.TIMEOUT, f"no response within {timeout_s}s")
        except httpx.RequestError as e:
            return UpstreamFailure(FailureKind.NETWORK_ERROR, f"{type(e).__name__}: {e}")
        finally:
            elapsed = time.perf_counter() - start
            UPSTREAM_DURATION.observe(elapsed)

        logger.info("[GEMINI] %s -> %d (%dms)", self.model, response.status_code, round(elapsed * 1000))

        if not response.is_success:
            body = response.text[:ERROR_BODY_MAX_CHARS]
            return UpstreamFailure(
                classify_status(response.status_code),
                f"{response.status_code}: {body}",
            )

        try:
            data = response.json()
        except ValueError:
            return UpstreamFailure(FailureKind.API_ERROR, "response body is not valid JSON")
        return extract_answer(data)

