"""Async client for the CR8 chat proxy.

Retries are the caller's business, so they live here rather than in the
server: transport errors, 429 and 5xx responses are retried with
exponential backoff, always inside an overall time budget. A 400 is never
retried since the same prompt will be rejected again.
"""

import asyncio
import logging
import time
from dataclasses import dataclass

import httpx

from cr8_chat.services.knowledge import build_hybrid_prompt, is_valid_training_data

logger = logging.getLogger("cr8.client")

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class ChatClientError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    backoff_s: float = 1.0  # first wait, doubled after every failed attempt
    budget_s: float = 90.0  # overall limit across attempts and waits

    def delay(self, attempt: int) -> float:
        return self.backoff_s * 2**attempt


@dataclass
class ChatReply:
    text: str
    source: str
    reason: str | None = None


class ChatClient:
    def __init__(
        self,
        base_url: str,
        timeout_s: float = 30.0,
        retry: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.retry = retry or RetryPolicy()
        self._client = client or httpx.AsyncClient()

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def ask(self, message: str, training_data: str | None = None) -> ChatReply:
        """Ask the assistant, grounding the prompt in the knowledge base when available."""
        prompt = build_hybrid_prompt(message, training_data)
        response = await self._request("POST", "/api/chat", json={"prompt": prompt})
        data = self._json(response)
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ChatClientError(f"Unexpected response shape: {e!r}") from e
        return ChatReply(text=text, source=data.get("source", "gemini"), reason=data.get("reason"))

    async def health(self) -> dict:
        response = await self._request("GET", "/api/health")
        return self._json(response)

    async def training_data(self) -> str | None:
        """Knowledge base text, or None when the server has nothing usable."""
        response = await self._request("GET", "/api/training-data")
        payload = self._json(response)
        data = payload.get("data") if isinstance(payload, dict) else None
        return data if is_valid_training_data(data) else None

    @staticmethod
    def _json(response: httpx.Response):
        try:
            return response.json()
        except ValueError as e:
            raise ChatClientError(
                f"Response from {response.request.url.path} is not JSON: {response.text[:200]!r}",
                status_code=response.status_code,
            ) from e

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        deadline = time.monotonic() + self.retry.budget_s
        last_error: ChatClientError | None = None

        for attempt in range(self.retry.max_attempts):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            logger.debug("Attempt %d/%d: %s %s", attempt + 1, self.retry.max_attempts, method, url)
            try:
                response = await self._client.request(
                    method, url, timeout=min(self.timeout_s, remaining), **kwargs
                )
            except httpx.TransportError as e:
                last_error = ChatClientError(f"{type(e).__name__}: {e}")
            else:
                if response.status_code not in RETRYABLE_STATUS:
                    if response.is_error:
                        raise ChatClientError(
                            f"{method} {path} failed: {response.status_code} {response.text[:200]}",
                            status_code=response.status_code,
                        )
                    return response
                last_error = ChatClientError(
                    f"{method} {path} failed: {response.status_code}",
                    status_code=response.status_code,
                )

            logger.warning("Attempt %d failed: %s", attempt + 1, last_error)
            if attempt < self.retry.max_attempts - 1:
                delay = self.retry.delay(attempt)
                if time.monotonic() + delay >= deadline:
                    break
                await asyncio.sleep(delay)

        raise last_error or ChatClientError(f"{method} {path}: time budget exhausted")
