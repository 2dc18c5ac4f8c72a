"""Tests for the retrying chat client."""

import json

import httpx
import pytest

from conftest import gemini_envelope, mock_http
from cr8_chat.client import ChatClient, ChatClientError, RetryPolicy
from cr8_chat.services.knowledge import KNOWLEDGE_BASE

NO_WAIT = RetryPolicy(max_attempts=3, backoff_s=0.0, budget_s=10.0)


def chat_body(text="Answer", source="gemini", reason=None) -> dict:
    body = {**gemini_envelope(text), "source": source}
    body["candidates"][0].pop("finishReason")
    if reason:
        body["reason"] = reason
    return body


def make_client(handler, retry=NO_WAIT) -> ChatClient:
    return ChatClient("http://cr8.test/", retry=retry, client=mock_http(handler))


class TestRetryPolicy:
    def test_exponential_delay(self):
        policy = RetryPolicy(backoff_s=1.0)
        assert [policy.delay(i) for i in range(3)] == [1.0, 2.0, 4.0]


class TestAsk:
    @pytest.mark.asyncio
    async def test_returns_reply(self, recorded_requests):
        def handler(request):
            recorded_requests.append(request)
            return httpx.Response(200, json=chat_body("Hi!", "fallback", "no_api_key"))

        async with make_client(handler) as client:
            reply = await client.ask("hello")

        assert reply.text == "Hi!"
        assert reply.source == "fallback"
        assert reply.reason == "no_api_key"
        assert recorded_requests[0].url == "http://cr8.test/api/chat"

    @pytest.mark.asyncio
    async def test_prompt_grounded_in_training_data(self, recorded_requests):
        def handler(request):
            recorded_requests.append(json.loads(request.content))
            return httpx.Response(200, json=chat_body())

        async with make_client(handler) as client:
            await client.ask("What is LOE 2?", training_data=KNOWLEDGE_BASE)

        prompt = recorded_requests[0]["prompt"]
        assert "=== CR8 INFO ===" in prompt
        assert "Question: What is LOE 2?" in prompt

    @pytest.mark.asyncio
    async def test_retries_server_errors(self):
        responses = iter([httpx.Response(503), httpx.Response(429), httpx.Response(200, json=chat_body("ok"))])
        async with make_client(lambda r: next(responses)) as client:
            reply = await client.ask("hello")
        assert reply.text == "ok"

    @pytest.mark.asyncio
    async def test_retries_transport_errors(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json=chat_body("ok"))

        async with make_client(handler) as client:
            assert (await client.ask("hello")).text == "ok"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(502)

        async with make_client(handler) as client:
            with pytest.raises(ChatClientError) as exc_info:
                await client.ask("hello")
        assert len(calls) == 3
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_does_not_retry_400(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400, json={"error": "Invalid prompt provided"})

        async with make_client(handler) as client:
            with pytest.raises(ChatClientError) as exc_info:
                await client.ask("hello")
        assert len(calls) == 1
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_budget_stops_backoff(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        # The first backoff alone would exceed the budget
        policy = RetryPolicy(max_attempts=5, backoff_s=60.0, budget_s=1.0)
        async with make_client(handler, retry=policy) as client:
            with pytest.raises(ChatClientError):
                await client.ask("hello")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_unexpected_shape(self):
        async with make_client(lambda r: httpx.Response(200, json={"reply": "Echo"})) as client:
            with pytest.raises(ChatClientError):
                await client.ask("hello")

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        handler = lambda r: httpx.Response(200, text="<html>proxy</html>")
        async with make_client(handler) as client:
            with pytest.raises(ChatClientError) as exc_info:
                await client.ask("hello")
        assert exc_info.value.status_code == 200
        assert "not JSON" in str(exc_info.value)


class TestOtherEndpoints:
    @pytest.mark.asyncio
    async def test_training_data(self):
        handler = lambda r: httpx.Response(200, json={"data": KNOWLEDGE_BASE, "timestamp": "now"})
        async with make_client(handler) as client:
            assert await client.training_data() == KNOWLEDGE_BASE

    @pytest.mark.asyncio
    async def test_training_data_too_short(self):
        handler = lambda r: httpx.Response(200, json={"data": "CR8", "timestamp": "now"})
        async with make_client(handler) as client:
            assert await client.training_data() is None

    @pytest.mark.asyncio
    async def test_health(self):
        handler = lambda r: httpx.Response(200, json={"status": "ok"})
        async with make_client(handler) as client:
            assert (await client.health())["status"] == "ok"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["health", "training_data"])
    async def test_non_json_body(self, method):
        handler = lambda r: httpx.Response(200, text="<html>proxy</html>")
        async with make_client(handler) as client:
            with pytest.raises(ChatClientError):
                await getattr(client, method)()
