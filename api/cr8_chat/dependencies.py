import logging
from typing import Annotated

import httpx
import redis.asyncio as redis
from fastapi import Depends

from cr8_chat.config import Settings, settings
from cr8_chat.models.gemini import GeminiClient
from cr8_chat.services.fallback import FallbackGenerator, fallback_generator
from cr8_chat.services.pipeline import ChatPipeline

logger = logging.getLogger("cr8")

_http_client: httpx.AsyncClient | None = None
_redis_pool: redis.Redis | None = None


def get_settings() -> Settings:
    return settings


async def get_http_client() -> httpx.AsyncClient:
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
        )
    return _http_client


async def close_http_client():
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


async def get_redis() -> redis.Redis:
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.from_url(
            settings.redis_url, decode_responses=True
        )
    return _redis_pool


async def close_redis():
    global _redis_pool
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None


async def get_gemini_client(
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> GeminiClient:
    return GeminiClient(
        client,
        model=app_settings.gemini_model,
        base_url=app_settings.gemini_base_url,
        key_prefix=app_settings.gemini_key_prefix,
    )


def get_fallback_generator() -> FallbackGenerator:
    return fallback_generator


async def get_pipeline(
    app_settings: Annotated[Settings, Depends(get_settings)],
    gemini: Annotated[GeminiClient, Depends(get_gemini_client)],
    fallback: Annotated[FallbackGenerator, Depends(get_fallback_generator)],
) -> ChatPipeline:
    return ChatPipeline(app_settings, gemini, fallback)


SettingsDep = Annotated[Settings, Depends(get_settings)]
GeminiDep = Annotated[GeminiClient, Depends(get_gemini_client)]
PipelineDep = Annotated[ChatPipeline, Depends(get_pipeline)]
