import logging
import time
from datetime import datetime, timezone

import redis.asyncio as redis
from fastapi import APIRouter

from cr8_chat.dependencies import GeminiDep, SettingsDep, get_redis
from cr8_chat.models.gemini import UpstreamSuccess
from cr8_chat.schemas.health import GeminiTestResponse, HealthResponse

logger = logging.getLogger("cr8")
router = APIRouter()

VERSION = "0.1.0"
TEST_PROMPT = "Hello, this is a test message."

_started_at = time.monotonic()


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(app_settings: SettingsDep):
    """Process status and uptime. Redis is only checked when rate limiting uses it."""
    redis_ok = None
    if app_settings.rate_limit_enabled:
        redis_ok = False
        try:
            r = await get_redis()
            await r.ping()
            redis_ok = True
        except (redis.RedisError, OSError) as e:
            logger.warning("Redis ping failed: %s", e)

    return HealthResponse(
        status="degraded" if redis_ok is False else "ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime_s=round(time.monotonic() - _started_at, 3),
        version=VERSION,
        gemini_configured=app_settings.gemini_configured,
        gemini_key_format_valid=app_settings.gemini_key_format_valid,
        redis_connected=redis_ok,
    )


@router.get("/test-gemini", response_model=GeminiTestResponse, summary="Gemini connectivity test")
async def gemini_check(app_settings: SettingsDep, gemini: GeminiDep):
    """Runs one real generateContent call with a fixed prompt and reports the outcome."""
    result = await gemini.call(TEST_PROMPT, app_settings.gemini_api_key, app_settings.gemini_timeout_s)
    if isinstance(result, UpstreamSuccess):
        return GeminiTestResponse(status="success", model=gemini.model, response=result.text)
    return GeminiTestResponse(
        status="error",
        model=gemini.model,
        reason=result.kind.value,
        detail=result.detail,
    )
