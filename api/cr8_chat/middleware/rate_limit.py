import logging

import redis.asyncio as redis
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from cr8_chat.config import settings
from cr8_chat.dependencies import get_redis

logger = logging.getLogger("cr8")

RATE_LIMITED_PREFIX = "/api/"
# Paths exempt from rate limiting
EXEMPT_PATHS = {"/api/health"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window request limit per client IP, counted in Redis.

    Uses the shared pool from ``dependencies.get_redis`` so the lifespan
    shutdown closes it.
    """

    def __init__(self, app, limit: int = 0, window_s: int = 0):
        super().__init__(app)
        self.limit = limit or settings.rate_limit_requests
        self.window_s = window_s or settings.rate_limit_window_s

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if not path.startswith(RATE_LIMITED_PREFIX) or path in EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        key = f"cr8:rate:{client_ip}"

        try:
            r = await get_redis()
            pipe = r.pipeline()
            pipe.incr(key)
            pipe.ttl(key)
            count, ttl = await pipe.execute()
            # A key without expiry starts (or restarts) the window
            if ttl < 0:
                await r.expire(key, self.window_s)
                ttl = self.window_s
            if count > self.limit:
                return JSONResponse(
                    status_code=429,
                    content={"error": "Too many requests, please try again later"},
                    headers={"Retry-After": str(ttl)},
                )
        except (redis.RedisError, OSError) as e:
            # If Redis is down, allow the request
            logger.warning("Rate limit check skipped: %s", e)

        return await call_next(request)
