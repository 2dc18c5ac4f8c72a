import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cr8_chat.config import settings
from cr8_chat.dependencies import close_http_client, close_redis
from cr8_chat.middleware.rate_limit import RateLimitMiddleware
from cr8_chat.middleware.request_log import RequestLogMiddleware
from cr8_chat.middleware.security import SecurityHeadersMiddleware
from cr8_chat.routers import chat, health, training

logger = logging.getLogger("cr8")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    # httpx logs full request URLs, which carry the Gemini key
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.info("CR8 chat proxy starting up")
    logger.info("Gemini API: %s", "configured" if settings.gemini_configured else "not configured")
    if settings.gemini_configured and not settings.gemini_key_format_valid:
        logger.warning(
            "Gemini API key does not start with %r, every chat will use the fallback",
            settings.gemini_key_prefix,
        )
    logger.info("Model: %s (timeout %ss)", settings.gemini_model, settings.gemini_timeout_s)
    logger.info("Allowed origins: %s", ", ".join(settings.allowed_cors_origins()))

    yield

    logger.info("CR8 chat proxy shutting down")
    await close_http_client()
    await close_redis()


API_DESCRIPTION = """
# CR8 Chat Proxy

Backend for the CR8 Digital Creative Agency assistant.

Prompts are forwarded to Gemini. When no API key is configured or the call
fails, a canned CR8 answer is returned instead, so the caller always gets
text back. The `source` field says where it came from (`gemini` or
`fallback`), and `reason` says why the fallback was used.
"""

app = FastAPI(
    title="CR8 Chat Proxy",
    description=API_DESCRIPTION,
    version=health.VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "health", "description": "Process status and Gemini diagnostics"},
        {"name": "chat", "description": "Chat with the CR8 assistant"},
        {"name": "training", "description": "CR8 knowledge base"},
    ],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={"error": "Not found", "message": "The requested endpoint was not found"},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": "Something went wrong"},
    )


# Added before CORS so 429 responses still carry CORS headers
if settings.rate_limit_enabled:
    app.add_middleware(RateLimitMiddleware)

# CORS, explicit origins only
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLogMiddleware)

# Prometheus metrics
if settings.prometheus_enabled:
    from cr8_chat.middleware.metrics import setup_metrics

    setup_metrics(app)

# Routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(training.router, prefix="/api", tags=["training"])
app.include_router(chat.router, prefix="/api", tags=["chat"])


def run():
    import uvicorn

    uvicorn.run(
        "cr8_chat.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level,
        proxy_headers=True,
    )
