from prometheus_client import Counter, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

CHAT_REQUESTS = Counter(
    "cr8_chat_requests_total",
    "Chat requests answered, by provenance",
    ["source"],
)

CHAT_FALLBACK = Counter(
    "cr8_chat_fallback_total",
    "Chat requests answered by the fallback generator",
    ["reason"],
)

VALIDATION_ERRORS = Counter(
    "cr8_validation_errors_total",
    "Chat requests rejected before the upstream call",
    ["code"],
)

UPSTREAM_DURATION = Histogram(
    "cr8_upstream_duration_seconds",
    "Gemini generateContent call duration",
    buckets=[0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0, 20.0, 30.0],
)


def setup_metrics(app):
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/metrics", "/docs", "/openapi.json"],
    ).instrument(app).expose(app, endpoint="/metrics")
