from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime_s: float
    version: str
    gemini_configured: bool
    gemini_key_format_valid: bool
    redis_connected: bool | None = None


class GeminiTestResponse(BaseModel):
    status: str
    model: str
    reason: str | None = None
    detail: str | None = None
    response: str | None = None
