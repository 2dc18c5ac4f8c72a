from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # API
    api_host: str = "0.0.0.0"
    api_port: int = 3001
    log_level: str = "info"

    # Gemini API
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout_s: float = 30.0
    gemini_key_prefix: str = "AIza"

    # Limits
    max_prompt_chars: int = 10_000

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # Rate limiting (per client IP, fixed window)
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 100
    rate_limit_window_s: int = 15 * 60

    # Monitoring
    prometheus_enabled: bool = True

    # CORS
    cors_origins: List[str] = [
        "https://cr8-agency.netlify.app",
    ]
    frontend_url: str = ""
    allowed_origins: str = ""  # comma-separated

    # Knowledge base override, empty means the built-in text
    training_data: str = ""

    model_config = {
        "env_file": ["../.env", ".env"],
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "frozen": True,
    }

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def gemini_key_format_valid(self) -> bool:
        return self.gemini_api_key.startswith(self.gemini_key_prefix)

    def allowed_cors_origins(self) -> list[str]:
        origins = list(self.cors_origins)
        if self.frontend_url:
            origins.append(self.frontend_url)
        origins.extend(o.strip() for o in self.allowed_origins.split(",") if o.strip())
        # Never "*": credentials are allowed
        return [o for o in dict.fromkeys(origins) if o != "*"]


settings = Settings()
