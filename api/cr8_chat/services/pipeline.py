import logging
import time
from typing import Any

from cr8_chat.config import Settings
from cr8_chat.middleware.metrics import CHAT_FALLBACK, CHAT_REQUESTS, VALIDATION_ERRORS
from cr8_chat.models.gemini import CONFIG_FAILURES, GeminiClient, UpstreamSuccess
from cr8_chat.schemas.chat import ChatResponse, ErrorResponse
from cr8_chat.services.fallback import FallbackGenerator
from cr8_chat.services.validation import PromptValidationError, validate_chat_request

logger = logging.getLogger("cr8")

INTERNAL_ERROR = ErrorResponse(
    error="Internal server error",
    message="Something went wrong processing your request",
)


class ChatPipeline:
    """Validate -> Gemini -> (on failure) fallback -> response envelope.

    Anticipated failures never leave this class as errors: validation
    problems become a 400 body, upstream failures become a 200 fallback
    answer. Only unexpected exceptions turn into a 500.
    """

    def __init__(self, settings: Settings, gemini: GeminiClient, fallback: FallbackGenerator):
        self.settings = settings
        self.gemini = gemini
        self.fallback = fallback

    async def handle(self, body: Any) -> tuple[dict, int]:
        """Returns (json_body, http_status)."""
        try:
            return await self._handle(body)
        except Exception:
            logger.exception("Unhandled error in chat pipeline")
            return INTERNAL_ERROR.model_dump(exclude_none=True), 500

    async def _handle(self, body: Any) -> tuple[dict, int]:
        start = time.perf_counter()

        try:
            request = validate_chat_request(body, self.settings.max_prompt_chars)
        except PromptValidationError as e:
            logger.info("Rejected chat request: %s (%s)", e.kind.value, e.details)
            VALIDATION_ERRORS.labels(code=e.kind.value).inc()
            return e.to_body(), 400

        logger.info("[CHAT] prompt: %d chars | '%s'", len(request.prompt), request.prompt[:100])

        result = await self.gemini.call(
            request.prompt,
            self.settings.gemini_api_key,
            self.settings.gemini_timeout_s,
        )

        if isinstance(result, UpstreamSuccess):
            response = ChatResponse.from_text(result.text, source="gemini")
        else:
            log = logger.info if result.kind in CONFIG_FAILURES else logger.warning
            log("Gemini unavailable (%s): %s, using fallback", result.kind.value, result.detail)
            CHAT_FALLBACK.labels(reason=result.kind.value).inc()
            response = ChatResponse.from_text(
                self.fallback.generate(request.prompt),
                source="fallback",
                reason=result.kind.value,
            )

        CHAT_REQUESTS.labels(source=response.source).inc()
        logger.info(
            "[CHAT] %s: %d chars (%dms)",
            response.source,
            len(response.text),
            round((time.perf_counter() - start) * 1000),
        )
        return response.model_dump(exclude_none=True), 200
