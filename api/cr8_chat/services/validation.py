from enum import Enum
from typing import Any

from cr8_chat.schemas.chat import ChatRequest


class ValidationErrorKind(str, Enum):
    MISSING_OR_WRONG_TYPE = "missing_or_wrong_type"
    TOO_LONG = "too_long"


class PromptValidationError(Exception):
    def __init__(self, kind: ValidationErrorKind, details: str):
        super().__init__(details)
        self.kind = kind
        self.details = details

    def to_body(self) -> dict:
        return {
            "error": "Invalid prompt provided",
            "details": self.details,
            "code": self.kind.value,
        }


def validate_chat_request(body: Any, max_chars: int) -> ChatRequest:
    """Check a decoded JSON body and return the trimmed prompt.

    Raises PromptValidationError before any upstream work is done.
    """
    prompt = body.get("prompt") if isinstance(body, dict) else None
    if not isinstance(prompt, str) or not prompt.strip():
        raise PromptValidationError(
            ValidationErrorKind.MISSING_OR_WRONG_TYPE,
            "Prompt must be a non-empty string",
        )

    prompt = prompt.strip()
    if len(prompt) > max_chars:
        raise PromptValidationError(
            ValidationErrorKind.TOO_LONG,
            f"Prompt must be at most {max_chars} characters (got {len(prompt)})",
        )
    return ChatRequest(prompt=prompt)
