from typing import Literal

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    prompt: str = Field(..., description="User prompt, already trimmed")


class Part(BaseModel):
    text: str


class Content(BaseModel):
    parts: list[Part]
    role: str = "model"


class Candidate(BaseModel):
    content: Content


class ChatResponse(BaseModel):
    candidates: list[Candidate] = Field(
        description="Same nesting as the Gemini generateContent envelope"
    )
    source: Literal["gemini", "fallback"]
    reason: str | None = Field(
        default=None, description="Failure kind, only set when source is fallback"
    )

    @classmethod
    def from_text(cls, text: str, source: str, reason: str | None = None) -> "ChatResponse":
        return cls(
            candidates=[Candidate(content=Content(parts=[Part(text=text)]))],
            source=source,
            reason=reason,
        )

    @property
    def text(self) -> str:
        return self.candidates[0].content.parts[0].text


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
    message: str | None = None
    code: str | None = None
