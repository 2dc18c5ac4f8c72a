import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from cr8_chat.dependencies import PipelineDep
from cr8_chat.schemas.chat import ChatResponse, ErrorResponse

logger = logging.getLogger("cr8")
router = APIRouter()

CHAT_RESPONSES = {
    200: {"model": ChatResponse, "description": "Answer from Gemini or from the fallback generator"},
    400: {"model": ErrorResponse, "description": "Missing, non-string, empty or too long prompt"},
    500: {"model": ErrorResponse, "description": "Unexpected internal error"},
}

CHAT_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "required": ["prompt"],
                    "properties": {"prompt": {"type": "string", "maxLength": 10000}},
                },
                "example": {"prompt": "What services does CR8 offer?"},
            }
        },
    }
}


async def _read_json(request: Request):
    try:
        return await request.json()
    except ValueError:
        # Invalid JSON is rejected by the validator like a missing prompt
        return None


@router.post(
    "/chat",
    responses=CHAT_RESPONSES,
    openapi_extra=CHAT_BODY,
    summary="Ask the CR8 assistant",
)
async def chat(request: Request, pipeline: PipelineDep):
    """Send a prompt and get an answer in the Gemini response envelope.

    When Gemini is not configured or fails, the answer comes from the canned
    CR8 fallback texts with `source: "fallback"` and a `reason` code. The
    answer is always at `candidates[0].content.parts[0].text`.

    **Example:** `{"prompt": "Hello there"}`
    """
    body = await _read_json(request)
    content, status_code = await pipeline.handle(body)
    return JSONResponse(content=content, status_code=status_code)


# Path used by the browser configuration as its backend proxy
router.add_api_route(
    "/gemini",
    chat,
    methods=["POST"],
    responses=CHAT_RESPONSES,
    openapi_extra=CHAT_BODY,
    summary="Ask the CR8 assistant (alias of /chat)",
)
