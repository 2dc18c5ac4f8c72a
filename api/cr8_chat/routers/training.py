from datetime import datetime, timezone

from fastapi import APIRouter

from cr8_chat.dependencies import SettingsDep
from cr8_chat.schemas.training import TrainingDataResponse
from cr8_chat.services.knowledge import KNOWLEDGE_BASE

router = APIRouter()


@router.get("/training-data", response_model=TrainingDataResponse, summary="CR8 knowledge base")
async def training_data(app_settings: SettingsDep):
    """Returns the knowledge base text the frontend uses to ground its prompts."""
    return TrainingDataResponse(
        data=app_settings.training_data or KNOWLEDGE_BASE,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
