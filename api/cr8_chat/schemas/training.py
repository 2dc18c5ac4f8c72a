from pydantic import BaseModel, Field


class TrainingDataResponse(BaseModel):
    data: str = Field(..., description="CR8 knowledge base text")
    timestamp: str
