from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    message: str = Field(..., description="User chat message")


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    video_url: Optional[str] = Field(default=None, alias="videoUrl")
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
    details: Any = None
    success: bool = False


class DidCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    clip_id: str = Field(..., alias="clipId")
    message: str = "D-ID connection successful"


class StatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    has_openai: bool = Field(..., alias="hasOpenAI")
    has_did: bool = Field(..., alias="hasDID")
    timestamp: str