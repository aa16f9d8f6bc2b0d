import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from avatar_relay.api.dependencies import get_relay_service, get_video_service
from avatar_relay.config import Settings, get_settings
from avatar_relay.models.schemas import ChatRequest, ChatResponse, DidCheckResponse, ErrorResponse, StatusResponse
from avatar_relay.services.completion_service import CompletionError
from avatar_relay.services.relay_service import RelayService
from avatar_relay.services.video_service import VideoProviderError, VideoService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")
health_router = APIRouter()

TEST_CLIP_TEXT = "Testing D-ID connection"


def _error(status_code: int, error: str, details=None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def chat(payload: ChatRequest, relay: RelayService = Depends(get_relay_service)):
    message = payload.message.strip()
    if not message:
        return _error(400, "Message cannot be empty.")

    try:
        result = relay.handle(message)
    except CompletionError as exc:
        logger.error("Chat request failed: status=%s details=%s", exc.status_code, exc.details)
        return _error(500, "Failed to process request", exc.details)

    return ChatResponse(text=result.text, video_url=result.video_url, success=True)


@router.get("/test-did", response_model=DidCheckResponse)
def check_did_connection(video: Optional[VideoService] = Depends(get_video_service)):
    if video is None:
        return JSONResponse(status_code=500, content={"success": False, "error": "DID_API_KEY is not configured."})

    try:
        clip_id = video.submit_clip(TEST_CLIP_TEXT)
    except VideoProviderError as exc:
        logger.error("D-ID connection test failed: %s", exc)
        return JSONResponse(status_code=500, content={"success": False, "error": exc.details})

    return DidCheckResponse(clip_id=clip_id)


@router.get("/test", response_model=StatusResponse)
def backend_status(settings: Settings = Depends(get_settings)):
    return StatusResponse(
        message="Backend is working!",
        has_openai=settings.has_openai,
        has_did=settings.has_did,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@health_router.get("/health")
def health_check(settings: Settings = Depends(get_settings)):
    return {"status": "OK", "port": settings.app_port}
