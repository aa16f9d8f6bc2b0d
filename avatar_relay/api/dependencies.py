from typing import Optional

from fastapi import Depends

from avatar_relay.config import Settings, get_settings
from avatar_relay.services.completion_service import CompletionService
from avatar_relay.services.http_client import get_did_client, get_openai_client
from avatar_relay.services.relay_service import RelayService
from avatar_relay.services.video_service import PollSettings, VideoService


def get_completion_service(settings: Settings = Depends(get_settings)) -> CompletionService:
    return CompletionService(
        get_openai_client(settings),
        model=settings.openai_model,
        system_prompt=settings.openai_system_prompt,
        max_tokens=settings.openai_max_tokens,
        temperature=settings.openai_temperature,
    )


def get_video_service(settings: Settings = Depends(get_settings)) -> Optional[VideoService]:
    """Return None when no video credential is configured."""
    if not settings.has_did:
        return None
    return VideoService(
        get_did_client(settings),
        presenter_id=settings.did_presenter_id,
        voice_provider=settings.did_voice_provider,
        voice_id=settings.did_voice_id,
        result_format=settings.did_result_format,
        text_limit=settings.video_text_limit,
        submit_timeout=settings.did_submit_timeout,
        status_timeout=settings.did_status_timeout,
    )


def get_relay_service(
    settings: Settings = Depends(get_settings),
    completion: CompletionService = Depends(get_completion_service),
    video: Optional[VideoService] = Depends(get_video_service),
) -> RelayService:
    poll = PollSettings(interval=settings.video_poll_interval, max_attempts=settings.video_max_attempts)
    return RelayService(completion, video, poll=poll)
