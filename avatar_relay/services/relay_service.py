import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from avatar_relay.services.completion_service import CompletionService
from avatar_relay.services.video_service import OutcomeKind, PollSettings, VideoOutcome, VideoService

logger = logging.getLogger(__name__)


@dataclass
class RelayResult:
    text: str
    video: VideoOutcome

    @property
    def video_url(self) -> Optional[str]:
        return self.video.video_url if self.video.kind is OutcomeKind.READY else None


class RelayService:
    """Complete a chat message, then try to turn the reply into an avatar clip.

    Completion failures propagate as ``CompletionError``. Video synthesis is
    best-effort and always ends in a ``VideoOutcome``; ``video=None`` means no
    video credential is configured.
    """

    def __init__(
        self,
        completion: CompletionService,
        video: Optional[VideoService] = None,
        poll: PollSettings = PollSettings(),
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.completion = completion
        self.video = video
        self.poll = poll
        self.sleep = sleep

    def handle(self, message: str) -> RelayResult:
        logger.info("Received message: %s", message)
        completion = self.completion.complete(message)

        if self.video is None:
            logger.info("No D-ID API key provided, skipping avatar generation")
            outcome = VideoOutcome(OutcomeKind.NOT_CONFIGURED, reason="Video provider credential not configured.")
        else:
            logger.info("Attempting D-ID clip generation")
            outcome = self.video.synthesize(completion.text, self.poll, sleep=self.sleep)

        if outcome.degraded:
            logger.info("Responding without video (%s): %s", outcome.kind.value, outcome.reason)
        return RelayResult(text=completion.text, video=outcome)
