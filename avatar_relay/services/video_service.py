import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

import httpx

from avatar_relay.services.http_client import error_details, error_status

logger = logging.getLogger(__name__)


class VideoProviderError(RuntimeError):
    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details if details is not None else message


class JobStatus(str, Enum):
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


_ERROR_STATUSES = {"error", "rejected"}


@dataclass
class SynthesisJob:
    id: str
    status: JobStatus = JobStatus.PROCESSING
    result_url: Optional[str] = None
    raw_status: Optional[str] = None


class OutcomeKind(str, Enum):
    READY = "ready"
    NOT_CONFIGURED = "not_configured"
    TIMED_OUT = "timed_out"
    PROVIDER_ERROR = "provider_error"
    REQUEST_FAILED = "request_failed"


@dataclass(frozen=True)
class VideoOutcome:
    """Result of one synthesis attempt. Only READY carries a video URL."""

    kind: OutcomeKind
    video_url: Optional[str] = None
    reason: Optional[str] = None
    attempts: int = 0

    @property
    def degraded(self) -> bool:
        return self.kind is not OutcomeKind.READY


@dataclass(frozen=True)
class PollSettings:
    interval: float = 3.0
    max_attempts: int = 30


def parse_job(data: Dict[str, Any]) -> SynthesisJob:
    job_id = data.get("id")
    if not job_id or not isinstance(job_id, str):
        raise VideoProviderError("Video provider did not return a clip id.")

    raw_status = data.get("status") or ""
    result_url = data.get("result_url")
    if not isinstance(raw_status, str):
        raise VideoProviderError(f"Video provider returned an invalid status: {raw_status!r}", details=data)
    if result_url is not None and not isinstance(result_url, str):
        raise VideoProviderError(f"Video provider returned an invalid result URL: {result_url!r}", details=data)

    raw_status = raw_status.lower()
    if raw_status == "done":
        status = JobStatus.DONE
    elif raw_status in _ERROR_STATUSES:
        status = JobStatus.ERROR
    else:
        status = JobStatus.PROCESSING
    return SynthesisJob(id=job_id, status=status, result_url=result_url, raw_status=raw_status)


def poll_until_done(
    fetch_status: Callable[[str], SynthesisJob],
    job_id: str,
    poll: PollSettings,
    sleep: Callable[[float], None] = time.sleep,
) -> VideoOutcome:
    """Sleep, then fetch the job status, up to ``poll.max_attempts`` times.

    Stops on the first ``done`` or ``error`` status. Exceptions raised by
    ``fetch_status`` propagate to the caller.
    """
    for attempt in range(1, poll.max_attempts + 1):
        sleep(poll.interval)
        job = fetch_status(job_id)
        logger.info("Clip %s attempt %d: status %s", job_id, attempt, job.raw_status or job.status.value)

        if job.status is JobStatus.DONE:
            if not job.result_url:
                return VideoOutcome(
                    OutcomeKind.PROVIDER_ERROR,
                    reason="Clip finished without a result URL.",
                    attempts=attempt,
                )
            logger.info("Video ready: %s", job.result_url)
            return VideoOutcome(OutcomeKind.READY, video_url=job.result_url, attempts=attempt)
        if job.status is JobStatus.ERROR:
            logger.error("Clip %s processing failed with status %s", job_id, job.raw_status)
            return VideoOutcome(
                OutcomeKind.PROVIDER_ERROR,
                reason=f"Clip ended with status {job.raw_status}.",
                attempts=attempt,
            )

    logger.info("Video generation timed out after %d attempts", poll.max_attempts)
    return VideoOutcome(
        OutcomeKind.TIMED_OUT,
        reason=f"Clip not ready after {poll.max_attempts} attempts.",
        attempts=poll.max_attempts,
    )


class VideoService:
    def __init__(
        self,
        client: httpx.Client,
        *,
        presenter_id: str,
        voice_provider: str,
        voice_id: str,
        result_format: str = "mp4",
        text_limit: int = 500,
        submit_timeout: float = 15.0,
        status_timeout: float = 5.0,
    ):
        self.client = client
        self.presenter_id = presenter_id
        self.voice_provider = voice_provider
        self.voice_id = voice_id
        self.result_format = result_format
        self.text_limit = text_limit
        self.submit_timeout = submit_timeout
        self.status_timeout = status_timeout

    def build_payload(self, text: str) -> Dict[str, Any]:
        return {
            "presenter_id": self.presenter_id,
            "script": {
                "type": "text",
                "subtitles": "false",
                "provider": {"type": self.voice_provider, "voice_id": self.voice_id},
                "input": text[: self.text_limit],
                "ssml": "false",
            },
            "config": {"result_format": self.result_format},
            "presenter_config": {"crop": {"type": "wide"}},
        }

    def submit_clip(self, text: str) -> str:
        try:
            response = self.client.post("/clips", json=self.build_payload(text), timeout=self.submit_timeout)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise VideoProviderError(f"Clip submission failed: {exc}", details=error_details(exc)) from exc

        clip_id = _json(response).get("id")
        if not clip_id or not isinstance(clip_id, str):
            raise VideoProviderError("Video provider did not return a clip id.")
        logger.info("Clip id: %s", clip_id)
        return clip_id

    def fetch_status(self, clip_id: str) -> SynthesisJob:
        try:
            response = self.client.get(f"/clips/{clip_id}", timeout=self.status_timeout)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise VideoProviderError(f"Clip status request failed: {exc}", details=error_details(exc)) from exc
        data = _json(response)
        data.setdefault("id", clip_id)
        return parse_job(data)

    def synthesize(
        self,
        text: str,
        poll: PollSettings,
        sleep: Callable[[float], None] = time.sleep,
    ) -> VideoOutcome:
        """Submit a clip and poll for it. Never raises for provider failures."""
        try:
            clip_id = self.submit_clip(text)
            return poll_until_done(self.fetch_status, clip_id, poll, sleep=sleep)
        except (VideoProviderError, httpx.HTTPError) as exc:
            logger.error(
                "Video provider error: status=%s details=%s",
                error_status(exc.__cause__ or exc),
                getattr(exc, "details", exc),
            )
            return VideoOutcome(OutcomeKind.REQUEST_FAILED, reason=str(exc))


def _json(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError as exc:
        raise VideoProviderError("Video provider returned a non-JSON response.") from exc
    if not isinstance(data, dict):
        raise VideoProviderError("Video provider returned an unexpected response body.")
    return data
