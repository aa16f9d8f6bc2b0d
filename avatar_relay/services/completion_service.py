import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from avatar_relay.services.http_client import error_details, error_status

logger = logging.getLogger(__name__)


class CompletionError(RuntimeError):
    """The completion call failed; fatal to the chat request."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details if details is not None else message


@dataclass
class CompletionResult:
    text: str


class CompletionService:
    def __init__(
        self,
        client: httpx.Client,
        *,
        model: str,
        system_prompt: str,
        max_tokens: int,
        temperature: float,
    ):
        self.client = client
        self.model = model
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.temperature = temperature

    def build_payload(self, message: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": message},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def complete(self, message: str) -> CompletionResult:
        try:
            response = self.client.post("/chat/completions", json=self.build_payload(message))
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(
                "Completion request failed: status=%s details=%s",
                error_status(exc),
                error_details(exc),
            )
            raise CompletionError(str(exc), status_code=error_status(exc), details=error_details(exc)) from exc

        try:
            text = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error("Malformed completion response: %s", response.text)
            raise CompletionError("Completion provider returned a malformed response.") from exc

        if not isinstance(text, str) or not text.strip():
            raise CompletionError("Completion provider returned no text.")

        logger.info("Completion reply: %s", text)
        return CompletionResult(text=text)
