import logging
from typing import Optional

import httpx

from avatar_relay.config import Settings

logger = logging.getLogger(__name__)


class ProviderClientError(RuntimeError):
    """Raised when an outbound provider client cannot be created."""


def error_details(exc: Exception):
    """Return the provider response body for HTTP errors, else the error message."""
    response = getattr(exc, "response", None)
    if response is None:
        return str(exc)
    try:
        return response.json()
    except ValueError:
        return response.text or str(exc)


def error_status(exc: Exception) -> Optional[int]:
    response = getattr(exc, "response", None)
    return response.status_code if response is not None else None


def _create_client(base_url: str, authorization: str, timeout: float) -> httpx.Client:
    try:
        client = httpx.Client(
            base_url=base_url,
            headers={
                "accept": "application/json",
                "content-type": "application/json",
                "authorization": authorization,
            },
            timeout=timeout,
        )
    except (httpx.HTTPError, ValueError) as exc:
        logger.exception("Failed to create HTTP client for %s", base_url)
        raise ProviderClientError(f"Unable to create client for {base_url}.") from exc
    return client


_openai_client: Optional[httpx.Client] = None
_did_client: Optional[httpx.Client] = None


def get_openai_client(settings: Settings) -> httpx.Client:
    global _openai_client
    if _openai_client is None:
        _openai_client = _create_client(
            settings.openai_base_url,
            f"Bearer {settings.openai_api_key or ''}",
            settings.openai_timeout,
        )
    return _openai_client


def get_did_client(settings: Settings) -> httpx.Client:
    global _did_client
    if _did_client is None:
        _did_client = _create_client(
            settings.did_base_url,
            f"Basic {settings.did_api_key or ''}",
            settings.did_submit_timeout,
        )
    return _did_client


def close_clients() -> None:
    global _openai_client, _did_client
    for client in (_openai_client, _did_client):
        if client is not None:
            client.close()
    _openai_client = None
    _did_client = None
