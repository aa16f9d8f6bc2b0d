"""
Shared fixtures: scripted provider transports and a FastAPI test client.
"""

import json
from typing import Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from avatar_relay.api.dependencies import get_relay_service, get_video_service
from avatar_relay.app import app
from avatar_relay.config import Settings, get_settings
from avatar_relay.services.completion_service import CompletionService
from avatar_relay.services.relay_service import RelayService
from avatar_relay.services.video_service import PollSettings, VideoService

OPENAI_URL = "https://openai.test/v1"
DID_URL = "https://did.test"


class ScriptedProvider:
    """httpx handler that records requests and answers from a script.

    ``routes`` maps ``"METHOD /path"`` to a list of responses (or exceptions)
    consumed in order; the last entry repeats once the list is exhausted.
    """

    def __init__(self, routes: Dict[str, List]):
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.method} {request.url.path}"
        script = self.routes.get(key)
        if not script:
            return httpx.Response(404, json={"error": f"no route for {key}"})
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, Exception):
            raise item
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def json_body(self, method: str, path: str, index: int = 0):
        return json.loads(self.calls(method, path)[index].content)


def completion_reply(text: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": text}}]})


def clip_status(status: str, result_url: str = None) -> httpx.Response:
    body = {"id": "clp_123", "status": status}
    if result_url:
        body["result_url"] = result_url
    return httpx.Response(200, json=body)


def make_client(base_url: str, provider: ScriptedProvider) -> httpx.Client:
    return httpx.Client(base_url=base_url, transport=httpx.MockTransport(provider))


@pytest.fixture
def relay_settings() -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        did_api_key="did-test",
        openai_base_url=OPENAI_URL,
        did_base_url=DID_URL,
        video_poll_interval=0,
        video_max_attempts=5,
        app_port=5000,
    )


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps) -> Callable[[float], None]:
    return sleeps.append


@pytest.fixture
def build_completion(relay_settings):
    def factory(provider: ScriptedProvider) -> CompletionService:
        return CompletionService(
            make_client(OPENAI_URL, provider),
            model=relay_settings.openai_model,
            system_prompt=relay_settings.openai_system_prompt,
            max_tokens=relay_settings.openai_max_tokens,
            temperature=relay_settings.openai_temperature,
        )

    return factory


@pytest.fixture
def build_video(relay_settings):
    def factory(provider: ScriptedProvider) -> VideoService:
        return VideoService(
            make_client(DID_URL, provider),
            presenter_id=relay_settings.did_presenter_id,
            voice_provider=relay_settings.did_voice_provider,
            voice_id=relay_settings.did_voice_id,
            result_format=relay_settings.did_result_format,
            text_limit=relay_settings.video_text_limit,
        )

    return factory


@pytest.fixture
def api_client(relay_settings):
    app.dependency_overrides[get_settings] = lambda: relay_settings
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def use_relay(build_completion, build_video, fake_sleep):
    """Route /api/chat through scripted providers; pass None for no video credential."""

    def install(openai: ScriptedProvider, did: ScriptedProvider = None, max_attempts: int = 5):
        video = build_video(did) if did is not None else None
        relay = RelayService(
            build_completion(openai),
            video,
            poll=PollSettings(interval=3.0, max_attempts=max_attempts),
            sleep=fake_sleep,
        )
        app.dependency_overrides[get_relay_service] = lambda: relay
        return relay

    return install


@pytest.fixture
def use_video(build_video):
    def install(did: ScriptedProvider = None):
        video = build_video(did) if did is not None else None
        app.dependency_overrides[get_video_service] = lambda: video
        return video

    return install
