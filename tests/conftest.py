"""
Shared fixtures for the caption service tests.
"""

import os
from types import SimpleNamespace
from typing import List

import httpx
import pytest

# Settings are read at import time of main, so configure them first
os.environ.setdefault("AZURE_OPENAI_API_KEY", "test-key")
os.environ.setdefault("AZURE_OPENAI_ENDPOINT", "https://example.openai.azure.com")
os.environ.setdefault("AZURE_OPENAI_MODEL_ID", "gpt-4o-vision")

from fastapi.testclient import TestClient  # noqa: E402

from core.config import get_settings  # noqa: E402
from core.dependencies import get_vision_service  # noqa: E402
from main import app  # noqa: E402

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x02\x00\x00\x00\x90wS\xde\x00\x00\x00\x0cIDATx\x9cc\xf8\x0f\x00"
    b"\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


def make_completion(content):
    """Chat completion shaped like the OpenAI SDK response."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def make_status_error(error_cls, status_code: int, message: str):
    """Build an OpenAI SDK status error backed by a real httpx response."""
    request = httpx.Request("POST", "https://example.openai.azure.com/openai/deployments/test/chat/completions")
    response = httpx.Response(status_code, request=request)
    return error_cls(message, response=response, body=None)


class FakeCompletions:
    """Replays queued outcomes for chat.completions.create."""

    def __init__(self, outcomes: List):
        self.outcomes = list(outcomes)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_client(*outcomes):
    completions = FakeCompletions(outcomes)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeVisionService:
    """Vision service double used through dependency overrides."""

    def __init__(self, caption: str = "A cat sitting on a windowsill.", error: Exception = None):
        self.caption = caption
        self.error = error
        self.calls = []

    async def generate_caption(self, image_bytes: bytes, mime_type: str) -> str:
        self.calls.append(("default", image_bytes, mime_type, None))
        if self.error:
            raise self.error
        return self.caption

    async def generate_caption_with_prompt(self, image_bytes: bytes, mime_type: str, prompt: str) -> str:
        self.calls.append(("custom", image_bytes, mime_type, prompt))
        if self.error:
            raise self.error
        return self.caption


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def set_env(monkeypatch):
    """Change environment variables after startup and reload settings."""
    def _set(**values):
        for name, value in values.items():
            if value is None:
                monkeypatch.delenv(name, raising=False)
            else:
                monkeypatch.setenv(name, str(value))
        get_settings.cache_clear()
    return _set


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def fake_service():
    service = FakeVisionService()
    app.dependency_overrides[get_vision_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_vision_service, None)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
