import os
import tempfile

# Configuration is read at import time
os.environ.setdefault("GEMINI_KEY", "test-gemini-key")
os.environ.setdefault("FISH_AUDIO_API_KEY", "test-fish-key")
os.environ.setdefault(
    "LOG_FILE", os.path.join(tempfile.gettempdir(), "costume_roaster_tests.log")
)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from costume_roaster.core.gemini import GeminiModel, GenerateContentResult  # noqa: E402
from costume_roaster.main import app  # noqa: E402

# 1x1 transparent PNG
PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
PNG_DATA_URL = f"data:image/png;base64,{PNG_BASE64}"

# ~10KB JPEG-looking payload
JPEG_BASE64 = "/9j/" + "A" * 13652
JPEG_DATA_URL = f"data:image/jpeg;base64,{JPEG_BASE64}"


def text_response(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def image_response(data=PNG_BASE64, mime_type="image/png", text=None):
    parts = []
    if text is not None:
        parts.append({"text": text})
    parts.append({"inlineData": {"mimeType": mime_type, "data": data}})
    return {"candidates": [{"content": {"parts": parts}}]}


class FakeGemini:
    """Stands in for GeminiModel.generate_content and records each call."""

    def __init__(self):
        self.calls = []
        self.responses = []

    def queue(self, *responses):
        self.responses.extend(responses)

    async def generate_content(self, model, parts, preset):
        self.calls.append(
            {"model": model.model_name, "parts": parts, "preset": preset}
        )
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return GenerateContentResult(raw=response)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_gemini(monkeypatch):
    fake = FakeGemini()

    async def _generate_content(self, parts, preset):
        return await fake.generate_content(self, parts, preset)

    monkeypatch.setattr(GeminiModel, "generate_content", _generate_content)
    return fake


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
