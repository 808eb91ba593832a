from __future__ import annotations

import base64
from types import SimpleNamespace
from typing import Any

from nanobanana_engine.contracts import AuthConfig
from nanobanana_engine.providers.base import InlineDataSegment, InputImage, TextSegment
from nanobanana_engine.providers.gemini import GeminiClient


class _FakeModels:
    def __init__(self, response: Any) -> None:
        self.response = response
        self.calls: list[dict[str, Any]] = []

    def generate_content(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        return self.response


class _FakeGenaiClient:
    def __init__(self, response: Any) -> None:
        self.models = _FakeModels(response)


def _response(parts: list[Any], usage: Any = None) -> SimpleNamespace:
    return SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))],
        usage_metadata=usage,
    )


def _auth() -> AuthConfig:
    return AuthConfig(api_key="test-key", key_type="GEMINI_API_KEY")


def test_generate_sends_prompt_then_images() -> None:
    fake = _FakeGenaiClient(_response([SimpleNamespace(text="ok", inline_data=None)]))
    client = GeminiClient(_auth(), client=fake)

    client.generate(
        "make it blue",
        [InputImage(data=b"first", mime_type="image/jpeg"), InputImage(data=b"second")],
    )

    call = fake.models.calls[0]
    assert call["model"] == "gemini-2.5-flash-image"
    assert call["config"] is None
    content = call["contents"][0]
    assert content.role == "user"
    assert content.parts[0].text == "make it blue"
    assert content.parts[1].inline_data.data == b"first"
    assert content.parts[1].inline_data.mime_type == "image/jpeg"
    assert content.parts[2].inline_data.data == b"second"
    assert content.parts[2].inline_data.mime_type == "image/png"


def test_generate_forwards_seed_and_model_override() -> None:
    fake = _FakeGenaiClient(_response([]))
    client = GeminiClient(_auth(), model="custom-image-model", client=fake)

    client.generate("a cat", seed=42)

    call = fake.models.calls[0]
    assert call["model"] == "custom-image-model"
    assert call["config"].seed == 42


def test_generate_returns_segments_and_usage() -> None:
    parts = [
        SimpleNamespace(text="Here you go", inline_data=None),
        SimpleNamespace(text=None, inline_data=SimpleNamespace(data=b"png-bytes", mime_type="image/png")),
    ]
    fake = _FakeGenaiClient(_response(parts, usage={"total_token_count": 12}))
    client = GeminiClient(_auth(), client=fake)

    response = client.generate("a cat")

    assert response.model == "gemini-2.5-flash-image"
    assert response.segments == [
        TextSegment(text="Here you go"),
        InlineDataSegment(data=base64.b64encode(b"png-bytes").decode("ascii"), mime_type="image/png"),
    ]
    assert response.usage == {"total_token_count": 12}


def test_generate_tolerates_empty_candidates() -> None:
    fake = _FakeGenaiClient(SimpleNamespace(candidates=[], usage_metadata=None))
    client = GeminiClient(_auth(), client=fake)

    response = client.generate("a cat")

    assert response.segments == []
    assert response.usage is None
