"""Gemini provider."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from google import genai
from google.genai import types

from ..config import DEFAULT_MODEL
from ..contracts import AuthConfig
from .base import InputImage, ProviderResponse
from .scanner import segments_from_response

logger = logging.getLogger(__name__)


class GeminiClient:
    name = "gemini"

    def __init__(self, auth: AuthConfig, model: str | None = None, client: Any | None = None) -> None:
        self.model = model or DEFAULT_MODEL
        self._client = client if client is not None else genai.Client(api_key=auth.api_key)
        logger.info("Using image model: %s", self.model)

    def generate(
        self,
        prompt: str,
        images: Sequence[InputImage] = (),
        *,
        seed: int | None = None,
    ) -> ProviderResponse:
        contents = [types.Content(role="user", parts=_build_message_parts(prompt, images))]
        config = _build_content_config(seed)
        response = self._client.models.generate_content(
            model=self.model,
            contents=contents,
            config=config,
        )
        segments = segments_from_response(response)
        logger.debug(
            "Gemini response: %d candidate(s), %d segment(s)",
            len(getattr(response, "candidates", None) or []),
            len(segments),
        )
        return ProviderResponse(
            segments=segments,
            model=self.model,
            usage=_extract_usage_summary(response),
        )


def _build_message_parts(prompt: str, images: Sequence[InputImage]) -> list[types.Part]:
    parts: list[types.Part] = [types.Part(text=prompt)]
    for image in images:
        parts.append(types.Part(inline_data=types.Blob(data=image.data, mime_type=image.mime_type)))
    return parts


def _build_content_config(seed: int | None) -> types.GenerateContentConfig | None:
    if seed is None:
        return None
    return types.GenerateContentConfig(seed=int(seed))


def _to_dict(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(k): _to_dict(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_dict(v) for v in value]
    if hasattr(value, "model_dump"):
        return _to_dict(value.model_dump(exclude_none=True))
    return str(value)


def _extract_usage_summary(response: Any) -> Mapping[str, Any] | None:
    raw = getattr(response, "usage_metadata", None)
    if raw is None:
        return None
    mapped = _to_dict(raw)
    return dict(mapped) if isinstance(mapped, Mapping) else None
