"""Locate the image payload inside a model response.

Responses are ordered lists of segments. The first inline-data segment wins;
a text segment only counts when it looks like a raw base64 image.
"""

from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Sequence

from .base import InlineDataSegment, ResponseSegment, TextSegment

logger = logging.getLogger(__name__)

BASE64_RE = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
MIN_BASE64_IMAGE_CHARS = 1000


@dataclass(frozen=True)
class ImageMatch:
    data: str
    mime_type: str | None
    source: Literal["inline_data", "text"]
    index: int


def looks_like_base64_image(text: str | None) -> bool:
    if not text:
        return False
    if not BASE64_RE.fullmatch(text):
        return False
    if len(text) < MIN_BASE64_IMAGE_CHARS:
        logger.debug("Skipping short data that may not be image: %d characters", len(text))
        return False
    return True


def find_image_segment(segments: Sequence[ResponseSegment]) -> ImageMatch | None:
    for index, segment in enumerate(segments):
        if isinstance(segment, InlineDataSegment):
            if segment.data:
                return ImageMatch(data=segment.data, mime_type=segment.mime_type, source="inline_data", index=index)
            continue
        if isinstance(segment, TextSegment) and looks_like_base64_image(segment.text):
            return ImageMatch(data=segment.text, mime_type=None, source="text", index=index)
    return None


def segments_from_response(response: Any) -> list[ResponseSegment]:
    """Flatten the first candidate of a ``generate_content`` response into segments."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    return list(_iter_segments(parts))


def _iter_segments(parts: Iterable[Any]) -> Iterable[ResponseSegment]:
    for part in parts:
        inline_data = getattr(part, "inline_data", None)
        data = getattr(inline_data, "data", None) if inline_data is not None else None
        if data:
            if isinstance(data, (bytes, bytearray)):
                data = base64.b64encode(bytes(data)).decode("ascii")
            yield InlineDataSegment(data=str(data), mime_type=getattr(inline_data, "mime_type", None))
            continue
        text = getattr(part, "text", None)
        if isinstance(text, str):
            yield TextSegment(text=text)
