"""Provider base classes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Sequence, Union


@dataclass(frozen=True)
class TextSegment:
    text: str


@dataclass(frozen=True)
class InlineDataSegment:
    data: str
    mime_type: str | None = None


ResponseSegment = Union[TextSegment, InlineDataSegment]


@dataclass(frozen=True)
class InputImage:
    data: bytes
    mime_type: str = "image/png"


@dataclass
class ProviderResponse:
    segments: list[ResponseSegment]
    model: str
    usage: Mapping[str, Any] | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


class GenerationClient(Protocol):
    name: str
    model: str

    def generate(
        self,
        prompt: str,
        images: Sequence[InputImage] = (),
        *,
        seed: int | None = None,
    ) -> ProviderResponse:
        ...
