"""Request and result contracts shared by the engine, server, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Sequence

GenerationMode = Literal["generate", "edit", "restore", "remix"]
KeyType = Literal["GEMINI_API_KEY", "GOOGLE_API_KEY"]

GENERATION_MODES: tuple[str, ...] = ("generate", "edit", "restore", "remix")


@dataclass
class GenerationRequest:
    prompt: str
    mode: GenerationMode = "generate"
    input_image: str | None = None
    input_images: Sequence[str] = ()
    output_count: int | None = None
    styles: Sequence[str] = ()
    variations: Sequence[str] = ()
    format: str = "separate"
    file_format: str | None = None
    seed: int | None = None
    preview: bool = False
    no_preview: bool = False

    @property
    def wants_preview(self) -> bool:
        if self.no_preview:
            return False
        return bool(self.preview)


@dataclass
class GenerationResult:
    success: bool
    message: str
    generated_files: list[Path] = field(default_factory=list)
    error: str | None = None

    def summary_text(self) -> str:
        if self.generated_files:
            listing = "\n".join(f"• {path}" for path in self.generated_files)
        else:
            listing = "None"
        return f"{self.message}\n\nGenerated files:\n{listing}"


@dataclass(frozen=True)
class FileSearchResult:
    found: bool
    file_path: Path | None = None
    searched_paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class AuthConfig:
    api_key: str
    key_type: KeyType

    def __repr__(self) -> str:
        return f"AuthConfig(api_key='***', key_type={self.key_type!r})"


@dataclass(frozen=True)
class StoryOptions:
    type: str = "story"
    style: str = "consistent"
    transition: str = "smooth"
    layout: str = "separate"


@dataclass(frozen=True)
class IconOptions:
    prompt: str | None = None
    type: str = "app-icon"
    style: str = "modern"
    background: str = "transparent"
    corners: str = "rounded"


@dataclass(frozen=True)
class PatternOptions:
    prompt: str | None = None
    type: str = "seamless"
    style: str = "abstract"
    density: str = "medium"
    colors: str = "colorful"
    size: str = "256x256"


@dataclass(frozen=True)
class DiagramOptions:
    prompt: str | None = None
    type: str = "flowchart"
    style: str = "professional"
    layout: str = "hierarchical"
    complexity: str = "detailed"
    colors: str = "accent"
    annotations: str = "detailed"
