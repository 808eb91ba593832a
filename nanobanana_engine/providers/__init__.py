"""Generation client factory."""

from __future__ import annotations

from typing import Mapping

from ..auth import resolve_auth
from ..config import Settings
from .base import GenerationClient
from .dryrun import DryRunClient
from .gemini import GeminiClient


def create_client(settings: Settings, environ: Mapping[str, str] | None = None) -> GenerationClient:
    if settings.dryrun:
        return DryRunClient()
    return GeminiClient(resolve_auth(environ), model=settings.model)
