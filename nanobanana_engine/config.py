"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .utils import getenv_flag

DEFAULT_MODEL = "gemini-2.5-flash-image"
DEFAULT_OUTPUT_DIRNAME = "nanobanana-output"


@dataclass(frozen=True)
class Settings:
    model: str = DEFAULT_MODEL
    output_dir: Path | None = None
    events_path: Path | None = None
    log_level: str = "INFO"
    dryrun: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        output_dir = str(env.get("NANOBANANA_OUTPUT_DIR") or "").strip()
        events_path = str(env.get("NANOBANANA_EVENTS_PATH") or "").strip()
        return cls(
            model=str(env.get("NANOBANANA_MODEL") or "").strip() or DEFAULT_MODEL,
            output_dir=Path(output_dir).expanduser() if output_dir else None,
            events_path=Path(events_path).expanduser() if events_path else None,
            log_level=str(env.get("NANOBANANA_LOG_LEVEL") or "INFO").strip().upper() or "INFO",
            dryrun=getenv_flag("NANOBANANA_DRYRUN", False, environ=env),
        )
