"""Open freshly written images in the host's default viewer."""

from __future__ import annotations

import logging
import subprocess
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

CommandRunner = Callable[[list[str]], object]


def open_command(path: Path, platform: str | None = None) -> list[str]:
    platform = platform or sys.platform
    if platform == "darwin":
        return ["open", str(path)]
    if platform.startswith("win"):
        return ["cmd", "/c", "start", "", str(path)]
    return ["xdg-open", str(path)]


def _run_command(command: list[str]) -> object:
    return subprocess.run(
        command,
        check=True,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


class PreviewLauncher:
    def __init__(self, runner: CommandRunner | None = None, platform: str | None = None) -> None:
        self._runner = runner or _run_command
        self._platform = platform

    def open_one(self, path: Path) -> bool:
        try:
            self._runner(open_command(path, self._platform))
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("Failed to open preview for %s: %s", path, exc)
            return False
        logger.debug("Opened preview for: %s", path)
        return True

    def open_all(self, paths: Sequence[Path]) -> list[bool]:
        if not paths:
            return []
        logger.info("Opening %d image(s) for preview", len(paths))
        with ThreadPoolExecutor(max_workers=len(paths)) as pool:
            return list(pool.map(self.open_one, paths))
