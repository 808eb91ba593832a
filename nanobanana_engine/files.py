"""Output directory, input file lookup, and image persistence."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from pathlib import Path

from PIL import Image

from .config import DEFAULT_OUTPUT_DIRNAME
from .contracts import FileSearchResult
from .errors import ImageWriteError
from .providers.base import InputImage
from .utils import ensure_dir

logger = logging.getLogger(__name__)

MAX_FILENAME_STEM = 32
DEFAULT_FILENAME_STEM = "generated_image"

_UNSAFE_CHARS_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def ensure_output_directory(output_dir: Path | None = None) -> Path:
    target = output_dir if output_dir is not None else Path.cwd() / DEFAULT_OUTPUT_DIRNAME
    return ensure_dir(target)


def search_directories(cwd: Path | None = None, home: Path | None = None) -> list[Path]:
    base = cwd or Path.cwd()
    user_home = home or Path.home()
    return [
        base,
        base / "images",
        base / "input",
        base / DEFAULT_OUTPUT_DIRNAME,
        user_home / "Downloads",
        user_home / "Desktop",
    ]


def find_input_file(reference: str, cwd: Path | None = None, home: Path | None = None) -> FileSearchResult:
    candidate = Path(reference).expanduser()
    if candidate.is_absolute():
        if candidate.is_file():
            return FileSearchResult(found=True, file_path=candidate, searched_paths=(str(candidate.parent),))
        return FileSearchResult(found=False, searched_paths=(str(candidate.parent),))

    searched: list[str] = []
    for directory in search_directories(cwd, home):
        searched.append(str(directory))
        path = directory / candidate
        if path.is_file():
            return FileSearchResult(found=True, file_path=path.resolve(), searched_paths=tuple(searched))
    return FileSearchResult(found=False, searched_paths=tuple(searched))


def mime_type_for_path(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in {".jpg", ".jpeg"}:
        return "image/jpeg"
    if suffix == ".webp":
        return "image/webp"
    return "image/png"


def load_input_image(path: Path) -> InputImage:
    return InputImage(data=path.read_bytes(), mime_type=mime_type_for_path(path))


def extension_from_format(file_format: str | None) -> str:
    if str(file_format or "").strip().lower() in {"jpeg", "jpg"}:
        return "jpg"
    return "png"


def generate_filename(prompt: str, file_format: str | None = "png", output_dir: Path | None = None) -> str:
    stem = _UNSAFE_CHARS_RE.sub("", prompt.lower())
    stem = _WHITESPACE_RE.sub("_", stem.strip())[:MAX_FILENAME_STEM]
    if not stem:
        stem = DEFAULT_FILENAME_STEM
    ext = extension_from_format(file_format)
    filename = f"{stem}.{ext}"
    if output_dir is None:
        return filename
    counter = 1
    while (output_dir / filename).exists():
        filename = f"{stem}_{counter}.{ext}"
        counter += 1
    return filename


def save_image_from_base64(payload: str, output_dir: Path, filename: str) -> Path:
    try:
        data = base64.b64decode(payload)
    except (binascii.Error, ValueError) as exc:
        raise ImageWriteError(f"Could not decode image data for {filename}: {exc}") from exc
    path = output_dir / filename
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise ImageWriteError(f"Could not write {path}: {exc}") from exc
    logger.info("Image saved to: %s", path)
    return path.resolve()


def resize_icon(path: Path, size: int) -> Path:
    try:
        with Image.open(path) as image:
            resized = image.resize((size, size), Image.Resampling.LANCZOS)
            if path.suffix.lower() in {".jpg", ".jpeg"} and resized.mode not in {"RGB", "L"}:
                resized = resized.convert("RGB")
            resized.save(path)
    except OSError as exc:
        raise ImageWriteError(f"Could not resize {path} to {size}px: {exc}") from exc
    return path
