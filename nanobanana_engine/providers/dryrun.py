"""Dry-run image provider (offline)."""

from __future__ import annotations

import base64
import hashlib
import io
import random
from typing import Sequence

from PIL import Image, ImageDraw, ImageFont

from .base import InlineDataSegment, InputImage, ProviderResponse, TextSegment

DRYRUN_MODEL = "dryrun-image-1"
DRYRUN_SIZE = (512, 512)


class DryRunClient:
    name = "dryrun"

    def __init__(self, model: str = DRYRUN_MODEL) -> None:
        self.model = model

    def generate(
        self,
        prompt: str,
        images: Sequence[InputImage] = (),
        *,
        seed: int | None = None,
    ) -> ProviderResponse:
        seed = seed if seed is not None else random.randint(1, 10_000_000)
        if images:
            image = _open_input(images[0])
        else:
            image = Image.new("RGB", DRYRUN_SIZE, _color_from_prompt(prompt, seed))
        draw = ImageDraw.Draw(image)
        text = f"dryrun\n{prompt[:60]}"
        draw.text((20, 20), text, fill=(255, 255, 255), font=ImageFont.load_default())

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        payload = base64.b64encode(buffer.getvalue()).decode("ascii")
        return ProviderResponse(
            segments=[
                TextSegment(text="Here is your image."),
                InlineDataSegment(data=payload, mime_type="image/png"),
            ],
            model=self.model,
            metadata={"dryrun": True, "seed": seed, "input_images": len(images)},
        )


def _open_input(image: InputImage) -> Image.Image:
    with Image.open(io.BytesIO(image.data)) as source:
        return source.convert("RGB")


def _color_from_prompt(prompt: str, seed: int) -> tuple[int, int, int]:
    digest = hashlib.sha256(f"{prompt}:{seed}".encode("utf-8")).digest()
    return digest[0], digest[1], digest[2]
