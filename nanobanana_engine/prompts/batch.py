"""Expand a single prompt into an ordered batch of prompt variants."""

from __future__ import annotations

from typing import Sequence

# Each variation category expands to exactly two canned suffixes.
VARIATION_SUFFIXES: dict[str, tuple[str, str]] = {
    "lighting": ("dramatic lighting", "soft lighting"),
    "angle": ("from above", "close-up view"),
    "color-palette": ("warm color palette", "cool color palette"),
    "composition": ("centered composition", "rule of thirds composition"),
    "mood": ("cheerful mood", "dramatic mood"),
    "season": ("in spring", "in winter"),
    "time-of-day": ("at sunrise", "at sunset"),
}


def expand_batch_prompts(
    base_prompt: str,
    styles: Sequence[str] | None = None,
    variations: Sequence[str] | None = None,
    output_count: int | None = None,
) -> list[str]:
    if not styles and not variations and not output_count:
        return [base_prompt]

    prompts: list[str] = [f"{base_prompt}, {style} style" for style in styles or ()]

    if variations:
        seeds = prompts if prompts else [base_prompt]
        variation_prompts: list[str] = []
        for seed in seeds:
            for category in variations:
                for suffix in VARIATION_SUFFIXES.get(category, ()):
                    variation_prompts.append(f"{seed}, {suffix}")
        if variation_prompts:
            prompts = variation_prompts

    if not prompts and output_count and output_count > 1:
        prompts = [base_prompt] * output_count

    if output_count and len(prompts) > output_count:
        prompts = prompts[:output_count]

    return prompts or [base_prompt]
