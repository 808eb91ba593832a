"""Prompt templates for icons, patterns, diagrams, and story steps."""

from __future__ import annotations

from ..contracts import DiagramOptions, IconOptions, PatternOptions, StoryOptions

STORY_TYPE_PHRASES: dict[str, str] = {
    "story": "narrative sequence, {style} art style",
    "process": "procedural step, instructional illustration",
    "tutorial": "tutorial step, educational diagram",
    "timeline": "chronological progression, timeline visualization",
}


def build_icon_prompt(options: IconOptions) -> str:
    base = options.prompt or "app icon"
    prompt = f"{base}, {options.style} style {options.type}"
    if options.type == "app-icon":
        prompt += f", {options.corners} corners"
    if options.background != "transparent":
        prompt += f", {options.background} background"
    prompt += ", clean design, high quality, professional"
    return prompt


def build_pattern_prompt(options: PatternOptions) -> str:
    base = options.prompt or "abstract pattern"
    prompt = (
        f"{base}, {options.style} style {options.type} pattern, "
        f"{options.density} density, {options.colors} colors"
    )
    if options.type == "seamless":
        prompt += ", tileable, repeating pattern"
    prompt += f", {options.size} tile size, high quality"
    return prompt


def build_diagram_prompt(options: DiagramOptions) -> str:
    base = options.prompt or "system diagram"
    parts = [
        base,
        f"{options.type} diagram",
        f"{options.style} style",
        f"{options.layout} layout",
        f"{options.complexity} level of detail",
        f"{options.colors} color scheme",
        f"{options.annotations} annotations and labels",
        "clean technical illustration",
        "clear visual hierarchy",
    ]
    return ", ".join(parts)


def build_story_step_prompt(base_prompt: str, step: int, total: int, options: StoryOptions) -> str:
    """Return the prompt for the 1-based ``step`` of a ``total``-step sequence.

    Unknown sequence types get no type phrase.
    """
    prompt = f"{base_prompt}, step {step} of {total}"
    phrase = STORY_TYPE_PHRASES.get(options.type)
    if phrase:
        prompt += ", " + phrase.format(style=options.style)
    if step > 1:
        prompt += f", {options.transition} transition from previous step"
    return prompt
