"""MCP server exposing the image tools over stdio."""

from __future__ import annotations

import logging
import uuid
from typing import Annotated, Literal

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from .config import Settings
from .contracts import (
    DiagramOptions,
    GenerationRequest,
    GenerationResult,
    IconOptions,
    PatternOptions,
    StoryOptions,
)
from .engine import ImageGenerator
from .errors import ConfigurationError
from .logging_config import configure_logging
from .prompts.builders import build_diagram_prompt, build_icon_prompt, build_pattern_prompt
from .providers import create_client
from .runs.events import EventWriter
from .utils import load_dotenv

logger = logging.getLogger(__name__)

SERVER_NAME = "nanobanana"

mcp = FastMCP(SERVER_NAME)

PreviewFlag = Annotated[bool, Field(description="Automatically open generated images in default viewer")]
NoPreviewFlag = Annotated[bool, Field(description="Never open generated images, even if preview is set")]


class _ServerState:
    def __init__(self) -> None:
        self.generator: ImageGenerator | None = None
        self.initialization_error: Exception | None = None


_state = _ServerState()


def initialize(settings: Settings | None = None) -> None:
    """Build the generator once at start-up; a credential error is kept and raised on every call."""
    settings = settings or Settings.from_env()
    _state.generator = None
    _state.initialization_error = None
    try:
        client = create_client(settings)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        _state.initialization_error = exc
        return
    _state.generator = ImageGenerator(
        client,
        output_dir=settings.output_dir,
        events=EventWriter(settings.events_path, uuid.uuid4().hex),
    )


def set_generator(generator: ImageGenerator | None, error: Exception | None = None) -> None:
    _state.generator = generator
    _state.initialization_error = error


def _generator() -> ImageGenerator:
    if _state.initialization_error is not None:
        raise _state.initialization_error
    if _state.generator is None:
        initialize()
        return _generator()
    return _state.generator


def _respond(tool: str, result: GenerationResult) -> str:
    if result.success:
        return result.summary_text()
    logger.error("Error executing tool %s: %s", tool, result.error or result.message)
    raise ToolError(result.error or result.message)


@mcp.tool(
    name="generate_image",
    description="Generate single or multiple images from text prompts with style and variation options",
)
def generate_image(
    prompt: Annotated[str, Field(description="The text prompt describing the image to generate")],
    outputCount: Annotated[
        int, Field(ge=1, le=8, description="Number of variations to generate (1-8, default: 1)")
    ] = 1,
    styles: Annotated[
        list[str] | None,
        Field(
            description=(
                "Array of artistic styles: photorealistic, watercolor, oil-painting, sketch, "
                "pixel-art, anime, vintage, modern, abstract, minimalist"
            )
        ),
    ] = None,
    variations: Annotated[
        list[str] | None,
        Field(
            description=(
                "Array of variation types: lighting, angle, color-palette, composition, mood, "
                "season, time-of-day"
            )
        ),
    ] = None,
    format: Annotated[
        Literal["grid", "separate"], Field(description="Output format: separate files or single grid image")
    ] = "separate",
    seed: Annotated[int | None, Field(description="Seed for reproducible variations")] = None,
    preview: PreviewFlag = False,
    noPreview: NoPreviewFlag = False,
) -> str:
    request = GenerationRequest(
        prompt=prompt,
        mode="generate",
        output_count=outputCount or 1,
        styles=tuple(styles or ()),
        variations=tuple(variations or ()),
        format=format,
        seed=seed,
        preview=preview,
        no_preview=noPreview,
    )
    return _respond("generate_image", _generator().run(request))


@mcp.tool(name="edit_image", description="Edit an existing image based on a text prompt")
def edit_image(
    prompt: Annotated[str, Field(description="The text prompt describing the edits to make")],
    file: Annotated[str, Field(description="The filename of the input image to edit")],
    preview: PreviewFlag = False,
    noPreview: NoPreviewFlag = False,
) -> str:
    request = GenerationRequest(
        prompt=prompt,
        mode="edit",
        input_image=file,
        preview=preview,
        no_preview=noPreview,
    )
    return _respond("edit_image", _generator().run(request))


@mcp.tool(name="restore_image", description="Restore or enhance an existing image")
def restore_image(
    prompt: Annotated[str, Field(description="The text prompt describing the restoration to perform")],
    file: Annotated[str, Field(description="The filename of the input image to restore")],
    preview: PreviewFlag = False,
    noPreview: NoPreviewFlag = False,
) -> str:
    request = GenerationRequest(
        prompt=prompt,
        mode="restore",
        input_image=file,
        preview=preview,
        no_preview=noPreview,
    )
    return _respond("restore_image", _generator().run(request))


@mcp.tool(name="remix_image", description="Remix multiple images into a new one based on a text prompt")
def remix_image(
    prompt: Annotated[str, Field(description="The text prompt describing the new image")],
    files: Annotated[list[str], Field(description="Array of filenames of the input images to remix")],
    preview: PreviewFlag = False,
    noPreview: NoPreviewFlag = False,
) -> str:
    request = GenerationRequest(
        prompt=prompt,
        mode="remix",
        input_images=tuple(files or ()),
        preview=preview,
        no_preview=noPreview,
    )
    return _respond("remix_image", _generator().run(request))


@mcp.tool(
    name="generate_icon",
    description="Generate app icons, favicons, and UI elements in multiple sizes and formats",
)
def generate_icon(
    prompt: Annotated[str, Field(description="Description of the icon or UI element to generate")],
    sizes: Annotated[
        list[int] | None,
        Field(description="Array of icon sizes in pixels (16, 32, 64, 128, 256, 512, 1024)"),
    ] = None,
    type: Annotated[
        Literal["app-icon", "favicon", "ui-element"], Field(description="Type of icon to generate")
    ] = "app-icon",
    style: Annotated[
        Literal["flat", "skeuomorphic", "minimal", "modern"], Field(description="Visual style of the icon")
    ] = "modern",
    format: Annotated[Literal["png", "jpeg"], Field(description="Output format")] = "png",
    background: Annotated[
        str, Field(description="Background type: transparent, white, black, or color name")
    ] = "transparent",
    corners: Annotated[Literal["rounded", "sharp"], Field(description="Corner style for app icons")] = "rounded",
    preview: PreviewFlag = False,
    noPreview: NoPreviewFlag = False,
) -> str:
    icon_prompt = build_icon_prompt(
        IconOptions(prompt=prompt, type=type, style=style, background=background, corners=corners)
    )
    icon_sizes = tuple(sizes or ())
    request = GenerationRequest(
        prompt=icon_prompt,
        mode="generate",
        output_count=len(icon_sizes) or 1,
        file_format=format or "png",
        preview=preview,
        no_preview=noPreview,
    )
    return _respond("generate_icon", _generator().generate_text_to_image(request, icon_sizes=icon_sizes))


@mcp.tool(
    name="generate_pattern",
    description="Generate seamless patterns and textures for backgrounds and design elements",
)
def generate_pattern(
    prompt: Annotated[str, Field(description="Description of the pattern or texture to generate")],
    size: Annotated[str, Field(description='Pattern tile size (e.g., "256x256", "512x512")')] = "256x256",
    type: Annotated[
        Literal["seamless", "texture", "wallpaper"], Field(description="Type of pattern to generate")
    ] = "seamless",
    style: Annotated[
        Literal["geometric", "organic", "abstract", "floral", "tech"], Field(description="Pattern style")
    ] = "abstract",
    density: Annotated[
        Literal["sparse", "medium", "dense"], Field(description="Element density in the pattern")
    ] = "medium",
    colors: Annotated[Literal["mono", "duotone", "colorful"], Field(description="Color scheme")] = "colorful",
    repeat: Annotated[
        Literal["tile", "mirror"], Field(description="Tiling method for seamless patterns")
    ] = "tile",
    preview: PreviewFlag = False,
    noPreview: NoPreviewFlag = False,
) -> str:
    pattern_prompt = build_pattern_prompt(
        PatternOptions(prompt=prompt, type=type, style=style, density=density, colors=colors, size=size)
    )
    request = GenerationRequest(
        prompt=pattern_prompt,
        mode="generate",
        output_count=1,
        preview=preview,
        no_preview=noPreview,
    )
    return _respond("generate_pattern", _generator().run(request))


@mcp.tool(
    name="generate_story",
    description="Generate a sequence of related images that tell a visual story or show a process",
)
def generate_story(
    prompt: Annotated[str, Field(description="Description of the story or process to visualize")],
    steps: Annotated[int, Field(ge=2, le=8, description="Number of sequential images to generate (2-8)")] = 4,
    type: Annotated[
        Literal["story", "process", "tutorial", "timeline"], Field(description="Type of sequence to generate")
    ] = "story",
    style: Annotated[
        Literal["consistent", "evolving"], Field(description="Visual consistency across frames")
    ] = "consistent",
    layout: Annotated[
        Literal["separate", "grid", "comic"], Field(description="Output layout format")
    ] = "separate",
    transition: Annotated[
        Literal["smooth", "dramatic", "fade"], Field(description="Transition style between steps")
    ] = "smooth",
    format: Annotated[Literal["storyboard", "individual"], Field(description="Output format")] = "individual",
    preview: PreviewFlag = False,
    noPreview: NoPreviewFlag = False,
) -> str:
    request = GenerationRequest(
        prompt=prompt,
        mode="generate",
        output_count=steps or 4,
        format=format,
        preview=preview,
        no_preview=noPreview,
    )
    options = StoryOptions(type=type, style=style, transition=transition, layout=layout)
    return _respond("generate_story", _generator().generate_story_sequence(request, options))


@mcp.tool(
    name="generate_diagram",
    description="Generate technical diagrams, flowcharts, and architectural mockups",
)
def generate_diagram(
    prompt: Annotated[str, Field(description="Description of the diagram content and structure")],
    type: Annotated[
        Literal["flowchart", "architecture", "network", "database", "wireframe", "mindmap", "sequence"],
        Field(description="Type of diagram to generate"),
    ] = "flowchart",
    style: Annotated[
        Literal["professional", "clean", "hand-drawn", "technical"], Field(description="Visual style of the diagram")
    ] = "professional",
    layout: Annotated[
        Literal["horizontal", "vertical", "hierarchical", "circular"], Field(description="Layout orientation")
    ] = "hierarchical",
    complexity: Annotated[
        Literal["simple", "detailed", "comprehensive"], Field(description="Level of detail in the diagram")
    ] = "detailed",
    colors: Annotated[Literal["mono", "accent", "categorical"], Field(description="Color scheme")] = "accent",
    annotations: Annotated[
        Literal["minimal", "detailed"], Field(description="Label and annotation level")
    ] = "detailed",
    preview: PreviewFlag = False,
    noPreview: NoPreviewFlag = False,
) -> str:
    diagram_prompt = build_diagram_prompt(
        DiagramOptions(
            prompt=prompt,
            type=type,
            style=style,
            layout=layout,
            complexity=complexity,
            colors=colors,
            annotations=annotations,
        )
    )
    request = GenerationRequest(
        prompt=diagram_prompt,
        mode="generate",
        output_count=1,
        preview=preview,
        no_preview=noPreview,
    )
    return _respond("generate_diagram", _generator().run(request))


def serve(settings: Settings | None = None) -> None:
    initialize(settings)
    logger.info("Nano Banana MCP server running on stdio")
    mcp.run(transport="stdio")


def main() -> None:
    load_dotenv()
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    serve(settings)


if __name__ == "__main__":
    main()
