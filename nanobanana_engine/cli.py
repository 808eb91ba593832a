"""nanobanana CLI entrypoints."""

from __future__ import annotations

import argparse
import sys
import uuid
from typing import Callable

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
from .server import serve
from .utils import load_dotenv


def _add_preview_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--preview", action="store_true", help="Open generated images in the default viewer")
    parser.add_argument("--no-preview", dest="no_preview", action="store_true")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nanobanana", description="Gemini image generation tools")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="Run the MCP server on stdio")

    generate = sub.add_parser("generate", help="Text-to-image generation")
    generate.add_argument("prompt")
    generate.add_argument("--count", type=int, default=1, dest="output_count")
    generate.add_argument("--styles", nargs="*", default=[])
    generate.add_argument("--variations", nargs="*", default=[])
    generate.add_argument("--seed", type=int)
    generate.add_argument("--file-format", dest="file_format", choices=["png", "jpeg"])
    _add_preview_flags(generate)

    for mode, help_text in (("edit", "Edit an image"), ("restore", "Restore or enhance an image")):
        edit = sub.add_parser(mode, help=help_text)
        edit.add_argument("prompt")
        edit.add_argument("--file", required=True)
        _add_preview_flags(edit)

    remix = sub.add_parser("remix", help="Remix two or more images")
    remix.add_argument("prompt")
    remix.add_argument("--files", nargs="+", required=True)
    _add_preview_flags(remix)

    icon = sub.add_parser("icon", help="Generate icons")
    icon.add_argument("prompt")
    icon.add_argument("--sizes", nargs="*", type=int, default=[])
    icon.add_argument("--type", default="app-icon", choices=["app-icon", "favicon", "ui-element"])
    icon.add_argument("--style", default="modern", choices=["flat", "skeuomorphic", "minimal", "modern"])
    icon.add_argument("--format", default="png", choices=["png", "jpeg"])
    icon.add_argument("--background", default="transparent")
    icon.add_argument("--corners", default="rounded", choices=["rounded", "sharp"])
    _add_preview_flags(icon)

    pattern = sub.add_parser("pattern", help="Generate patterns and textures")
    pattern.add_argument("prompt")
    pattern.add_argument("--size", default="256x256")
    pattern.add_argument("--type", default="seamless", choices=["seamless", "texture", "wallpaper"])
    pattern.add_argument("--style", default="abstract", choices=["geometric", "organic", "abstract", "floral", "tech"])
    pattern.add_argument("--density", default="medium", choices=["sparse", "medium", "dense"])
    pattern.add_argument("--colors", default="colorful", choices=["mono", "duotone", "colorful"])
    _add_preview_flags(pattern)

    story = sub.add_parser("story", help="Generate a sequence of images")
    story.add_argument("prompt")
    story.add_argument("--steps", type=int, default=4)
    story.add_argument("--type", default="story", choices=["story", "process", "tutorial", "timeline"])
    story.add_argument("--style", default="consistent", choices=["consistent", "evolving"])
    story.add_argument("--transition", default="smooth", choices=["smooth", "dramatic", "fade"])
    _add_preview_flags(story)

    diagram = sub.add_parser("diagram", help="Generate technical diagrams")
    diagram.add_argument("prompt")
    diagram.add_argument(
        "--type",
        default="flowchart",
        choices=["flowchart", "architecture", "network", "database", "wireframe", "mindmap", "sequence"],
    )
    diagram.add_argument("--style", default="professional", choices=["professional", "clean", "hand-drawn", "technical"])
    diagram.add_argument("--layout", default="hierarchical", choices=["horizontal", "vertical", "hierarchical", "circular"])
    diagram.add_argument("--complexity", default="detailed", choices=["simple", "detailed", "comprehensive"])
    diagram.add_argument("--colors", default="accent", choices=["mono", "accent", "categorical"])
    diagram.add_argument("--annotations", default="detailed", choices=["minimal", "detailed"])
    _add_preview_flags(diagram)

    return parser


def _base_request(args: argparse.Namespace, prompt: str, **fields: object) -> GenerationRequest:
    return GenerationRequest(
        prompt=prompt,
        preview=bool(getattr(args, "preview", False)),
        no_preview=bool(getattr(args, "no_preview", False)),
        **fields,  # type: ignore[arg-type]
    )


def _handle_generate(generator: ImageGenerator, args: argparse.Namespace) -> GenerationResult:
    request = _base_request(
        args,
        args.prompt,
        output_count=args.output_count,
        styles=tuple(args.styles),
        variations=tuple(args.variations),
        seed=args.seed,
        file_format=args.file_format,
    )
    return generator.run(request)


def _handle_edit(generator: ImageGenerator, args: argparse.Namespace) -> GenerationResult:
    return generator.run(_base_request(args, args.prompt, mode=args.command, input_image=args.file))


def _handle_remix(generator: ImageGenerator, args: argparse.Namespace) -> GenerationResult:
    return generator.run(_base_request(args, args.prompt, mode="remix", input_images=tuple(args.files)))


def _handle_icon(generator: ImageGenerator, args: argparse.Namespace) -> GenerationResult:
    prompt = build_icon_prompt(
        IconOptions(
            prompt=args.prompt,
            type=args.type,
            style=args.style,
            background=args.background,
            corners=args.corners,
        )
    )
    request = _base_request(args, prompt, output_count=len(args.sizes) or 1, file_format=args.format)
    return generator.generate_text_to_image(request, icon_sizes=tuple(args.sizes))


def _handle_pattern(generator: ImageGenerator, args: argparse.Namespace) -> GenerationResult:
    prompt = build_pattern_prompt(
        PatternOptions(
            prompt=args.prompt,
            type=args.type,
            style=args.style,
            density=args.density,
            colors=args.colors,
            size=args.size,
        )
    )
    return generator.run(_base_request(args, prompt, output_count=1))


def _handle_story(generator: ImageGenerator, args: argparse.Namespace) -> GenerationResult:
    request = _base_request(args, args.prompt, output_count=args.steps)
    options = StoryOptions(type=args.type, style=args.style, transition=args.transition)
    return generator.generate_story_sequence(request, options)


def _handle_diagram(generator: ImageGenerator, args: argparse.Namespace) -> GenerationResult:
    prompt = build_diagram_prompt(
        DiagramOptions(
            prompt=args.prompt,
            type=args.type,
            style=args.style,
            layout=args.layout,
            complexity=args.complexity,
            colors=args.colors,
            annotations=args.annotations,
        )
    )
    return generator.run(_base_request(args, prompt, output_count=1))


_HANDLERS: dict[str, Callable[[ImageGenerator, argparse.Namespace], GenerationResult]] = {
    "generate": _handle_generate,
    "edit": _handle_edit,
    "restore": _handle_edit,
    "remix": _handle_remix,
    "icon": _handle_icon,
    "pattern": _handle_pattern,
    "story": _handle_story,
    "diagram": _handle_diagram,
}


def run_command(args: argparse.Namespace, generator: ImageGenerator) -> int:
    result = _HANDLERS[args.command](generator, args)
    if result.success:
        print(result.summary_text())
        return 0
    print(f"{result.message}: {result.error}" if result.error else result.message, file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    if args.command == "serve":
        serve(settings)
        raise SystemExit(0)
    if args.command not in _HANDLERS:
        parser.print_help()
        raise SystemExit(1)

    try:
        client = create_client(settings)
    except ConfigurationError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(1)
    generator = ImageGenerator(
        client,
        output_dir=settings.output_dir,
        events=EventWriter(settings.events_path, uuid.uuid4().hex),
    )
    raise SystemExit(run_command(args, generator))


if __name__ == "__main__":
    main()
