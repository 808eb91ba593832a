"""Core nanobanana orchestration."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Callable, Sequence

from .contracts import GENERATION_MODES, GenerationRequest, GenerationResult, StoryOptions
from .errors import (
    ImageWriteError,
    InputImageNotFoundError,
    InputValidationError,
    classify_error,
    is_auth_failure,
)
from .files import (
    ensure_output_directory,
    find_input_file,
    generate_filename,
    load_input_image,
    resize_icon,
    save_image_from_base64,
)
from .preview import PreviewLauncher
from .prompts.batch import expand_batch_prompts
from .prompts.builders import build_story_step_prompt
from .providers.base import GenerationClient, InputImage
from .providers.scanner import ImageMatch, find_image_segment
from .runs.events import EventWriter

logger = logging.getLogger(__name__)

DEFAULT_STORY_STEPS = 4
MIN_REMIX_IMAGES = 2

_PAST_TENSE = {"edit": "edited", "restore": "restored"}

Handler = Callable[[GenerationRequest], GenerationResult]


class ImageGenerator:
    """Runs generation requests against a client and writes the results to disk.

    Calls are issued one at a time. Batch and story modes keep going after a
    failed variant and only stop early on authentication failures; edit,
    restore, and remix make a single call.
    """

    def __init__(
        self,
        client: GenerationClient,
        *,
        output_dir: Path | None = None,
        previewer: PreviewLauncher | None = None,
        events: EventWriter | None = None,
    ) -> None:
        self.client = client
        self.output_dir = output_dir
        self.previewer = previewer or PreviewLauncher()
        self.events = events or EventWriter(None, uuid.uuid4().hex)
        self._handlers: dict[str, Handler] = {
            "generate": self.generate_text_to_image,
            "edit": self.edit_image,
            "restore": self.edit_image,
            "remix": self.remix_image,
        }

    def run(self, request: GenerationRequest) -> GenerationResult:
        handler = self._handlers.get(request.mode)
        if handler is None:
            return GenerationResult(
                success=False,
                message=f"Unsupported mode: {request.mode}",
                error=f"Mode must be one of: {', '.join(GENERATION_MODES)}",
            )
        return handler(request)

    def generate_text_to_image(
        self,
        request: GenerationRequest,
        icon_sizes: Sequence[int] = (),
    ) -> GenerationResult:
        try:
            output_dir = ensure_output_directory(self.output_dir)
        except OSError as exc:
            logger.error("Could not prepare output directory: %s", exc)
            return self._finish(
                request,
                GenerationResult(success=False, message="Failed to generate image", error=str(exc)),
            )

        prompts = expand_batch_prompts(
            request.prompt,
            styles=request.styles,
            variations=request.variations,
            output_count=request.output_count,
        )
        logger.info("Generating %d image variation(s)", len(prompts))
        self.events.emit("generation_started", mode=request.mode, prompts=prompts)

        saved: list[tuple[int, Path]] = []
        first_error: str | None = None
        name_from_variant = bool(request.styles or request.variations)
        for idx, prompt in enumerate(prompts):
            logger.info("Generating variation %d/%d: %s", idx + 1, len(prompts), prompt)
            try:
                match = self._request_image(prompt, seed=request.seed)
                if match is None:
                    logger.warning("No valid image data received for variation %d", idx + 1)
                    continue
                path = self._save(
                    match,
                    output_dir,
                    prompt if name_from_variant else request.prompt,
                    request.file_format,
                )
            except ImageWriteError as exc:
                first_error = first_error or str(exc)
                logger.warning("Error saving variation %d: %s", idx + 1, exc)
                continue
            except Exception as exc:
                message = classify_error(exc)
                first_error = first_error or message
                logger.warning("Error generating variation %d: %s", idx + 1, message)
                self.events.emit("generation_failed", mode=request.mode, index=idx, error=message)
                if is_auth_failure(message):
                    return self._finish(
                        request,
                        GenerationResult(success=False, message="Image generation failed", error=message),
                    )
                continue
            saved.append((idx, path))

        if not saved:
            return self._finish(
                request,
                GenerationResult(
                    success=False,
                    message="Failed to generate any images",
                    error=first_error or "No image data found in API responses",
                ),
            )

        for idx, path in saved:
            if idx >= len(icon_sizes):
                continue
            try:
                resize_icon(path, int(icon_sizes[idx]))
            except ImageWriteError as exc:
                logger.warning("Keeping %s at generated size: %s", path, exc)

        files = [path for _, path in saved]
        self._handle_preview(files, request)
        return self._finish(
            request,
            GenerationResult(
                success=True,
                message=f"Successfully generated {len(files)} image variation(s)",
                generated_files=files,
            ),
        )

    def edit_image(self, request: GenerationRequest) -> GenerationResult:
        mode = request.mode
        try:
            if not request.input_image:
                raise InputValidationError(
                    "Input image file is required for editing",
                    "Missing input_image parameter",
                )
            image = load_input_image(self._resolve_input(request.input_image))
            output_dir = ensure_output_directory(self.output_dir)
            self.events.emit("generation_started", mode=mode, prompts=[request.prompt])
            match = self._request_image(request.prompt, [image], seed=request.seed)
            if match is None:
                logger.warning("No valid image data found in %s response parts", mode)
                return self._finish(
                    request,
                    GenerationResult(
                        success=False,
                        message=f"Failed to {mode} image",
                        error="No image data in response",
                    ),
                )
            path = self._save(match, output_dir, f"{mode}_{request.prompt}", "png")
        except (InputValidationError, InputImageNotFoundError) as exc:
            return _input_failure(exc)
        except ImageWriteError as exc:
            return self._finish(
                request,
                GenerationResult(success=False, message=f"Failed to {mode} image", error=str(exc)),
            )
        except Exception as exc:
            logger.warning("Error in %s_image: %s", mode, exc)
            return self._finish(
                request,
                GenerationResult(success=False, message=f"Failed to {mode} image", error=classify_error(exc)),
            )

        files = [path]
        self._handle_preview(files, request)
        return self._finish(
            request,
            GenerationResult(
                success=True,
                message=f"Successfully {_PAST_TENSE.get(mode, mode)} image",
                generated_files=files,
            ),
        )

    def remix_image(self, request: GenerationRequest) -> GenerationResult:
        try:
            references = list(request.input_images or ())
            if len(references) < MIN_REMIX_IMAGES:
                raise InputValidationError(
                    "At least two input images are required for a remix.",
                    f"Missing or insufficient input_images parameter (got {len(references)}, need {MIN_REMIX_IMAGES})",
                )
            images: list[InputImage] = [load_input_image(self._resolve_input(ref)) for ref in references]
            output_dir = ensure_output_directory(self.output_dir)
            self.events.emit("generation_started", mode="remix", prompts=[request.prompt])
            match = self._request_image(request.prompt, images, seed=request.seed)
            if match is None:
                return self._finish(
                    request,
                    GenerationResult(
                        success=False,
                        message="Failed to remix images.",
                        error="No image data in response from model.",
                    ),
                )
            path = self._save(match, output_dir, f"remix_{request.prompt}", "png")
        except (InputValidationError, InputImageNotFoundError) as exc:
            return _input_failure(exc)
        except ImageWriteError as exc:
            return self._finish(
                request,
                GenerationResult(success=False, message="Failed to remix images.", error=str(exc)),
            )
        except Exception as exc:
            logger.warning("Error in remix_image: %s", exc)
            return self._finish(
                request,
                GenerationResult(success=False, message="Failed to remix images.", error=classify_error(exc)),
            )

        files = [path]
        self._handle_preview(files, request)
        return self._finish(
            request,
            GenerationResult(success=True, message="Successfully remixed images.", generated_files=files),
        )

    def generate_story_sequence(
        self,
        request: GenerationRequest,
        options: StoryOptions | None = None,
    ) -> GenerationResult:
        options = options or StoryOptions()
        steps = request.output_count or DEFAULT_STORY_STEPS
        try:
            output_dir = ensure_output_directory(self.output_dir)
        except OSError as exc:
            logger.error("Could not prepare output directory: %s", exc)
            return self._finish(
                request,
                GenerationResult(
                    success=False,
                    message=f"Failed to generate {options.type} sequence",
                    error=str(exc),
                ),
            )

        logger.info("Generating %d-step %s sequence", steps, options.type)
        self.events.emit("generation_started", mode="story", steps=steps, sequence_type=options.type)

        files: list[Path] = []
        first_error: str | None = None
        for step in range(1, steps + 1):
            step_prompt = build_story_step_prompt(request.prompt, step, steps, options)
            logger.info("Generating step %d: %s", step, step_prompt)
            try:
                match = self._request_image(step_prompt, seed=request.seed)
                if match is None:
                    logger.warning("Step %d failed to generate - no valid image data received", step)
                    continue
                path = self._save(match, output_dir, f"{options.type}step{step}{request.prompt}", "png")
            except ImageWriteError as exc:
                first_error = first_error or str(exc)
                logger.warning("Error saving step %d: %s", step, exc)
                continue
            except Exception as exc:
                message = classify_error(exc)
                first_error = first_error or message
                logger.warning("Error generating step %d: %s", step, message)
                self.events.emit("generation_failed", mode="story", index=step - 1, error=message)
                if is_auth_failure(message):
                    return self._finish(
                        request,
                        GenerationResult(success=False, message="Story generation failed", error=message),
                    )
                continue
            files.append(path)

        logger.info("Story generation completed. Generated %d out of %d requested images", len(files), steps)
        if not files:
            return self._finish(
                request,
                GenerationResult(
                    success=False,
                    message="Failed to generate any story sequence images",
                    error=first_error or "No image data found in API responses",
                ),
            )

        self._handle_preview(files, request)
        if len(files) == steps:
            message = f"Successfully generated complete {steps}-step {options.type} sequence"
        else:
            message = (
                f"Generated {len(files)} out of {steps} requested {options.type} steps "
                f"({steps - len(files)} steps failed)"
            )
        return self._finish(request, GenerationResult(success=True, message=message, generated_files=files))

    def _request_image(
        self,
        prompt: str,
        images: Sequence[InputImage] = (),
        *,
        seed: int | None = None,
    ) -> ImageMatch | None:
        response = self.client.generate(prompt, images, seed=seed)
        self.events.emit(
            "provider_response",
            provider=self.client.name,
            model=response.model,
            segments=len(response.segments),
            usage=response.usage,
            metadata=response.metadata,
        )
        match = find_image_segment(response.segments)
        if match is not None:
            logger.debug("Found image data in %s (%d chars)", match.source, len(match.data))
        return match

    def _save(self, match: ImageMatch, output_dir: Path, name_source: str, file_format: str | None) -> Path:
        filename = generate_filename(name_source, file_format, output_dir)
        path = save_image_from_base64(match.data, output_dir, filename)
        self.events.emit("image_saved", path=path, mime_type=match.mime_type, source=match.source)
        return path

    def _resolve_input(self, reference: str) -> Path:
        lookup = find_input_file(reference)
        if not lookup.found or lookup.file_path is None:
            raise InputImageNotFoundError(reference, lookup.searched_paths)
        return lookup.file_path

    def _handle_preview(self, files: Sequence[Path], request: GenerationRequest) -> None:
        if not request.wants_preview or not files:
            if len(files) > 1 and request.no_preview:
                logger.debug("Auto-preview disabled for %d images (no_preview specified)", len(files))
            return
        self.previewer.open_all(files)

    def _finish(self, request: GenerationRequest, result: GenerationResult) -> GenerationResult:
        self.events.emit(
            "generation_finished",
            mode=request.mode,
            success=result.success,
            message=result.message,
            files=[str(path) for path in result.generated_files],
            error=result.error,
        )
        return result


def _input_failure(exc: InputValidationError | InputImageNotFoundError) -> GenerationResult:
    if isinstance(exc, InputImageNotFoundError):
        return GenerationResult(
            success=False,
            message=str(exc),
            error=f"Searched in: {', '.join(exc.searched_paths)}",
        )
    return GenerationResult(success=False, message=str(exc), error=exc.detail)
