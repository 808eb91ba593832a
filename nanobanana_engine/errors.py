"""Engine exceptions and translation of service errors into operator-readable text."""

from __future__ import annotations

from typing import Any, Sequence

AUTH_FAILURE_PREFIX = "Authentication failed"


class NanobananaError(RuntimeError):
    """Base class for engine errors."""


class ConfigurationError(NanobananaError):
    """Raised when required configuration (credentials) is missing."""


class InputValidationError(NanobananaError):
    """Raised when a request is missing required inputs."""

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(message)


class InputImageNotFoundError(NanobananaError):
    def __init__(self, reference: str, searched_paths: Sequence[str]) -> None:
        self.reference = reference
        self.searched_paths = tuple(searched_paths)
        super().__init__(f"Input image not found: {reference}")


class ImageWriteError(NanobananaError):
    """Raised when a decoded image cannot be written to disk."""


def classify_error(error: BaseException | Any) -> str:
    """Map an exception from the generation API to a fixed human message.

    Only the text changes; the failed call is never retried.
    """
    raw_message = str(error)
    lowered = raw_message.lower()

    if "api key not valid" in lowered:
        return (
            f"{AUTH_FAILURE_PREFIX}: The provided API key is invalid. "
            "Please check your NANOBANANA_GEMINI_API_KEY environment variable."
        )
    if "permission denied" in lowered:
        return (
            f"{AUTH_FAILURE_PREFIX}: The provided API key does not have the necessary permissions "
            "for the Gemini API. Please check your Google Cloud project settings."
        )
    if "quota exceeded" in lowered:
        return "API quota exceeded. Please check your usage and limits in the Google Cloud console."

    status = _status_code(error)
    if status is not None:
        if status == 400:
            return (
                "The request was malformed. This may be due to an issue with the prompt. "
                "Please check for safety violations or unsupported content."
            )
        if status == 403:
            return (
                f"{AUTH_FAILURE_PREFIX}. Please ensure your API key (e.g., NANOBANANA_GEMINI_API_KEY) "
                "is valid and has the necessary permissions."
            )
        if status == 500:
            return "The image generation service encountered a temporary internal error. Please try again later."
        return f"API request failed with status {status}. Please check your connection and API key."

    return f"An unexpected error occurred: {raw_message}"


def is_auth_failure(message: str | None) -> bool:
    return AUTH_FAILURE_PREFIX.lower() in str(message or "").lower()


def _status_code(error: Any) -> int | None:
    # google-genai APIError exposes ``code``; HTTP-style errors carry a response object.
    for attr in ("code", "status_code"):
        value = _coerce_status(getattr(error, attr, None))
        if value is not None:
            return value
    response = getattr(error, "response", None)
    if response is None:
        return None
    for attr in ("status", "status_code"):
        value = _coerce_status(getattr(response, attr, None))
        if value is not None:
            return value
    return None


def _coerce_status(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None
