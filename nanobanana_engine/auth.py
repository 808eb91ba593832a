"""API key resolution."""

from __future__ import annotations

import logging
import os
from typing import Mapping

from .contracts import AuthConfig, KeyType
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Checked in order; the first non-empty value wins.
API_KEY_ENV_VARS: tuple[tuple[str, KeyType], ...] = (
    ("NANOBANANA_GEMINI_API_KEY", "GEMINI_API_KEY"),
    ("NANOBANANA_GOOGLE_API_KEY", "GOOGLE_API_KEY"),
    ("GEMINI_API_KEY", "GEMINI_API_KEY"),
    ("GOOGLE_API_KEY", "GOOGLE_API_KEY"),
)

AUTH_DOCS_URL = "https://github.com/google-gemini/gemini-cli/blob/main/docs/cli/authentication.md"


def resolve_auth(environ: Mapping[str, str] | None = None) -> AuthConfig:
    env = os.environ if environ is None else environ
    for index, (name, key_type) in enumerate(API_KEY_ENV_VARS):
        value = str(env.get(name) or "").strip()
        if not value:
            continue
        suffix = " (fallback)" if index >= 2 else ""
        logger.info("Found %s environment variable%s", name, suffix)
        return AuthConfig(api_key=value, key_type=key_type)

    names = ", ".join(name for name, _ in API_KEY_ENV_VARS[:-1])
    raise ConfigurationError(
        f"No valid API key found. Please set {names}, or {API_KEY_ENV_VARS[-1][0]} environment variable.\n"
        f"For more details on authentication, visit: {AUTH_DOCS_URL}"
    )
