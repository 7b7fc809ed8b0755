"""Runtime configuration for detection and remote analysis.

Settings are read from the environment (optionally seeded from a ``.env``
file). Invalid numeric values fall back to the defaults rather than failing.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

LOGGER = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en-us"
# Deadline for a single external analysis request, in seconds.
DEFAULT_REMOTE_TIMEOUT = 15.0
# Texts at or below this length never receive a demonstration issue.
FALLBACK_MIN_TEXT_LENGTH = 20

_TRUE_VALUES = ("1", "true", "yes", "on")


def read_float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


def read_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


def _read_bool_env(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES


def split_names(value: str | None) -> list[str]:
    """Split a comma-separated provider list into lowercase names."""
    if not value:
        return []
    return [chunk.strip().lower() for chunk in value.split(",") if chunk.strip()]


@dataclass
class Settings:
    """Configuration shared by the CLI and the editor session."""

    language: str = DEFAULT_LANGUAGE
    enable_fallback: bool = True
    remote_timeout: float = DEFAULT_REMOTE_TIMEOUT
    primary_provider: str | None = None
    fallback_providers: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls, dotenv_path: str | Path | None = None) -> "Settings":
        if dotenv_path is not None:
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        primary = split_names(os.environ.get("LLM_PRIMARY"))
        timeout = read_float_env("LINGUAPOLISH_REMOTE_TIMEOUT", DEFAULT_REMOTE_TIMEOUT)
        return cls(
            language=os.environ.get("LINGUAPOLISH_LANGUAGE", DEFAULT_LANGUAGE).strip()
            or DEFAULT_LANGUAGE,
            enable_fallback=_read_bool_env("LINGUAPOLISH_ENABLE_FALLBACK", True),
            remote_timeout=timeout if timeout > 0 else DEFAULT_REMOTE_TIMEOUT,
            primary_provider=primary[0] if primary else None,
            fallback_providers=primary[1:]
            + split_names(os.environ.get("LLM_FALLBACK")),
        )
