"""Contracts shared by the external issue-analysis providers.

Every provider raises the exceptions defined here so callers can tell a
quota problem (try the next provider) from a broken configuration or an
unusable reply.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Protocol, Sequence

# HTTP status returned by both SDKs for quota and rate limits.
RATE_LIMIT_STATUS = 429

ProviderReporter = Callable[[str, "ProviderStatus", Exception | None], None]


class ProviderStatus(str, Enum):
    """Outcome of one provider attempt inside a chain."""

    SUCCESS = "success"
    QUOTA = "quota"
    FAILURE = "failure"


class LLMProviderError(Exception):
    """A provider could not produce an analysis."""


class LLMQuotaError(LLMProviderError):
    """The provider refused the request for quota or rate-limit reasons."""


class LLMProviderConfigurationError(LLMProviderError):
    """The provider is missing an API key or other required setting."""


class LLMParseError(LLMProviderError):
    """The reply did not contain a usable issue payload.

    ``response_text`` keeps the raw reply; ``str()`` appends a truncated copy
    so the offending answer shows up in the logs.
    """

    MAX_SHOWN = 2000

    def __init__(self, message: str, *, response_text: str | None = None) -> None:
        super().__init__(message)
        self.response_text = response_text

    def __str__(self) -> str:
        message = super().__str__()
        if self.response_text is None:
            return message
        shown = self.response_text[: self.MAX_SHOWN]
        if len(self.response_text) > self.MAX_SHOWN:
            shown += "... [truncated]"
        return f"{message}\n--- LLM Response ---\n{shown}"


def http_status(exc: BaseException) -> int | None:
    """Return the HTTP status carried by an SDK exception, if any.

    google-genai's ``APIError`` exposes ``code``; mistralai's ``SDKError`` and
    most HTTP clients expose ``status_code``.
    """
    for attr in ("code", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def is_rate_limited(exc: BaseException) -> bool:
    return http_status(exc) == RATE_LIMIT_STATUS


class LLMProvider(Protocol):
    """A configured client that analyses text with a fixed system prompt."""

    name: str

    def generate(self, user_prompts: Sequence[str]) -> Any:
        """Send ``user_prompts`` and return the raw SDK reply."""
        ...


class ProviderFactory(Protocol):
    def __call__(
        self,
        *,
        system_prompt: str,
        timeout: float | None,
    ) -> LLMProvider: ...
