from __future__ import annotations

import logging
import time
from typing import Any, Sequence

from google import genai
from google.genai import types

from linguapolish.config import read_float_env, read_int_env

from .provider import (
    LLMProviderConfigurationError,
    LLMQuotaError,
    is_rate_limited,
)

LOGGER = logging.getLogger(__name__)


class GeminiLLM:
    """Wrapper around the Gemini SDK with a fixed system instruction.

    Thinking is disabled and output is capped so a single analysis stays
    within the request deadline set on the HTTP client.
    """

    name = "gemini"
    MODEL = "gemini-2.5-flash"
    TEMPERATURE = 0.2
    MAX_OUTPUT_TOKENS = 1024
    THINKING_BUDGET = 0

    def __init__(
        self,
        system_prompt: str,
        *,
        api_key: str | None = None,
        client: genai.Client | None = None,
        timeout: float | None = None,
        min_request_interval: float | None = None,
        max_retries: int | None = None,
    ) -> None:
        self._system_prompt = system_prompt

        if client is None:
            if not api_key:
                raise LLMProviderConfigurationError(
                    "Gemini provider: no API key configured (set GEMINI_API_KEY)."
                )
            http_options = (
                types.HttpOptions(timeout=int(timeout * 1000)) if timeout else None
            )
            client = genai.Client(api_key=api_key, http_options=http_options)
        self._client = client

        if min_request_interval is None:
            min_request_interval = read_float_env("GEMINI_MIN_REQUEST_INTERVAL", 0.0)
        self._min_request_interval = max(0.0, min_request_interval)

        if max_retries is None:
            max_retries = read_int_env("GEMINI_MAX_RETRIES", 0)
        self._max_retries = max(0, max_retries)

        # Initialised to 0 so the first request is never delayed
        self._last_request_time = 0.0

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def _config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=self._system_prompt,
            thinking_config=types.ThinkingConfig(thinking_budget=self.THINKING_BUDGET),
            temperature=self.TEMPERATURE,
            max_output_tokens=self.MAX_OUTPUT_TOKENS,
        )

    def generate(self, user_prompts: Sequence[str]) -> Any:
        """Send ``user_prompts`` as one message and return the SDK response."""
        if not user_prompts:
            raise ValueError("user_prompts must not be empty.")

        contents = "\n".join(user_prompts)
        config = self._config()

        for attempt in range(self._max_retries + 1):
            self._enforce_rate_limit()
            try:
                response = self._client.models.generate_content(
                    model=self.MODEL,
                    contents=contents,
                    config=config,
                )
            except Exception as exc:
                self._last_request_time = time.time()
                if not is_rate_limited(exc):
                    raise
                if attempt < self._max_retries:
                    # Backoff: min_interval * 2^attempt, with a small base delay
                    backoff = (self._min_request_interval or 0.1) * (2**attempt)
                    LOGGER.warning(
                        "Gemini rate limited; retrying in %.1fs (attempt %d/%d)",
                        backoff,
                        attempt + 1,
                        self._max_retries,
                    )
                    time.sleep(backoff)
                    continue
                raise LLMQuotaError(
                    "Gemini provider: rate limited (exhausted retries)"
                ) from exc

            self._last_request_time = time.time()
            return response

        raise LLMQuotaError("Gemini provider: rate limited (exhausted retries)")

    def _enforce_rate_limit(self) -> None:
        """Enforce minimum interval between API requests."""
        if self._min_request_interval <= 0:
            return
        elapsed = time.time() - self._last_request_time
        if elapsed < self._min_request_interval:
            time.sleep(self._min_request_interval - elapsed)
