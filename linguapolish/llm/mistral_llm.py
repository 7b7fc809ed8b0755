from __future__ import annotations

import logging
from typing import Any, Sequence, cast

from mistralai import Mistral, models

from .provider import (
    LLMProviderConfigurationError,
    LLMQuotaError,
    is_rate_limited,
)

LOGGER = logging.getLogger(__name__)


class MistralLLM:
    """Wrapper around the Mistral SDK with a fixed system instruction.

    Requests use the ``inputs``/``instructions`` shape of
    ``beta.conversations.start``.
    """

    name = "mistral"
    MODEL = "mistral-small-latest"
    TEMPERATURE = 0.2
    MAX_OUTPUT_TOKENS = 1024

    def __init__(
        self,
        system_prompt: str,
        *,
        api_key: str | None = None,
        client: Mistral | None = None,
        timeout: float | None = None,
    ) -> None:
        self._system_prompt = system_prompt

        if client is None:
            if not api_key:
                raise LLMProviderConfigurationError(
                    "Mistral provider: no API key configured (set MISTRAL_API_KEY)."
                )
            timeout_ms = int(timeout * 1000) if timeout else None
            client = Mistral(api_key=api_key, timeout_ms=timeout_ms)
        self._client = client

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def generate(self, user_prompts: Sequence[str]) -> Any:
        """Start a conversation with ``user_prompts`` as one user message."""
        if not user_prompts:
            raise ValueError("user_prompts must not be empty.")

        inputs = cast(
            models.ConversationInputs,
            [
                models.MessageInputEntry(
                    role="user",
                    content="\n".join(user_prompts),
                )
            ],
        )

        try:
            response = self._client.beta.conversations.start(
                inputs=inputs,
                instructions=self._system_prompt,
                model=self.MODEL,
                completion_args={
                    "temperature": self.TEMPERATURE,
                    "max_tokens": self.MAX_OUTPUT_TOKENS,
                },
                tools=[],
            )
        except Exception as exc:
            if is_rate_limited(exc):
                LOGGER.warning("Mistral rate limited: %s", exc)
                raise LLMQuotaError(
                    "Mistral provider: quota exhausted or rate limited"
                ) from exc
            raise

        return response

    @staticmethod
    def response_text(response: Any) -> str | None:
        """Return the first non-empty text output of a conversation response."""
        outputs = getattr(response, "outputs", None)
        if not isinstance(outputs, list):
            return None
        for entry in outputs:
            if isinstance(entry, dict):
                content = entry.get("content")
            else:
                content = getattr(entry, "content", None)
            if isinstance(content, str) and content.strip():
                return content
        return None
