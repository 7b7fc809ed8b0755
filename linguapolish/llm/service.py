from __future__ import annotations

import logging
from typing import Any, Sequence

from .provider import (
    LLMProvider,
    LLMProviderError,
    LLMQuotaError,
    ProviderReporter,
    ProviderStatus,
)

LOGGER = logging.getLogger(__name__)


class LLMService:
    """Sends an analysis request down a priority-ordered provider chain.

    A provider that reports quota exhaustion hands the request to the next
    one. Any other provider error stops the chain and propagates.
    """

    def __init__(
        self,
        providers: Sequence[LLMProvider],
        *,
        reporter: ProviderReporter | None = None,
    ) -> None:
        self._providers = list(providers)
        self._reporter = reporter
        self.last_provider: str | None = None

    def provider_order(self) -> list[str]:
        return [provider.name for provider in self._providers]

    def generate(self, user_prompts: Sequence[str]) -> Any:
        """Return the reply of the first provider with quota left.

        Raises:
            LLMProviderError: If the chain is empty, or a provider fails for a
                reason other than quota.
            LLMQuotaError: If every provider is out of quota.
        """
        if not self._providers:
            raise LLMProviderError("No LLM providers configured")

        self.last_provider = None
        exhausted: list[str] = []
        quota_error: LLMQuotaError | None = None
        for provider in self._providers:
            try:
                reply = provider.generate(user_prompts)
            except LLMQuotaError as exc:
                exhausted.append(provider.name)
                quota_error = exc
                self._report(provider.name, ProviderStatus.QUOTA, exc)
                continue
            except LLMProviderError as exc:
                self._report(provider.name, ProviderStatus.FAILURE, exc)
                raise

            if exhausted:
                LOGGER.info(
                    "%s answered after quota errors from %s",
                    provider.name,
                    ", ".join(exhausted),
                )
            self.last_provider = provider.name
            self._report(provider.name, ProviderStatus.SUCCESS)
            return reply

        raise LLMQuotaError("All providers exceeded quota") from quota_error

    def _report(
        self,
        provider_name: str,
        status: ProviderStatus,
        error: Exception | None = None,
    ) -> None:
        if self._reporter is not None:
            self._reporter(provider_name, status, error)
