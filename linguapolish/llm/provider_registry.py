from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from linguapolish.config import split_names

from .gemini_llm import GeminiLLM
from .mistral_llm import MistralLLM
from .provider import LLMProvider, LLMProviderConfigurationError, ProviderFactory

LOGGER = logging.getLogger(__name__)

API_KEY_VARIABLES = {
    "gemini": "GEMINI_API_KEY",
    "mistral": "MISTRAL_API_KEY",
}


def _gemini_factory(
    *,
    system_prompt: str,
    timeout: float | None,
) -> LLMProvider:
    return GeminiLLM(
        system_prompt,
        api_key=os.environ.get(API_KEY_VARIABLES["gemini"]),
        timeout=timeout,
    )


def _mistral_factory(
    *,
    system_prompt: str,
    timeout: float | None,
) -> LLMProvider:
    return MistralLLM(
        system_prompt,
        api_key=os.environ.get(API_KEY_VARIABLES["mistral"]),
        timeout=timeout,
    )


_PROVIDER_FACTORIES: dict[str, ProviderFactory] = {
    "gemini": _gemini_factory,
    "mistral": _mistral_factory,
}


def available_providers() -> list[str]:
    return list(_PROVIDER_FACTORIES.keys())


def create_provider_chain(
    *,
    system_prompt: str,
    timeout: float | None = None,
    dotenv_path: str | Path | None = None,
    primary: str | None = None,
    fallbacks: Sequence[str] | None = None,
) -> list[LLMProvider]:
    """Return configured providers honoring environment/priority hints.

    Explicit ``primary``/``fallbacks`` win over ``LLM_PRIMARY``/``LLM_FALLBACK``;
    with neither, every known provider is tried in registration order.
    Providers whose API key is missing are skipped with a warning.

    Raises:
        ValueError: If a provider name is unknown.
        LLMProviderConfigurationError: If no named provider could be configured.
    """

    # Load the .env file first so LLM_PRIMARY/LLM_FALLBACK and keys are visible.
    if dotenv_path is not None:
        load_dotenv(dotenv_path=str(dotenv_path), override=True)

    candidates: list[str] = []
    if primary:
        candidates.extend(split_names(primary))
    else:
        candidates.extend(split_names(os.environ.get("LLM_PRIMARY")))

    if fallbacks:
        candidates.extend(name.strip().lower() for name in fallbacks if name.strip())
    else:
        candidates.extend(split_names(os.environ.get("LLM_FALLBACK")))

    if not candidates:
        candidates = available_providers()

    order: list[str] = []
    seen: set[str] = set()
    for name in candidates:
        if name in seen:
            continue
        seen.add(name)
        if name not in _PROVIDER_FACTORIES:
            raise ValueError(f"Unknown LLM provider '{name}'")
        order.append(name)

    providers: list[LLMProvider] = []
    for name in order:
        try:
            providers.append(
                _PROVIDER_FACTORIES[name](
                    system_prompt=system_prompt,
                    timeout=timeout,
                )
            )
        except LLMProviderConfigurationError as exc:
            LOGGER.warning("Skipping provider %s: %s", name, exc)

    if not providers:
        raise LLMProviderConfigurationError(
            "No LLM provider could be configured for: " + ", ".join(order)
        )
    return providers
