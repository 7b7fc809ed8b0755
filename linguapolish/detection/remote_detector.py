"""Issue detection delegated to an external LLM provider chain.

The provider is asked for issue records in the JSON wire shape understood by
:class:`~linguapolish.models.IssueSpan`. Replies are untrusted: every record is
validated on its own, its offsets are checked against the analysed text, and
the survivors go through the same overlap rule as local detection. Any
provider, network or parse failure yields an empty result.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol, Sequence

from pydantic import ValidationError

from linguapolish.config import Settings
from linguapolish.llm.json_utils import extract_issue_payload
from linguapolish.llm.mistral_llm import MistralLLM
from linguapolish.llm.provider import LLMProviderError, ProviderStatus
from linguapolish.llm.provider_registry import create_provider_chain
from linguapolish.llm.service import LLMService
from linguapolish.models import IssueSpan
from linguapolish.prompt.render_prompt import render_system_prompt, render_user_prompt

from .detector import select_non_overlapping

LOGGER = logging.getLogger(__name__)


class TextGenerator(Protocol):
    def generate(self, user_prompts: Sequence[str]) -> Any: ...


def response_text(response: Any) -> str | None:
    """Return the reply text from a provider response object or string."""
    if isinstance(response, str):
        return response
    text = getattr(response, "text", None)
    if isinstance(text, str):
        return text
    return MistralLLM.response_text(response)


def _nearest_occurrence(text: str, needle: str, claimed: int) -> int | None:
    haystack = text.lower()
    target = needle.lower()
    best: int | None = None
    start = haystack.find(target)
    while start != -1:
        if best is None or abs(start - claimed) < abs(best - claimed):
            best = start
        start = haystack.find(target, start + 1)
    return best


def locate_span(text: str, span: IssueSpan) -> IssueSpan | None:
    """Check ``span`` against ``text``, relocating it when its offsets are off.

    A span whose range holds its recorded text is kept as is. Otherwise the
    recorded text is searched for case-insensitively and the occurrence
    nearest the claimed position wins. Returns None when the span cannot be
    placed.
    """
    if not span.matched_text:
        if span.fits(text):
            return span.model_copy(
                update={"matched_text": text[span.position : span.end]}
            )
        return None

    if text[span.position : span.end] == span.matched_text and span.fits(text):
        return span

    position = _nearest_occurrence(text, span.matched_text, span.position)
    if position is None:
        return None
    length = len(span.matched_text)
    LOGGER.debug(
        "Relocated remote issue %s from %d to %d", span.id, span.position, position
    )
    return span.model_copy(
        update={
            "position": position,
            "length": length,
            "matched_text": text[position : position + length],
            "context_position": None,
            "context_length": None,
        }
    )


def _unique_id(span_id: str, position: int, seen: set[str]) -> str:
    if span_id not in seen:
        return span_id
    candidate = f"{span_id}-{position}"
    counter = 2
    while candidate in seen:
        candidate = f"{span_id}-{position}-{counter}"
        counter += 1
    return candidate


def spans_from_records(text: str, records: Iterable[Any]) -> list[IssueSpan]:
    """Validate raw issue records against ``text``; invalid ones are skipped."""
    spans: list[IssueSpan] = []
    seen: set[str] = set()
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            LOGGER.warning("Skipping remote issue #%d: not an object", index)
            continue
        data = dict(record)
        if not str(data.get("id") or "").strip():
            data["id"] = f"remote-{index}"
        try:
            span = IssueSpan.model_validate(data)
        except ValidationError as exc:
            LOGGER.warning(
                "Skipping invalid remote issue #%d: %s",
                index,
                exc.errors(include_url=False),
            )
            continue

        located = locate_span(text, span)
        if located is None:
            LOGGER.warning(
                "Skipping remote issue %s: %r not found in the text",
                span.id,
                span.matched_text,
            )
            continue

        span_id = _unique_id(located.id, located.position, seen)
        if span_id != located.id:
            located = located.model_copy(update={"id": span_id})
        seen.add(span_id)
        spans.append(located)

    return select_non_overlapping(spans)


class RemoteIssueDetector:
    """Detection strategy backed by an LLM provider chain.

    ``generator`` is an :class:`~linguapolish.llm.service.LLMService` or any
    single provider exposing ``generate``.
    """

    name = "remote"

    def __init__(self, generator: TextGenerator) -> None:
        self._generator = generator

    def detect(self, text: str, language: str) -> list[IssueSpan]:
        if not text or not text.strip():
            return []

        prompt = render_user_prompt(language, text)
        try:
            response = self._generator.generate([prompt])
            reply = response_text(response)
            if reply is None:
                LOGGER.warning("Remote analysis returned no text; no issues reported")
                return []
            records = extract_issue_payload(reply)
        except LLMProviderError as exc:
            LOGGER.warning("Remote analysis failed: %s", exc)
            return []
        except Exception:
            LOGGER.exception("Remote analysis request failed")
            return []

        spans = spans_from_records(text, records)
        source = getattr(self._generator, "last_provider", None) or getattr(
            self._generator, "name", "provider"
        )
        LOGGER.info(
            "%s returned %d record(s); kept %d issue(s)",
            source,
            len(records),
            len(spans),
        )
        return spans


def _log_provider_status(
    provider: str, status: ProviderStatus, error: Exception | None
) -> None:
    if status is ProviderStatus.SUCCESS:
        LOGGER.debug("Provider %s answered", provider)
    else:
        LOGGER.warning("Provider %s: %s (%s)", provider, status.value, error)


def build_remote_detector(
    settings: Settings,
    *,
    primary: str | None = None,
    dotenv_path: str | None = None,
) -> RemoteIssueDetector:
    """Create a :class:`RemoteIssueDetector` over the configured provider chain.

    Raises:
        LLMProviderConfigurationError: If no provider has an API key.
    """
    providers = create_provider_chain(
        system_prompt=render_system_prompt(),
        timeout=settings.remote_timeout,
        dotenv_path=dotenv_path,
        primary=primary or settings.primary_provider,
        fallbacks=settings.fallback_providers or None,
    )
    service = LLMService(providers, reporter=_log_provider_status)
    LOGGER.info("Remote analysis providers: %s", ", ".join(service.provider_order()))
    return RemoteIssueDetector(service)
