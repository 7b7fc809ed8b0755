from __future__ import annotations

import itertools
import json
import logging
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from linguapolish.config import Settings
from linguapolish.detection import remote_detector
from linguapolish.detection.remote_detector import (
    RemoteIssueDetector,
    build_remote_detector,
    locate_span,
    response_text,
    spans_from_records,
)
from linguapolish.llm.provider import LLMProviderConfigurationError, LLMQuotaError
from linguapolish.llm.service import LLMService
from linguapolish.models import IssueSpan, IssueType

TEXT = "they was going. this is important"


class _FakeGenerator:
    def __init__(self, reply: Any = None, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[Sequence[str]] = []

    def generate(self, user_prompts: Sequence[str]) -> Any:
        self.prompts.append(list(user_prompts))
        if self.error is not None:
            raise self.error
        return self.reply


def _record(**overrides: Any) -> dict[str, Any]:
    record = {
        "id": "g1",
        "type": "grammar",
        "message": "Subject-verb agreement",
        "text": "they was",
        "position": 0,
        "length": 8,
        "suggestions": ["they were"],
    }
    record.update(overrides)
    return record


def test_fenced_reply_is_parsed_into_spans() -> None:
    reply = "Sure!\n```json\n" + json.dumps({"issues": [_record()]}) + "\n```"
    generator = _FakeGenerator(SimpleNamespace(text=reply))

    spans = RemoteIssueDetector(generator).detect(TEXT, "en-us")

    assert [s.id for s in spans] == ["g1"]
    assert spans[0].type is IssueType.GRAMMAR
    assert spans[0].suggestions == ["they were"]
    prompt = generator.prompts[0][0]
    assert "Language: en-us" in prompt
    assert TEXT in prompt


def test_bare_array_reply_is_accepted() -> None:
    generator = _FakeGenerator(json.dumps([_record()]))
    assert len(RemoteIssueDetector(generator).detect(TEXT, "en-us")) == 1


@pytest.mark.parametrize(
    "reply",
    ["I could not analyse this text.", '{"result": "fine"}', None, SimpleNamespace()],
)
def test_unusable_replies_yield_nothing(reply: Any, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="linguapolish.detection.remote_detector"):
        spans = RemoteIssueDetector(_FakeGenerator(reply)).detect(TEXT, "en-us")
    assert spans == []
    assert caplog.records


@pytest.mark.parametrize(
    "error", [LLMQuotaError("quota"), TimeoutError("deadline"), ConnectionError("down")]
)
def test_provider_failures_yield_nothing(error: Exception) -> None:
    assert RemoteIssueDetector(_FakeGenerator(error=error)).detect(TEXT, "en-us") == []


def test_blank_text_skips_the_provider() -> None:
    generator = _FakeGenerator("[]")
    assert RemoteIssueDetector(generator).detect("   ", "en-us") == []
    assert generator.prompts == []


def test_invalid_records_are_skipped_individually() -> None:
    records = [
        _record(),
        "not an object",
        _record(id="bad-type", type="spelling"),
        _record(id="neg", position=-4),
        _record(id="no-message", message=""),
        _record(id="ok2", type="capitalization", text="this", position=16, length=4),
    ]
    spans = spans_from_records(TEXT, records)
    assert [s.id for s in spans] == ["g1", "ok2"]


def test_mismatched_offsets_are_relocated_to_nearest_match() -> None:
    text = "this is it. This is it again."
    span = IssueSpan(
        id="r", type="style", message="m", text="this is", position=14, length=7
    )
    located = locate_span(text, span)
    assert located is not None
    assert located.position == 12
    assert located.matched_text == "This is"


def test_unlocatable_records_are_dropped() -> None:
    spans = spans_from_records(TEXT, [_record(text="they were", position=0, length=9)])
    assert spans == []


def test_missing_text_is_filled_from_range() -> None:
    spans = spans_from_records(TEXT, [_record(text="", position=16, length=4)])
    assert spans[0].matched_text == "this"


def test_duplicate_ids_and_overlaps_are_resolved() -> None:
    records = [
        _record(id="dup"),
        _record(id="dup", type="style", text="going", position=9, length=5),
        _record(id="dup", type="clarity", text="was going", position=5, length=9),
        _record(id=None, type="capitalization", text="this", position=16, length=4),
    ]
    spans = spans_from_records(TEXT, records)

    ids = [s.id for s in spans]
    assert len(set(ids)) == len(ids)
    assert ids == ["dup", "dup-9", "remote-3"]
    for a, b in itertools.combinations(spans, 2):
        assert not a.intersects(b)


def test_response_text_handles_provider_shapes() -> None:
    assert response_text("raw") == "raw"
    assert response_text(SimpleNamespace(text="gemini")) == "gemini"
    mistral = SimpleNamespace(outputs=[SimpleNamespace(content="mistral")])
    assert response_text(mistral) == "mistral"
    assert response_text(object()) is None


def test_build_remote_detector_uses_provider_chain(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def fake_chain(**kwargs: Any) -> list[Any]:
        captured.update(kwargs)
        provider = _FakeGenerator(json.dumps({"issues": [_record()]}))
        provider.name = "fake"  # type: ignore[attr-defined]
        return [provider]

    monkeypatch.setattr(remote_detector, "create_provider_chain", fake_chain)
    settings = Settings(remote_timeout=3.0, primary_provider="mistral", fallback_providers=["gemini"])

    detector = build_remote_detector(settings)

    assert captured["timeout"] == 3.0
    assert captured["primary"] == "mistral"
    assert captured["fallbacks"] == ["gemini"]
    assert "issues" in captured["system_prompt"]
    assert [s.id for s in detector.detect(TEXT, "en-us")] == ["g1"]


def test_service_quota_exhaustion_degrades_to_empty() -> None:
    class _QuotaProvider:
        name = "q"

        def generate(self, user_prompts):
            raise LLMQuotaError("no quota")

    detector = RemoteIssueDetector(LLMService([_QuotaProvider()]))
    assert detector.detect(TEXT, "en-us") == []


def test_build_remote_detector_without_keys_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("MISTRAL_API_KEY", raising=False)
    monkeypatch.delenv("LLM_PRIMARY", raising=False)
    monkeypatch.delenv("LLM_FALLBACK", raising=False)
    with pytest.raises(LLMProviderConfigurationError):
        build_remote_detector(Settings())
