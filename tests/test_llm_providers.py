from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, cast

import pytest
from google import genai
from google.genai import types
from mistralai import Mistral

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from linguapolish.detection.remote_detector import RemoteIssueDetector
from linguapolish.llm.gemini_llm import GeminiLLM
from linguapolish.llm.mistral_llm import MistralLLM
from linguapolish.llm.provider import LLMProviderConfigurationError, LLMQuotaError


class _DummyResponse:
    def __init__(self, text: Any) -> None:
        self.text = text


class _DummyModels:
    def __init__(self, response_text: Any = "mock-response", errors=()) -> None:
        self.calls: list[dict[str, object]] = []
        self._response_text = response_text
        self._errors = list(errors)

    def generate_content(self, **kwargs: object) -> _DummyResponse:
        self.calls.append(kwargs)
        if self._errors:
            raise self._errors.pop(0)
        return _DummyResponse(text=self._response_text)


class _DummyClient:
    def __init__(self, response_text: Any = "mock-response", errors=()) -> None:
        self.models = _DummyModels(response_text=response_text, errors=errors)


class _StatusError(Exception):
    def __init__(self, code: int) -> None:
        super().__init__(f"HTTP {code}")
        self.code = code


def _gemini(client: _DummyClient, **kwargs: Any) -> GeminiLLM:
    kwargs.setdefault("min_request_interval", 0)
    kwargs.setdefault("max_retries", 0)
    return GeminiLLM("System rules.", client=cast(genai.Client, client), **kwargs)


def test_gemini_generate_joins_prompts_and_sets_config() -> None:
    client = _DummyClient()
    llm = _gemini(client)

    result = llm.generate(["Line one", "Line two"])

    assert result.text == "mock-response"
    call = client.models.calls[0]
    assert call["model"] == "gemini-2.5-flash"
    assert call["contents"] == "Line one\nLine two"
    config = call["config"]
    assert isinstance(config, types.GenerateContentConfig)
    assert config.system_instruction == "System rules."
    assert config.temperature == 0.2
    assert config.max_output_tokens == 1024
    assert config.thinking_config is not None
    assert config.thinking_config.thinking_budget == 0


def test_gemini_rejects_empty_prompts() -> None:
    with pytest.raises(ValueError):
        _gemini(_DummyClient()).generate([])


def test_gemini_retries_rate_limit_then_succeeds(monkeypatch: pytest.MonkeyPatch) -> None:
    sleeps: list[float] = []
    monkeypatch.setattr("linguapolish.llm.gemini_llm.time.sleep", sleeps.append)
    client = _DummyClient(errors=[_StatusError(429)])

    result = _gemini(client, max_retries=2).generate(["x"])

    assert result.text == "mock-response"
    assert len(client.models.calls) == 2
    assert sleeps == [0.1]


def test_gemini_rate_limit_exhausts_into_quota_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("linguapolish.llm.gemini_llm.time.sleep", lambda _: None)
    client = _DummyClient(errors=[_StatusError(429), _StatusError(429)])

    with pytest.raises(LLMQuotaError):
        _gemini(client, max_retries=1).generate(["x"])


def test_gemini_other_errors_propagate() -> None:
    client = _DummyClient(errors=[_StatusError(500)])
    with pytest.raises(_StatusError):
        _gemini(client).generate(["x"])


def test_gemini_reads_retry_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_MAX_RETRIES", "3")
    monkeypatch.setenv("GEMINI_MIN_REQUEST_INTERVAL", "not-a-number")
    llm = GeminiLLM("s", client=cast(genai.Client, _DummyClient()))
    assert llm._max_retries == 3
    assert llm._min_request_interval == 0.0


def test_gemini_requires_api_key_without_client() -> None:
    with pytest.raises(LLMProviderConfigurationError):
        GeminiLLM("s", api_key=None)


class _Conversations:
    def __init__(self, content: Any = "mock-response", error: Exception | None = None) -> None:
        self.calls: list[dict[str, object]] = []
        self._content = content
        self._error = error

    def start(self, **kwargs: object) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return SimpleNamespace(outputs=[SimpleNamespace(content=self._content)])


class _MistralClient:
    def __init__(self, content: Any = "mock-response", error: Exception | None = None) -> None:
        self.beta = SimpleNamespace(conversations=_Conversations(content, error))


class _MistralStatusError(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


def test_mistral_generate_uses_conversation_inputs() -> None:
    client = _MistralClient('{"issues": [{"id": "a"}]}')
    llm = MistralLLM("System rules.", client=cast(Mistral, client))

    response = llm.generate(["one", "two"])

    call = client.beta.conversations.calls[0]
    assert call["instructions"] == "System rules."
    assert call["model"] == llm.MODEL
    assert call["completion_args"] == {"temperature": 0.2, "max_tokens": 1024}
    assert call["inputs"][0].content == "one\ntwo"
    assert MistralLLM.response_text(response) == '{"issues": [{"id": "a"}]}'


def test_mistral_429_becomes_quota_error() -> None:
    llm = MistralLLM(
        "s", client=cast(Mistral, _MistralClient(error=_MistralStatusError(429)))
    )
    with pytest.raises(LLMQuotaError):
        llm.generate(["x"])


def test_mistral_requires_api_key_without_client() -> None:
    with pytest.raises(LLMProviderConfigurationError):
        MistralLLM("s")


@pytest.mark.parametrize("provider_kind", ["gemini", "mistral"])
def test_raw_replies_are_parsed_by_the_remote_detector(provider_kind: str) -> None:
    reply = (
        'Here you go:\n```json\n{"issues": [{"id": "g1", "type": "grammar", '
        '"message": "Agreement", "text": "they was", "position": 0, "length": 8, '
        '"suggestions": ["they were"]}]}\n```'
    )
    if provider_kind == "gemini":
        provider: Any = _gemini(_DummyClient(reply))
    else:
        provider = MistralLLM("s", client=cast(Mistral, _MistralClient(reply)))

    spans = RemoteIssueDetector(provider).detect("they was going.", "en-us")

    assert [(s.id, s.suggestions) for s in spans] == [("g1", ["they were"])]
