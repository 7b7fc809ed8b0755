from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from linguapolish.llm.json_utils import extract_issue_payload, parse_json_response
from linguapolish.llm.provider import LLMParseError


def test_parse_plain_object() -> None:
    assert parse_json_response('{"issues": []}') == {"issues": []}


def test_parse_object_with_commentary() -> None:
    text = 'Here you go: {"issues": [{"id": "a"}]} Hope that helps {not json}'
    assert parse_json_response(text) == {"issues": [{"id": "a"}]}


def test_fenced_block_wins_over_earlier_braces() -> None:
    text = 'Use {braces} carefully.\n```json\n{"issues": [{"id": "b"}]}\n```\n'
    assert parse_json_response(text) == {"issues": [{"id": "b"}]}


def test_braces_inside_strings_do_not_end_the_object() -> None:
    text = '{"issues": [{"id": "c", "message": "close } here"}]} trailing }'
    assert parse_json_response(text)["issues"][0]["message"] == "close } here"


def test_repairs_trailing_commas_and_unterminated_json() -> None:
    assert parse_json_response('{"issues": [{"id": "d",},]}') == {"issues": [{"id": "d"}]}
    assert parse_json_response('{"issues": [{"id": "e"}') == {"issues": [{"id": "e"}]}


def test_parse_rejects_text_without_json() -> None:
    with pytest.raises(ValueError):
        parse_json_response("no json here")
    with pytest.raises(ValueError):
        parse_json_response(None)  # type: ignore[arg-type]


def test_extract_accepts_object_or_bare_list() -> None:
    assert extract_issue_payload('{"issues": [{"id": "x"}]}') == [{"id": "x"}]
    assert extract_issue_payload('[{"id": "y"}]') == [{"id": "y"}]


@pytest.mark.parametrize(
    "reply",
    [
        "Sorry, I cannot help with that.",
        '{"results": []}',
        '{"issues": "none"}',
        '"just a string"',
    ],
)
def test_extract_rejects_other_shapes(reply: str) -> None:
    with pytest.raises(LLMParseError) as excinfo:
        extract_issue_payload(reply)
    assert excinfo.value.response_text == reply


def test_parse_error_str_truncates_long_replies() -> None:
    error = LLMParseError("bad", response_text="x" * 5000)
    rendered = str(error)
    assert rendered.startswith("bad\n--- LLM Response ---\n")
    assert rendered.endswith("... [truncated]")
