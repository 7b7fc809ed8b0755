"""JSON extraction and repair for provider replies.

Replies may wrap the payload in a Markdown code fence or surround it with
commentary. The fenced block wins when present; otherwise the first balanced
top-level JSON value is taken. Either way the fragment goes through
``json_repair`` before parsing.
"""

from __future__ import annotations

import json
import re
from typing import Any

from json_repair import repair_json

from .provider import LLMParseError

FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)```", re.DOTALL)

_CLOSERS = {"{": "}", "[": "]"}


def _first_balanced(text: str) -> str | None:
    """Return the first balanced ``{...}`` or ``[...]`` fragment in ``text``.

    Brackets inside JSON strings are ignored. An unterminated fragment is
    returned up to the end of the text so the repair step can close it.
    """
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    start = min(starts)

    stack: list[str] = []
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(_CLOSERS[char])
        elif stack and char == stack[-1]:
            stack.pop()
            if not stack:
                return text[start : index + 1]
    return text[start:]


def parse_json_response(text: str) -> Any:
    """Extract and repair JSON content from LLM response text.

    Raises:
        ValueError: If ``text`` is not a string or holds no JSON delimiters.
        json.JSONDecodeError: If the repaired text still cannot be parsed.

    Example:
        >>> parse_json_response('Result: ```json\\n{"issues": []}\\n``` done')
        {'issues': []}
    """
    if not isinstance(text, str):
        raise ValueError(f"Expected string input, got {type(text)}")

    fenced = FENCE_PATTERN.search(text)
    candidate = fenced.group(1) if fenced else text

    fragment = _first_balanced(candidate)
    if fragment is None:
        raise ValueError("Response text does not contain JSON object or array delimiters.")

    repaired = repair_json(fragment)
    return json.loads(repaired)


def extract_issue_payload(text: str) -> list[Any]:
    """Return the list of raw issue records held in a provider reply.

    Accepts ``{"issues": [...]}`` or a bare list. Anything else raises
    :class:`LLMParseError` with the reply attached.
    """
    try:
        payload = parse_json_response(text)
    except (ValueError, TypeError) as exc:
        # json.JSONDecodeError is a ValueError subclass.
        raise LLMParseError(
            f"Could not parse JSON from provider reply: {exc}", response_text=text
        ) from exc

    if isinstance(payload, dict):
        issues = payload.get("issues")
        if isinstance(issues, list):
            return issues
        raise LLMParseError(
            "Provider reply object has no 'issues' list", response_text=text
        )
    if isinstance(payload, list):
        return payload
    raise LLMParseError(
        f"Unexpected provider payload type: {type(payload).__name__}",
        response_text=text,
    )
