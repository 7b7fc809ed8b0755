"""Demonstration issue used when a detection pass finds nothing.

This keeps an otherwise idle editor visibly interactive. The result is random,
so the random source is always injected by the caller; production
deployments should switch it off (``LINGUAPOLISH_ENABLE_FALLBACK=0``).
"""

from __future__ import annotations

import random
import re
from typing import Callable

from linguapolish.models import IssueSpan, IssueType

FALLBACK_RULE_ID = "random"

_WORD_PATTERN = re.compile(r"\w+(?:['\-]\w+)*")

# type -> (message, suggestion builder)
_TEMPLATES: dict[IssueType, tuple[str, Callable[[str], str]]] = {
    IssueType.GRAMMAR: (
        "Possible grammar issue",
        lambda word: word[:1].upper() + word[1:],
    ),
    IssueType.STYLE: ("Style could be improved", lambda word: f"{word} (improved)"),
    IssueType.CLARITY: ("This could be clearer", lambda word: f"Clearer {word}"),
    IssueType.PUNCTUATION: ("Consider adding punctuation", lambda word: f"{word},"),
    IssueType.CAPITALIZATION: (
        "Check the capitalization",
        lambda word: word.swapcase(),
    ),
}


def build_fallback_span(text: str, rng: random.Random) -> IssueSpan | None:
    """Return a span over a randomly chosen word of ``text``.

    A word boundary and an issue type are each chosen uniformly. Returns None
    when the text contains no words.
    """
    words = list(_WORD_PATTERN.finditer(text))
    if not words:
        return None

    word = rng.choice(words)
    issue_type = rng.choice(list(IssueType))
    message, build_suggestion = _TEMPLATES[issue_type]
    matched = word.group(0)

    return IssueSpan(
        id=f"{FALLBACK_RULE_ID}-{word.start()}",
        type=issue_type,
        message=message,
        matched_text=matched,
        position=word.start(),
        length=len(matched),
        suggestions=[build_suggestion(matched)],
        explanation="This is a demonstration issue.",
    )
