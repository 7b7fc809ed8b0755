"""Local issue detection.

Turns raw text into an ordered list of non-overlapping :class:`IssueSpan`
records using three passes:

1. literal rules from the language's rule table (case-insensitive scan)
2. sentence rules (lowercase sentence start, missing end punctuation)
3. a randomised demonstration issue when nothing else was found

Detection is synchronous and never raises; an internal failure is logged and
yields an empty result.
"""

from __future__ import annotations

import logging
import random
import re
from typing import Iterable, Protocol, Sequence

from linguapolish.config import FALLBACK_MIN_TEXT_LENGTH
from linguapolish.models import IssueSpan, IssueType

from .fallback import build_fallback_span
from .rule_tables import LiteralRule, get_rule_table
from .sentences import is_terminated, split_sentences

LOGGER = logging.getLogger(__name__)

CAPITALIZATION_RULE_ID = "UPPERCASE_SENTENCE_START"
PUNCTUATION_RULE_ID = "MISSING_END_PUNCTUATION"


class IssueDetector(Protocol):
    """Shared contract for detection strategies."""

    name: str

    def detect(self, text: str, language: str) -> list[IssueSpan]:
        """Return the issue spans for ``text``; never raises."""
        ...


def _match_case(matched: str, suggestion: str) -> str:
    """Carry a leading capital from the matched text over to ``suggestion``."""
    if matched[:1].isupper() and suggestion[:1].islower():
        return suggestion[:1].upper() + suggestion[1:]
    return suggestion


class _SpanCollector:
    """Accumulates spans while keeping every accepted range disjoint."""

    def __init__(self) -> None:
        self.spans: list[IssueSpan] = []
        self._taken: set[tuple[int, int]] = set()

    def add(self, span: IssueSpan) -> bool:
        key = (span.position, span.length)
        if key in self._taken:
            return False
        if any(span.intersects(existing) for existing in self.spans):
            LOGGER.debug("Skipping %s: overlaps an accepted span", span.id)
            return False
        self._taken.add(key)
        self.spans.append(span)
        return True

    def ordered(self) -> list[IssueSpan]:
        return sorted(self.spans, key=lambda span: (span.position, span.length, span.id))


def select_non_overlapping(spans: Iterable[IssueSpan]) -> list[IssueSpan]:
    """Keep spans in position order, dropping any that overlap an earlier one.

    At equal positions the longer span is kept.
    """
    collector = _SpanCollector()
    for span in sorted(spans, key=lambda s: (s.position, -s.length, s.id)):
        collector.add(span)
    return collector.ordered()


def _literal_spans(text: str, rules: Sequence[LiteralRule]) -> Iterable[IssueSpan]:
    for rule in rules:
        if not rule.pattern:
            continue
        length = len(rule.pattern)
        for match in re.finditer(re.escape(rule.pattern), text, re.IGNORECASE):
            position = match.start()
            matched = text[position : position + length]
            yield IssueSpan(
                id=f"{rule.id}-{position}",
                type=rule.type,
                message=rule.message,
                matched_text=matched,
                position=position,
                length=length,
                suggestions=[_match_case(matched, s) for s in rule.suggestions],
                explanation=rule.explanation,
            )


def _sentence_spans(text: str) -> Iterable[IssueSpan]:
    for sentence in split_sentences(text):
        context = {
            "context_position": sentence.start,
            "context_length": len(sentence.text),
        }
        if sentence.text[0].islower():
            yield IssueSpan(
                id=f"{CAPITALIZATION_RULE_ID}-{sentence.start}",
                type=IssueType.CAPITALIZATION,
                message="Sentence should start with a capital letter",
                matched_text=sentence.text[0],
                position=sentence.start,
                length=1,
                suggestions=[sentence.text[0].upper() + sentence.text[1:]],
                explanation="The first word of a sentence is capitalized.",
                **context,
            )
        if not is_terminated(sentence):
            yield IssueSpan(
                id=f"{PUNCTUATION_RULE_ID}-{sentence.end}",
                type=IssueType.PUNCTUATION,
                message="Missing end punctuation",
                matched_text="",
                position=sentence.end,
                length=0,
                suggestions=[f"{sentence.text}."],
                explanation="End every sentence with a period, question mark or exclamation mark.",
                **context,
            )


def _detect(
    text: str,
    language: str,
    rng: random.Random,
    enable_fallback: bool,
) -> list[IssueSpan]:
    if not text or not text.strip():
        return []

    collector = _SpanCollector()
    for span in _literal_spans(text, get_rule_table(language)):
        collector.add(span)
    for span in _sentence_spans(text):
        collector.add(span)

    if not collector.spans and enable_fallback and len(text) > FALLBACK_MIN_TEXT_LENGTH:
        span = build_fallback_span(text, rng)
        if span is not None:
            collector.add(span)

    return collector.ordered()


def detect(
    text: str,
    language: str,
    *,
    rng: random.Random | None = None,
    enable_fallback: bool = True,
) -> list[IssueSpan]:
    """Return the issue spans for ``text`` in ``language``.

    Args:
        text: The text snapshot to analyse.
        language: Language identifier used to select the rule table; unknown
            identifiers fall back to the default table.
        rng: Random source for the demonstration fallback issue. Pass a seeded
            ``random.Random`` to make results reproducible.
        enable_fallback: Set to False to never emit the demonstration issue.

    Returns:
        Spans sorted by position. Empty on blank input or internal failure.
    """
    try:
        return _detect(text, language, rng or random.Random(), enable_fallback)
    except Exception:
        LOGGER.exception("Issue detection failed (language=%s)", language)
        return []


class LocalIssueDetector:
    """Rule-based detection strategy used for live-typing feedback."""

    name = "local"

    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        enable_fallback: bool = True,
    ) -> None:
        self._rng = rng or random.Random()
        self._enable_fallback = enable_fallback

    def detect(self, text: str, language: str) -> list[IssueSpan]:
        return detect(
            text,
            language,
            rng=self._rng,
            enable_fallback=self._enable_fallback,
        )
