"""Issue detection backed by LanguageTool.

LanguageTool matches are mapped onto :class:`IssueSpan` records with the same
id scheme as local rules (``<rule id>-<position>``). Matches on configured
ignored words are filtered out, and the usual overlap rule is applied.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from pydantic import ValidationError

from linguapolish.models import IssueSpan, IssueType

from .detector import select_non_overlapping
from .language_tool_config import (
    DEFAULT_DISABLED_RULES,
    DEFAULT_IGNORED_WORDS,
    ISSUE_TYPE_MAP,
)
from .language_tool_manager import LanguageToolManager

LOGGER = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5


def _filter_matches(matches: list[Any], words_to_ignore: set[str]) -> list[Any]:
    """Filter matches whose tokens are configured to be ignored."""

    if not words_to_ignore:
        return list(matches)

    filtered_matches: list[Any] = []
    for match in matches:
        original_text = str(getattr(match, "matchedText", "") or "").strip()
        if original_text:
            letters = "".join(ch for ch in original_text if ch.isalpha())
            if letters and letters.rstrip("s").isupper():
                # Acronyms match in singular or plural form
                if letters in words_to_ignore or letters.rstrip("s") in words_to_ignore:
                    continue
            elif original_text in words_to_ignore:
                continue
        filtered_matches.append(match)

    return filtered_matches


def issue_type_for_match(match: Any) -> IssueType:
    rule_id = str(getattr(match, "ruleId", "") or "")
    if "UPPERCASE" in rule_id or "CAPITALIZATION" in rule_id:
        return IssueType.CAPITALIZATION
    issue_type = str(getattr(match, "ruleIssueType", "") or "").lower()
    return IssueType(ISSUE_TYPE_MAP.get(issue_type, IssueType.CLARITY.value))


def _make_span(match: Any, text: str) -> IssueSpan | None:
    rule_id = getattr(match, "ruleId", "UNKNOWN") or "UNKNOWN"
    try:
        position = int(getattr(match, "offset", 0) or 0)
        length = int(getattr(match, "errorLength", 0) or 0)
    except (TypeError, ValueError):
        LOGGER.warning("Invalid offset/errorLength for rule %s; skipping", rule_id)
        return None

    if position < 0 or length < 0 or position + length > len(text):
        LOGGER.debug("Skipping %s at %d: range outside the text", rule_id, position)
        return None

    replacements = list(getattr(match, "replacements", []) or [])[:MAX_SUGGESTIONS]
    try:
        return IssueSpan(
            id=f"{rule_id}-{position}",
            type=issue_type_for_match(match),
            message=str(getattr(match, "message", "") or rule_id),
            matched_text=text[position : position + length],
            position=position,
            length=length,
            suggestions=replacements,
        )
    except ValidationError as exc:
        LOGGER.warning("Skipping LanguageTool match %s: %s", rule_id, exc)
        return None


def spans_from_matches(
    text: str, matches: Iterable[Any], words_to_ignore: set[str] | None = None
) -> list[IssueSpan]:
    spans = []
    for match in _filter_matches(list(matches), words_to_ignore or set()):
        span = _make_span(match, text)
        if span is not None:
            spans.append(span)
    return select_non_overlapping(spans)


class LanguageToolDetector:
    """Detection strategy delegating to a (local) LanguageTool server.

    ``tool_for`` returns the LanguageTool instance for a language identifier;
    it defaults to a cached :class:`LanguageToolManager` lookup.
    """

    name = "language-tool"

    def __init__(
        self,
        manager: LanguageToolManager | None = None,
        *,
        tool_for: Callable[[str], Any] | None = None,
        ignored_words: Iterable[str] | None = None,
    ) -> None:
        words = set(DEFAULT_IGNORED_WORDS)
        if ignored_words:
            words.update(ignored_words)
        self._ignored_words = words
        self._manager = manager or LanguageToolManager(
            ignored_words=words,
            disabled_rules=DEFAULT_DISABLED_RULES,
            logger=LOGGER,
        )
        self._tool_for = tool_for or self._manager.get_tool

    def detect(self, text: str, language: str) -> list[IssueSpan]:
        if not text or not text.strip():
            return []
        try:
            tool = self._tool_for(language)
            matches = tool.check(text)
        except Exception:
            LOGGER.exception("LanguageTool check failed (language=%s)", language)
            return []

        spans = spans_from_matches(text, matches, self._ignored_words)
        LOGGER.debug("LanguageTool reported %d issue(s)", len(spans))
        return spans

    def close(self) -> None:
        self._manager.close()
