"""LanguageTool setup helpers.

This module centralises LanguageTool instantiation so that custom spellings
and disabled rules stay in one place, and so each language starts its Java
server at most once per manager.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import language_tool_python

_DEFAULT_CONFIG = {
    "requestLimitPeriodInSeconds": 60,
    # Interactive checks are short; fail fast rather than stalling the editor.
    "maxCheckTimeMillis": 10000,
}


def to_language_tool_code(language: str) -> str:
    """Map an identifier such as ``en-us`` to LanguageTool's ``en-US``."""
    parts = language.strip().replace("_", "-").split("-")
    base = parts[0].lower()
    if len(parts) == 1 or not parts[1]:
        return base
    return f"{base}-{parts[1].upper()}"


class LanguageToolManager:
    """Factory class responsible for configuring and caching LanguageTool instances."""

    def __init__(
        self,
        *,
        ignored_words: Iterable[str] | None = None,
        disabled_rules: Iterable[str] | None = None,
        config: dict[str, Any] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.config = dict(config) if config is not None else dict(_DEFAULT_CONFIG)
        self.disabled_rules = set(disabled_rules or [])
        self._ignored_words = self._prepare_ignored_words(ignored_words)
        self._tools: dict[str, Any] = {}

    @property
    def ignored_words(self) -> tuple[str, ...]:
        return self._ignored_words

    @staticmethod
    def _prepare_ignored_words(words: Iterable[str] | None) -> tuple[str, ...]:
        if not words:
            return tuple()
        cleaned = {word.strip() for word in words if word and word.strip()}
        return tuple(sorted(cleaned))

    def build_tool(self, language: str) -> Any:
        """Build a LanguageTool instance for ``language``."""

        code = to_language_tool_code(language)
        kwargs: dict[str, Any] = {}
        if self.config:
            kwargs["config"] = self.config
        if self._ignored_words:
            kwargs["newSpellings"] = list(self._ignored_words)
            kwargs["new_spellings_persist"] = False

        self.logger.info("Starting LanguageTool for %s", code)
        tool = language_tool_python.LanguageTool(code, **kwargs)
        if self.disabled_rules:
            tool.disabled_rules = set(self.disabled_rules)
        return tool

    def get_tool(self, language: str) -> Any:
        code = to_language_tool_code(language)
        tool = self._tools.get(code)
        if tool is None:
            tool = self.build_tool(language)
            self._tools[code] = tool
        return tool

    def close(self) -> None:
        """Shut down every LanguageTool instance started by this manager."""
        for code, tool in self._tools.items():
            try:
                tool.close()
            except Exception:
                self.logger.exception("Failed to close LanguageTool for %s", code)
        self._tools.clear()
