"""Enumerations shared by the issue span models.

The values double as the wire-format strings of the issue record, so they are
lowercase and stable.
"""

from __future__ import annotations

from enum import Enum


class IssueType(str, Enum):
    """Categories an issue span can be reported under."""

    GRAMMAR = "grammar"
    STYLE = "style"
    CLARITY = "clarity"
    PUNCTUATION = "punctuation"
    CAPITALIZATION = "capitalization"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]

    @property
    def css_class(self) -> str:
        """Overlay class used when rendering a highlight of this type."""
        if self is IssueType.GRAMMAR:
            return "grammar-error"
        return f"{self.value}-suggestion"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    IssueType.GRAMMAR: "Grammar Issue",
    IssueType.STYLE: "Style Suggestion",
    IssueType.CLARITY: "Clarity Improvement",
    IssueType.PUNCTUATION: "Punctuation",
    IssueType.CAPITALIZATION: "Capitalization",
}
