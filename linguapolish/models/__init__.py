"""Public model exports for the project.

Keep the package namespace clean: tests and other modules should import
``from linguapolish.models import IssueSpan, IssueType``.
"""

from __future__ import annotations

from .enums import IssueType
from .issue_span import IssueSpan, ranges_intersect
from .segment import HighlightSegment, PlainSegment, Segment, plain_text

__all__ = [
    "IssueSpan",
    "IssueType",
    "HighlightSegment",
    "PlainSegment",
    "Segment",
    "plain_text",
    "ranges_intersect",
]
