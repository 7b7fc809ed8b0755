"""Render tree segments produced by the highlight renderer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .enums import IssueType


@dataclass(frozen=True)
class PlainSegment:
    """Unannotated run of text."""

    text: str


@dataclass(frozen=True)
class HighlightSegment:
    """Run of text covered by one issue span.

    ``text`` is empty for insertion markers.
    """

    type: IssueType
    span_id: str
    text: str
    message: str = ""


Segment = Union[PlainSegment, HighlightSegment]


def plain_text(segments: list[Segment] | tuple[Segment, ...]) -> str:
    """Concatenate the text carried by ``segments``."""
    return "".join(segment.text for segment in segments)
