"""Highlight rendering: (text, spans) -> ordered render segments.

Spans are placed right to left, against offsets of the original text, so
splicing one highlight never moves the offsets another span depends on. A span
that is out of bounds or intersects an already placed span is skipped rather
than producing overlapping markup.
"""

from __future__ import annotations

import html
import logging
from typing import Sequence

from linguapolish.models import (
    HighlightSegment,
    IssueSpan,
    PlainSegment,
    Segment,
)

LOGGER = logging.getLogger(__name__)


def _placement_order(spans: Sequence[IssueSpan]) -> list[IssueSpan]:
    # Descending start; at equal starts the longer span is placed first and
    # wins. The id makes the order total so equal inputs render identically.
    ordered = sorted(spans, key=lambda span: span.id)
    return sorted(ordered, key=lambda span: (span.position, span.length), reverse=True)


def render(text: str, spans: Sequence[IssueSpan]) -> list[Segment]:
    """Return the render segments for ``text`` highlighted with ``spans``.

    Plain runs become :class:`PlainSegment`; each accepted span becomes a
    :class:`HighlightSegment` (empty for insertion markers). The result is
    deterministic for a given ``(text, spans)`` pair.
    """
    if not text:
        return []

    reversed_segments: list[Segment] = []
    # Everything left of ``cursor`` is still unprocessed original text.
    cursor = len(text)

    for span in _placement_order(spans):
        if span.position < 0 or span.end > len(text):
            LOGGER.debug("Skipping %s: range outside the text", span.id)
            continue
        # Placed spans all start at or after ``cursor``; a span ending past it
        # would intersect one of them.
        if span.end > cursor:
            LOGGER.debug("Skipping %s: overlaps a placed highlight", span.id)
            continue

        if span.end < cursor:
            reversed_segments.append(PlainSegment(text[span.end : cursor]))
        reversed_segments.append(
            HighlightSegment(
                type=span.type,
                span_id=span.id,
                text=text[span.position : span.end],
                message=span.message,
            )
        )
        cursor = span.position

    if cursor > 0:
        reversed_segments.append(PlainSegment(text[:cursor]))

    reversed_segments.reverse()
    return reversed_segments


def render_html(segments: Sequence[Segment]) -> str:
    """Return overlay markup for ``segments`` with HTML-escaped text."""
    parts: list[str] = []
    for segment in segments:
        if isinstance(segment, HighlightSegment):
            parts.append(
                '<span class="{cls}" data-issue-id="{span_id}" title="{title}">'
                "{text}</span>".format(
                    cls=segment.type.css_class,
                    span_id=html.escape(segment.span_id, quote=True),
                    title=html.escape(segment.message, quote=True),
                    text=html.escape(segment.text, quote=False),
                )
            )
        else:
            parts.append(html.escape(segment.text, quote=False))
    return "".join(parts)
