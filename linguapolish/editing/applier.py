"""Apply suggestions to text while keeping the remaining spans consistent.

Every edit replaces one range of the running text. After an edit, each other
span is handled by where it sits relative to the edited range:

- entirely before: unchanged
- at or after the end: shifted by the edit's length delta
- overlapping: removed, because its match no longer exists

Spans whose suggestions are phrased against a wider context region (the
sentence rules) are rebased when an edit lands inside that region but outside
their own range: the region is resized and the same edit is replayed into each
suggestion.

A span keeps its id when it is shifted or rebased. Ids are handles assigned
at detection time, so the position they were built from may go stale; read
``position`` for the current offset. Shifting keeps spans disjoint, so ids stay
unique within a list.

``apply_all`` applies edits in strictly descending position order against
the running text, one at a time. Every span still pending sits to the left of
the one just applied, so no pending offset is invalidated by the batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from linguapolish.models import IssueSpan, ranges_intersect

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextEdit:
    """Replacement of ``text[start:end]`` with ``replacement``."""

    start: int
    end: int
    replacement: str

    @property
    def delta(self) -> int:
        return len(self.replacement) - (self.end - self.start)

    def apply(self, text: str) -> str:
        return text[: self.start] + self.replacement + text[self.end :]

    def intersects(self, start: int, end: int) -> bool:
        return ranges_intersect(self.start, self.end, start, end)


def minimal_edit(offset: int, original: str, replacement: str) -> TextEdit:
    """Return the smallest edit turning ``original`` into ``replacement``.

    The common prefix and suffix are trimmed; ``offset`` is where ``original``
    starts in the full text.

    Example:
        >>> minimal_edit(10, "this is it", "This is it")
        TextEdit(start=10, end=11, replacement='T')
    """
    limit = min(len(original), len(replacement))
    prefix = 0
    while prefix < limit and original[prefix] == replacement[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < limit - prefix
        and original[len(original) - 1 - suffix] == replacement[len(replacement) - 1 - suffix]
    ):
        suffix += 1
    return TextEdit(
        start=offset + prefix,
        end=offset + len(original) - suffix,
        replacement=replacement[prefix : len(replacement) - suffix],
    )


def find_span(spans: Sequence[IssueSpan], span_id: str) -> IssueSpan | None:
    return next((span for span in spans if span.id == span_id), None)


def plan_edit(text: str, span: IssueSpan, replacement: str) -> TextEdit:
    """Return the concrete edit that applies ``replacement`` for ``span``.

    A suggestion phrased against the span's context region is reduced to its
    minimal edit; any other replacement replaces the span's own range.
    """
    if span.has_context and replacement in span.suggestions and span.fits(text):
        original = text[span.context_start : span.context_end]
        return minimal_edit(span.context_start, original, replacement)
    return TextEdit(start=span.position, end=span.end, replacement=replacement)


def _shift_range(start: int, end: int, edit: TextEdit) -> tuple[int, int] | None:
    """Map ``[start, end)`` across ``edit``; None when the edit overlaps it."""
    if edit.intersects(start, end):
        return None
    if end <= edit.start:
        return start, end
    return start + edit.delta, end + edit.delta


def _rebase_suggestion(
    suggestion: str, original_context: str, relative: TextEdit
) -> str | None:
    """Replay ``relative`` (offsets inside the context) into ``suggestion``."""
    own = minimal_edit(0, original_context, suggestion)
    if relative.intersects(own.start, own.end) or (
        relative.start == relative.end == own.start == own.end
    ):
        return None
    if relative.end <= own.start:
        return relative.apply(suggestion)
    shifted = TextEdit(
        start=relative.start + own.delta,
        end=relative.end + own.delta,
        replacement=relative.replacement,
    )
    return shifted.apply(suggestion)


def _rebase_span(text: str, span: IssueSpan, edit: TextEdit) -> IssueSpan | None:
    """Return ``span`` adjusted for ``edit`` (applied to ``text``), or None."""
    own = _shift_range(span.position, span.end, edit)
    if own is None:
        return None
    position = own[0]

    if not span.has_context:
        if position == span.position:
            return span
        return span.model_copy(update={"position": position})

    ctx_start, ctx_end = span.context_start, span.context_end
    inside = ctx_start <= edit.start and edit.end <= ctx_end
    if not inside or (edit.start == edit.end and edit.start in (ctx_start, ctx_end)):
        context = _shift_range(ctx_start, ctx_end, edit)
        if context is None:
            return None
        return span.model_copy(
            update={"position": position, "context_position": context[0]}
        )

    relative = TextEdit(
        start=edit.start - ctx_start,
        end=edit.end - ctx_start,
        replacement=edit.replacement,
    )
    original_context = text[ctx_start:ctx_end]
    suggestions = [
        rebased
        for rebased in (
            _rebase_suggestion(s, original_context, relative) for s in span.suggestions
        )
        if rebased is not None
    ]
    if len(suggestions) != len(span.suggestions):
        LOGGER.debug("Dropped stale suggestion(s) of %s after an edit", span.id)
    return span.model_copy(
        update={
            "position": position,
            "context_length": (ctx_end - ctx_start) + edit.delta,
            "suggestions": suggestions,
        }
    )


def _apply_edit(
    text: str, spans: Sequence[IssueSpan], applied_id: str, edit: TextEdit
) -> tuple[str, list[IssueSpan]]:
    new_text = edit.apply(text)
    remaining: list[IssueSpan] = []
    for span in spans:
        if span.id == applied_id:
            continue
        rebased = _rebase_span(text, span, edit)
        if rebased is None:
            LOGGER.debug("Span %s invalidated by edit at %d", span.id, edit.start)
            continue
        remaining.append(rebased)
    return new_text, remaining


def apply_one(
    text: str,
    spans: Sequence[IssueSpan],
    span_id: str,
    replacement: str,
) -> tuple[str, list[IssueSpan]]:
    """Apply ``replacement`` for the span ``span_id``.

    Returns the new text and the surviving spans with updated offsets. An
    unknown id (for example a span already consumed) leaves both unchanged.
    """
    span = find_span(spans, span_id)
    if span is None or not span.fits(text):
        if span is not None:
            LOGGER.warning("Span %s no longer fits the text; ignoring", span_id)
        return text, list(spans)
    edit = plan_edit(text, span, replacement)
    return _apply_edit(text, spans, span.id, edit)


def apply_one_with_edit(
    text: str,
    spans: Sequence[IssueSpan],
    span_id: str,
    replacement: str,
) -> tuple[str, list[IssueSpan], TextEdit | None]:
    """Like :func:`apply_one`, also returning the edit that was made."""
    span = find_span(spans, span_id)
    if span is None or not span.fits(text):
        return text, list(spans), None
    edit = plan_edit(text, span, replacement)
    new_text, remaining = _apply_edit(text, spans, span.id, edit)
    return new_text, remaining, edit


def iter_batch(
    text: str, spans: Sequence[IssueSpan]
) -> list[tuple[str, list[IssueSpan], TextEdit]]:
    """Apply every first suggestion in descending position order.

    Returns one ``(text, spans, edit)`` state per applied span, in order.
    """
    order = [
        span.id
        for span in sorted(
            (s for s in spans if s.suggestions),
            key=lambda s: (s.position, s.length, s.id),
            reverse=True,
        )
    ]

    steps: list[tuple[str, list[IssueSpan], TextEdit]] = []
    current_text, current_spans = text, list(spans)
    for span_id in order:
        span = find_span(current_spans, span_id)
        if span is None or not span.suggestions:
            # Invalidated or stripped of suggestions by an earlier step.
            continue
        current_text, current_spans, edit = apply_one_with_edit(
            current_text, current_spans, span_id, span.suggestions[0]
        )
        if edit is None:
            continue
        steps.append((current_text, current_spans, edit))
    return steps


def apply_all(text: str, spans: Sequence[IssueSpan]) -> tuple[str, int]:
    """Apply the first suggestion of every span that has one.

    Returns the final text and the number of spans actually applied.
    """
    steps = iter_batch(text, spans)
    if not steps:
        return text, 0
    return steps[-1][0], len(steps)


def dismiss(spans: Sequence[IssueSpan], span_id: str) -> list[IssueSpan]:
    """Remove exactly the span ``span_id``; other offsets are untouched."""
    return [span for span in spans if span.id != span_id]
