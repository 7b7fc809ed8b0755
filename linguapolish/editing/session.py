"""Editor session: the detect -> render -> edit -> restore-caret loop.

The session owns the current text snapshot, its span set and render tree.
Everything runs synchronously on the caller's turn. Programmatic mutations
(applying suggestions) hold an exclusive guard until the text, spans, render
and caret are all consistent again; text or language changes reported while
the guard is held are re-entrant echoes from the surface and are ignored.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from linguapolish.config import DEFAULT_LANGUAGE
from linguapolish.detection.detector import IssueDetector, LocalIssueDetector
from linguapolish.models import IssueSpan, Segment
from linguapolish.report_utils import TextStats, text_stats

from .applier import apply_one_with_edit, dismiss, find_span, iter_batch
from .caret import CaretRef, CaretTracker, EditableSurface
from .render import render, render_html

LOGGER = logging.getLogger(__name__)


class EditorSession:
    """Keeps text, spans, highlights and caret consistent across edits."""

    def __init__(
        self,
        *,
        language: str = DEFAULT_LANGUAGE,
        detector: IssueDetector | None = None,
        surface: EditableSurface | None = None,
        redetect_after_edit: bool = False,
    ) -> None:
        self._language = language
        self._detector: IssueDetector = detector or LocalIssueDetector()
        self._tracker = CaretTracker(surface)
        self._redetect_after_edit = redetect_after_edit
        self._text = ""
        self._spans: list[IssueSpan] = []
        self._segments: list[Segment] = []
        self._mutating = False

    @property
    def text(self) -> str:
        return self._text

    @property
    def language(self) -> str:
        return self._language

    @property
    def spans(self) -> tuple[IssueSpan, ...]:
        return tuple(self._spans)

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def is_mutating(self) -> bool:
        return self._mutating

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        self._mutating = True
        try:
            yield
        finally:
            self._mutating = False

    def _ignored(self, action: str) -> bool:
        if self._mutating:
            LOGGER.debug("Ignoring re-entrant %s during a programmatic edit", action)
            return True
        return False

    # -- user-driven changes -------------------------------------------------

    def set_text(self, text: str) -> bool:
        """Record a user edit; returns False when the change was ignored."""
        if self._ignored("text change"):
            return False
        if text == self._text:
            return False
        self._text = text
        self._refresh(self._detector)
        return True

    def sync_from_surface(self) -> bool:
        """Pick up text the user typed into the attached surface.

        Returns False without a surface, while a programmatic edit is in
        flight, when the surface cannot be read, or when nothing changed.
        """
        surface = self._tracker.surface
        if surface is None or self._ignored("surface input"):
            return False
        try:
            text = surface.get_plain_text()
        except Exception:
            LOGGER.exception("Could not read the text shown by the surface")
            return False
        return self.set_text(text)

    def set_language(self, language: str) -> bool:
        if self._ignored("language change"):
            return False
        if language == self._language:
            return False
        self._language = language
        self._refresh(self._detector)
        return True

    def clear(self) -> None:
        if self._ignored("clear"):
            return
        self._text = ""
        self._refresh(self._detector)

    def run_detector(self, detector: IssueDetector) -> list[IssueSpan]:
        """Replace the span set with one pass of an alternate ``detector``."""
        if self._ignored(f"{detector.name} detection"):
            return list(self._spans)
        self._refresh(detector)
        return list(self._spans)

    # -- suggestion actions --------------------------------------------------

    def apply_suggestion(self, span_id: str, replacement: str | None = None) -> bool:
        """Apply ``replacement`` (default: first suggestion) for ``span_id``.

        Returns False when the span is gone or has nothing to apply.
        """
        if self._ignored("apply"):
            return False
        span = find_span(self._spans, span_id)
        if span is None:
            LOGGER.debug("Span %s is no longer present; nothing to apply", span_id)
            return False
        if replacement is None:
            if not span.suggestions:
                return False
            replacement = span.suggestions[0]

        with self._exclusive():
            caret = self._tracker.save(self._segments)
            text, spans, edit = apply_one_with_edit(
                self._text, self._spans, span_id, replacement
            )
            if edit is None:
                return False
            if caret is not None:
                caret = caret.shifted(edit)
            self._text, self._spans = text, spans
            self._show(caret)

        LOGGER.info("Applied %s (%s)", span_id, span.type.value)
        if self._redetect_after_edit:
            self._refresh(self._detector)
        return True

    def apply_all(self) -> int:
        """Apply every span's first suggestion; returns how many were applied."""
        if self._ignored("apply all"):
            return 0
        with self._exclusive():
            caret = self._tracker.save(self._segments)
            steps = iter_batch(self._text, self._spans)
            if not steps:
                return 0
            for _, _, edit in steps:
                if caret is not None:
                    caret = caret.shifted(edit)
            self._text, self._spans = steps[-1][0], steps[-1][1]
            self._show(caret)

        LOGGER.info("Applied %d suggestion(s) in one batch", len(steps))
        if self._redetect_after_edit:
            self._refresh(self._detector)
        return len(steps)

    def dismiss(self, span_id: str) -> bool:
        if self._ignored("dismiss"):
            return False
        if find_span(self._spans, span_id) is None:
            return False
        with self._exclusive():
            caret = self._tracker.save(self._segments)
            self._spans = dismiss(self._spans, span_id)
            self._show(caret)
        return True

    # -- reporting -----------------------------------------------------------

    def stats(self) -> TextStats:
        return text_stats(self._text, self._spans)

    def to_html(self) -> str:
        return render_html(self._segments)

    # -- internals -----------------------------------------------------------

    def _refresh(self, detector: IssueDetector) -> None:
        with self._exclusive():
            spans = detector.detect(self._text, self._language)
            self._spans = [span for span in spans if span.fits(self._text)]
            LOGGER.debug(
                "%s detection found %d issue(s) in %d character(s)",
                detector.name,
                len(self._spans),
                len(self._text),
            )
            segments = render(self._text, self._spans)
            # The surface already shows the new text, so its caret offset is
            # read against the fresh render.
            caret = self._tracker.save(segments)
            self._show(caret, segments)

    def _show(
        self, caret: CaretRef | None, segments: list[Segment] | None = None
    ) -> None:
        self._segments = segments if segments is not None else render(
            self._text, self._spans
        )
        surface = self._tracker.surface
        if surface is not None:
            try:
                surface.show(self._segments)
            except Exception:
                LOGGER.exception("Surface failed to display the rendered text")
        self._tracker.restore(self._segments, caret)
