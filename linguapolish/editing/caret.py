"""Caret tracking across re-renders.

The caret is saved as a character offset into the plain text of the editable
region, never as a reference into the render tree (which is rebuilt on every
render). After rendering, the offset is translated back into a concrete
``(segment index, offset in segment)`` position by walking the text-bearing
segments in order.

Widgets plug in through the :class:`EditableSurface` adapter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Sequence

from linguapolish.models import PlainSegment, Segment, plain_text

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .applier import TextEdit

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaretRef:
    """Caret offset into the plain text of the editable region."""

    offset: int

    def shifted(self, edit: "TextEdit") -> "CaretRef":
        """Map the caret across ``edit``.

        Offsets at or after the edit end move by its delta (a caret sitting on
        an insertion point ends up after the inserted text); offsets inside
        the replaced range move to the end of the inserted text.
        """
        if self.offset >= edit.end:
            return CaretRef(self.offset + edit.delta)
        if edit.start < self.offset < edit.end:
            return CaretRef(edit.start + len(edit.replacement))
        return self


@dataclass(frozen=True)
class CaretPosition:
    """Concrete caret placement inside a render tree."""

    segment_index: int
    offset: int


START_OF_REGION = CaretPosition(segment_index=0, offset=0)


class EditableSurface(Protocol):
    """Adapter over a widget that displays the rendered text."""

    def show(self, segments: Sequence[Segment]) -> None:
        """Replace the widget's content with ``segments``."""
        ...

    def get_plain_text(self) -> str: ...

    def get_caret_offset(self) -> int | None:
        """Return the caret's plain-text offset, or None when unfocused."""
        ...

    def set_caret(self, position: CaretPosition) -> None: ...


def save_caret(segments: Sequence[Segment], caret_offset: int | None) -> CaretRef | None:
    """Capture ``caret_offset`` relative to the plain text of ``segments``."""
    if caret_offset is None:
        return None
    length = len(plain_text(segments))
    return CaretRef(max(0, min(int(caret_offset), length)))


def locate_caret(segments: Sequence[Segment], caret: CaretRef | None) -> CaretPosition:
    """Translate a saved caret into a position within ``segments``.

    An offset on a boundary between two segments lands at the end of the
    earlier one. Without a saved caret, or without any text-bearing segment,
    the start of the region is returned.
    """
    if caret is None:
        return START_OF_REGION

    last: CaretPosition | None = None
    consumed = 0
    for index, segment in enumerate(segments):
        size = len(segment.text)
        if size == 0:
            continue
        if consumed <= caret.offset <= consumed + size:
            return CaretPosition(index, max(0, caret.offset - consumed))
        consumed += size
        last = CaretPosition(index, size)

    return last or START_OF_REGION


class CaretTracker:
    """Saves and restores the caret of an :class:`EditableSurface`."""

    def __init__(self, surface: EditableSurface | None = None) -> None:
        self._surface = surface

    @property
    def surface(self) -> EditableSurface | None:
        return self._surface

    def save(self, segments: Sequence[Segment]) -> CaretRef | None:
        if self._surface is None:
            return None
        try:
            offset = self._surface.get_caret_offset()
        except Exception:
            LOGGER.exception("Could not read the caret offset; caret not saved")
            return None
        return save_caret(segments, offset)

    def restore(
        self, segments: Sequence[Segment], caret: CaretRef | None
    ) -> CaretPosition:
        position = locate_caret(segments, caret)
        if self._surface is None:
            return position
        try:
            self._surface.set_caret(position)
        except Exception:
            LOGGER.exception("Could not place the caret at %s", position)
            try:
                self._surface.set_caret(START_OF_REGION)
            except Exception:
                LOGGER.exception("Could not reset the caret to the region start")
            return START_OF_REGION
        return position


class BufferSurface:
    """In-memory surface: keeps the rendered segments and a caret offset."""

    def __init__(self, caret_offset: int | None = None) -> None:
        self.segments: list[Segment] = []
        self.caret_offset = caret_offset
        self.caret_position: CaretPosition | None = None

    def show(self, segments: Sequence[Segment]) -> None:
        self.segments = list(segments)

    def type_text(self, text: str, caret_offset: int | None = None) -> None:
        """Replace the shown content as if the user had typed ``text``.

        The caret lands at ``caret_offset``, or after the last character.
        """
        self.segments = [PlainSegment(text)] if text else []
        self.caret_offset = len(text) if caret_offset is None else caret_offset

    def get_plain_text(self) -> str:
        return plain_text(self.segments)

    def get_caret_offset(self) -> int | None:
        return self.caret_offset

    def set_caret(self, position: CaretPosition) -> None:
        self.caret_position = position
        if not self.segments:
            self.caret_offset = 0
            return
        preceding = sum(len(s.text) for s in self.segments[: position.segment_index])
        self.caret_offset = preceding + position.offset
