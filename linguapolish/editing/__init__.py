"""Position-tracked editing: highlight rendering, suggestion application and
caret tracking."""

from __future__ import annotations

from .applier import (
    TextEdit,
    apply_all,
    apply_one,
    apply_one_with_edit,
    dismiss,
    minimal_edit,
    plan_edit,
)
from .caret import (
    BufferSurface,
    CaretPosition,
    CaretRef,
    CaretTracker,
    EditableSurface,
    locate_caret,
    save_caret,
)
from .render import render, render_html
from .session import EditorSession

__all__ = [
    "BufferSurface",
    "CaretPosition",
    "CaretRef",
    "CaretTracker",
    "EditableSurface",
    "EditorSession",
    "TextEdit",
    "apply_all",
    "apply_one",
    "apply_one_with_edit",
    "dismiss",
    "locate_caret",
    "minimal_edit",
    "plan_edit",
    "render",
    "render_html",
    "save_caret",
]
