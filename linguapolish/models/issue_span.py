"""Issue span model shared by detection, rendering and editing.

An ``IssueSpan`` describes one writing issue as a half-open character range
``[position, position + length)`` over a single text snapshot. Spans are
derived data: detectors create them, the renderer reads them and the edit
applier shifts or drops them after a mutation. They are never edited by hand.

The model also parses the JSON issue record exchanged with external analysis
providers, which names the matched substring ``text`` rather than
``matched_text``.
"""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import IssueType


def ranges_intersect(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Return True when two half-open ranges share an interior point.

    A zero-length range only intersects a range that strictly contains it, so an
    insertion marker may sit on either boundary of a replace range. Two
    zero-length ranges never intersect.
    """
    a_empty = a_start == a_end
    b_empty = b_start == b_end
    if a_empty and b_empty:
        return False
    if a_empty:
        return b_start < a_start < b_end
    if b_empty:
        return a_start < b_start < a_end
    return a_start < b_end and b_start < a_end


class IssueSpan(BaseModel):
    """A located writing issue with ordered replacement suggestions.

    Core fields:
    - id: unique within a span set; ``<rule id>-<position>`` for rule hits
    - type: one of the :class:`IssueType` categories
    - message: short human-readable description
    - matched_text: the literal substring covered (wire name ``text``)
    - position / length: the covered range; ``length == 0`` marks an insertion
      point rather than a replaceable range
    - suggestions: candidate replacements, possibly empty
    - explanation: optional rationale

    Optional context region (``context_position`` / ``context_length``): the
    wider range the suggestions are phrased against. Sentence-level rules
    suggest the whole corrected sentence; the applier reduces such a suggestion
    to the minimal edit inside ``[position, position + length)``.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: str
    type: IssueType
    message: str
    matched_text: str = Field(default="", alias="text")
    position: int = Field(ge=0)
    length: int = Field(ge=0)
    suggestions: List[str] = Field(default_factory=list)
    explanation: str | None = None
    context_position: int | None = Field(
        default=None, alias="contextPosition", ge=0
    )
    context_length: int | None = Field(default=None, alias="contextLength", ge=0)

    @field_validator("id", "message", mode="before")
    def _strip_strings(cls, value: object) -> str:
        return str(value or "").strip()

    @field_validator("matched_text", mode="before")
    def _keep_matched_text(cls, value: object) -> str:
        return "" if value is None else str(value)

    @field_validator("type", mode="before")
    def _normalise_type(cls, value: object) -> object:
        if isinstance(value, IssueType):
            return value
        return str(value or "").strip().lower()

    @field_validator("explanation", mode="before")
    def _strip_explanation(cls, value: object) -> str | None:
        if value is None:
            return None
        return str(value).strip() or None

    @field_validator("suggestions", mode="before")
    def _normalise_suggestions(cls, value: object) -> List[str]:
        if value is None:
            return []
        # replacement text is applied verbatim, so whitespace is significant
        if isinstance(value, (list, tuple)):
            return [str(x) for x in value if x is not None]
        # allow a single suggestion as a bare string
        return [str(value)]

    @model_validator(mode="after")
    def final_checks(self) -> "IssueSpan":
        if not self.id:
            raise ValueError("id must not be empty")
        if not self.message:
            raise ValueError("message must not be empty")

        has_position = self.context_position is not None
        has_length = self.context_length is not None
        if has_position != has_length:
            raise ValueError(
                "context_position and context_length must be provided together"
            )
        if has_position:
            if self.context_start > self.position or self.context_end < self.end:
                raise ValueError("context region must contain the issue range")
        return self

    @property
    def end(self) -> int:
        return self.position + self.length

    @property
    def has_context(self) -> bool:
        return self.context_position is not None

    @property
    def context_start(self) -> int:
        if self.context_position is None:
            return self.position
        return self.context_position

    @property
    def context_end(self) -> int:
        if self.context_position is None or self.context_length is None:
            return self.end
        return self.context_position + self.context_length

    @property
    def is_insertion(self) -> bool:
        return self.length == 0

    def fits(self, text: str) -> bool:
        """Return True when every range the span refers to lies inside ``text``."""
        return 0 <= self.context_start and self.context_end <= len(text)

    def intersects(self, other: "IssueSpan") -> bool:
        return ranges_intersect(self.position, self.end, other.position, other.end)

    def to_record(self) -> dict[str, Any]:
        """Return the JSON issue record for this span."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
