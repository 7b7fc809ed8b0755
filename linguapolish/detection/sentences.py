"""Sentence boundary helpers used by the structural detection rules.

A sentence ends at whitespace that follows ``.``, ``!`` or ``?``. Offsets are
character positions in the original text so spans can be built directly from
them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

SENTENCE_BREAK_PATTERN = re.compile(r"(?<=[.!?])\s+")
SENTENCE_TERMINATORS = ".!?"


@dataclass
class Sentence:
    """A trimmed sentence and where it sits in the text."""

    text: str
    start: int  # Offset of the first non-whitespace character
    end: int  # Offset just past the last non-whitespace character


def split_sentences(text: str) -> list[Sentence]:
    """Split ``text`` into trimmed sentences with their offsets.

    Whitespace-only pieces are dropped.

    Example:
        >>> [s.text for s in split_sentences("One. two! three")]
        ['One.', 'two!', 'three']
        >>> split_sentences("One. two")[1].start
        5
    """
    sentences: list[Sentence] = []
    piece_start = 0

    for match in SENTENCE_BREAK_PATTERN.finditer(text):
        _append_trimmed(sentences, text, piece_start, match.start())
        piece_start = match.end()
    _append_trimmed(sentences, text, piece_start, len(text))

    return sentences


def _append_trimmed(sentences: list[Sentence], text: str, start: int, end: int) -> None:
    piece = text[start:end]
    stripped = piece.strip()
    if not stripped:
        return
    leading = len(piece) - len(piece.lstrip())
    trimmed_start = start + leading
    sentences.append(
        Sentence(text=stripped, start=trimmed_start, end=trimmed_start + len(stripped))
    )


def is_terminated(sentence: Sentence) -> bool:
    return bool(sentence.text) and sentence.text[-1] in SENTENCE_TERMINATORS
