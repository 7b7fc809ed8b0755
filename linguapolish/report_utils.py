"""Text statistics and issue reports.

Markdown and CSV builders for a checked text, plus the character/word/issue
counts shown alongside the editor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from linguapolish.models import IssueSpan, IssueType

CONTEXT_RADIUS = 40


@dataclass
class TextStats:
    """Counts for the current text and span set."""

    characters: int
    words: int
    issues: int
    by_type: dict[str, int] = field(default_factory=dict)


def text_stats(text: str, spans: Sequence[IssueSpan]) -> TextStats:
    by_type = {value: 0 for value in IssueType.all_values()}
    for span in spans:
        by_type[span.type.value] += 1
    return TextStats(
        characters=len(text),
        words=len(text.split()),
        issues=len(spans),
        by_type=by_type,
    )


def format_suggestions(suggestions: list[str] | None, max_suggestions: int = 3) -> str:
    """Return a human-friendly, truncated suggestions string.

    If there are no suggestions returns the em-dash used in the Markdown output.
    If there are more than ``max_suggestions``, the first ``max_suggestions``
    are shown followed by "(+N more)".
    """
    if not suggestions:
        return "—"
    if len(suggestions) <= max_suggestions:
        return ", ".join(suggestions)
    visible = ", ".join(suggestions[:max_suggestions])
    remaining = len(suggestions) - max_suggestions
    return f"{visible} (+{remaining} more)"


def highlight_context(text: str, span: IssueSpan, radius: int = CONTEXT_RADIUS) -> str:
    """Return the text around ``span`` with the covered range wrapped in ``**``.

    Insertion markers are shown as ``**^**`` at their position.
    """
    start = max(0, span.position - radius)
    end = min(len(text), span.end + radius)
    position = min(max(span.position, 0), len(text))
    span_end = min(max(span.end, position), len(text))
    marked = text[position:span_end] if span.length else "^"
    prefix = "…" if start > 0 else ""
    suffix = "…" if end < len(text) else ""
    snippet = f"{text[start:position]}**{marked}**{text[span_end:end]}"
    return f"{prefix}{snippet.replace(chr(10), ' ')}{suffix}"


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|")


def build_report_markdown(
    text: str,
    spans: Sequence[IssueSpan],
    *,
    title: str = "Writing Check Report",
    language: str | None = None,
) -> str:
    """Convert a span set for ``text`` into Markdown output."""

    stats = text_stats(text, spans)
    lines: list[str] = []
    lines.append(f"# {title}")
    lines.append("")
    if language:
        lines.append(f"- Language: {language}")
    lines.append(f"- {stats.characters} characters | {stats.words} words")
    lines.append(f"- Total issues found: {stats.issues}")

    lines.append("")
    lines.append("## Totals by Type")
    for issue_type in IssueType:
        lines.append(f"- {issue_type.label}: {stats.by_type[issue_type.value]}")

    lines.append("")
    lines.append("---")
    lines.append("")
    lines.append("## Issues")
    if not spans:
        lines.append("")
        lines.append("_No issues found._")
        return "\n".join(lines)

    lines.append("")
    lines.append("| Id | Position | Type | Issue | Message | Suggestions | Context |")
    lines.append("| --- | --- | --- | --- | --- | --- | --- |")
    for span in sorted(spans, key=lambda s: (s.position, s.length)):
        issue_text = _escape_cell(span.matched_text) if span.matched_text else "—"
        lines.append(
            f"| `{span.id}` | {span.position} | {span.type.value} | {issue_text} | "
            f"{_escape_cell(span.message)} | "
            f"{_escape_cell(format_suggestions(span.suggestions))} | "
            f"{_escape_cell(highlight_context(text, span))} |"
        )

    return "\n".join(lines)


def build_report_csv(text: str, spans: Sequence[IssueSpan]) -> list[list[str]]:
    """Convert a span set into CSV data.

    Returns a list of rows, where each row is a list of string values.
    The first row contains the column headers.
    """

    rows: list[list[str]] = [
        [
            "Id",
            "Type",
            "Position",
            "Length",
            "Issue",
            "Message",
            "Suggestions",
            "Highlighted Context",
        ]
    ]
    for span in sorted(spans, key=lambda s: (s.position, s.length)):
        txt = format_suggestions(span.suggestions)
        rows.append(
            [
                span.id,
                span.type.value,
                str(span.position),
                str(span.length),
                span.matched_text,
                span.message,
                "" if txt == "—" else txt,
                highlight_context(text, span),
            ]
        )
    return rows
