"""LinguaPolish writing assistant core."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "cli",
    "config",
    "detection",
    "editing",
    "llm",
    "models",
    "report_utils",
]
