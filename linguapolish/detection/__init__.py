"""Detection package exports.

Detection strategies share the ``detect(text, language)`` contract. The
remote and LanguageTool strategies pull in SDKs, so they are imported lazily.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .detector import IssueDetector, LocalIssueDetector, detect, select_non_overlapping

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .language_tool_detector import LanguageToolDetector
    from .remote_detector import RemoteIssueDetector, build_remote_detector

__all__ = [
    "IssueDetector",
    "LanguageToolDetector",
    "LocalIssueDetector",
    "RemoteIssueDetector",
    "build_remote_detector",
    "detect",
    "select_non_overlapping",
]

_LAZY_EXPORTS = {
    # attribute -> (module, attribute)
    "LanguageToolDetector": (".language_tool_detector", "LanguageToolDetector"),
    "RemoteIssueDetector": (".remote_detector", "RemoteIssueDetector"),
    "build_remote_detector": (".remote_detector", "build_remote_detector"),
}


def __getattr__(name: str):
    """Lazily import and return exported attributes."""

    if name in _LAZY_EXPORTS:
        module_name, attr = _LAZY_EXPORTS[name]
        from importlib import import_module

        mod = import_module(f"linguapolish.detection{module_name}")
        value = getattr(mod, attr)
        globals()[name] = value
        return value
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_LAZY_EXPORTS.keys()))
