"""Command-line entrypoint for LinguaPolish.

Usage:
    python -m linguapolish check FILE|- [--language en-us] [--remote]
        [--language-tool] [--apply-all] [--output PATH] [--report PATH] [--json]
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import random
import sys
from pathlib import Path
from typing import Iterable, Optional

from linguapolish.config import Settings
from linguapolish.detection import IssueDetector, LocalIssueDetector
from linguapolish.editing import EditorSession
from linguapolish.llm.provider import LLMProviderError
from linguapolish.report_utils import (
    build_report_csv,
    build_report_markdown,
    format_suggestions,
)

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linguapolish",
        description="Check text for grammar, style, clarity, punctuation and capitalization issues.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Check a text file (or stdin with '-').")
    check.add_argument("source", help="Path to a UTF-8 text file, or '-' to read stdin.")
    check.add_argument(
        "--language",
        default=None,
        help="Language identifier, e.g. en-us, en-gb, es (default: LINGUAPOLISH_LANGUAGE or en-us).",
    )
    strategy = check.add_mutually_exclusive_group()
    strategy.add_argument(
        "--remote",
        action="store_true",
        help="Use the external LLM provider chain instead of the local rules.",
    )
    strategy.add_argument(
        "--language-tool",
        action="store_true",
        help="Use a local LanguageTool server instead of the local rules.",
    )
    check.add_argument(
        "--provider",
        default=None,
        help="Primary LLM provider for --remote (gemini or mistral; default: LLM_PRIMARY).",
    )
    check.add_argument(
        "--dotenv",
        type=Path,
        default=None,
        help="Path to a .env file with API keys and settings.",
    )
    check.add_argument(
        "--apply-all",
        action="store_true",
        help="Apply the first suggestion of every issue and output the corrected text.",
    )
    check.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the corrected text here instead of stdout (with --apply-all).",
    )
    check.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write a Markdown report here, plus a CSV report next to it.",
    )
    check.add_argument(
        "--json",
        action="store_true",
        help="Print the issues as JSON records.",
    )
    check.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the demonstration issue, for reproducible output.",
    )
    check.add_argument(
        "--no-fallback",
        action="store_true",
        help="Never emit the demonstration issue when no rule matched.",
    )
    return parser


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(list(argv) if argv is not None else None)


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _build_detector(args: argparse.Namespace, settings: Settings) -> IssueDetector:
    if args.remote:
        from linguapolish.detection.remote_detector import build_remote_detector

        return build_remote_detector(
            settings,
            primary=args.provider,
            dotenv_path=str(args.dotenv) if args.dotenv else None,
        )
    if args.language_tool:
        from linguapolish.detection.language_tool_detector import LanguageToolDetector

        return LanguageToolDetector()
    rng = random.Random(args.seed) if args.seed is not None else None
    return LocalIssueDetector(
        rng=rng,
        enable_fallback=settings.enable_fallback and not args.no_fallback,
    )


def write_reports(report_path: Path, session: EditorSession, source_text: str) -> Path:
    """Write the Markdown report and its CSV sibling; returns the CSV path."""
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(
        build_report_markdown(source_text, session.spans, language=session.language),
        encoding="utf-8",
    )
    csv_path = report_path.with_suffix(".csv")
    with csv_path.open("w", encoding="utf-8", newline="") as handle:
        csv.writer(handle).writerows(build_report_csv(source_text, session.spans))
    return csv_path


def _print_issues(session: EditorSession) -> None:
    for span in session.spans:
        print(
            f"{span.position}:{span.length} [{span.type.value}] {span.id}: "
            f"{span.message} -> {format_suggestions(span.suggestions)}"
        )
    stats = session.stats()
    print(
        f"{stats.issues} issue(s) | {stats.characters} characters | {stats.words} words"
    )


def run_check(args: argparse.Namespace) -> int:
    settings = Settings.from_env(args.dotenv)
    language = args.language or settings.language

    try:
        text = _read_source(args.source)
    except OSError as exc:
        LOGGER.error("Could not read %s: %s", args.source, exc)
        return 1

    try:
        detector = _build_detector(args, settings)
    except (LLMProviderError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 1

    try:
        return _run_session(args, detector, language, text)
    finally:
        close = getattr(detector, "close", None)
        if close is not None:
            close()


def _run_session(
    args: argparse.Namespace, detector: IssueDetector, language: str, text: str
) -> int:
    session = EditorSession(language=language, detector=detector)
    session.set_text(text)

    if args.report is not None:
        try:
            csv_path = write_reports(args.report, session, text)
        except OSError as exc:
            LOGGER.error("Could not write report %s: %s", args.report, exc)
            return 1
        LOGGER.info("Report written to %s and %s", args.report, csv_path)

    if args.json:
        print(json.dumps([span.to_record() for span in session.spans], indent=2))
    elif not args.apply_all:
        _print_issues(session)

    if args.apply_all:
        applied = session.apply_all()
        LOGGER.info("Applied %d suggestion(s)", applied)
        if args.output is not None:
            try:
                args.output.write_text(session.text, encoding="utf-8")
            except OSError as exc:
                LOGGER.error("Could not write %s: %s", args.output, exc)
                return 1
        elif not args.json:
            sys.stdout.write(session.text)

    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if args.command == "check":
        return run_check(args)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
