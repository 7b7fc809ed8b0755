from __future__ import annotations

import csv
import io
import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from linguapolish.cli import build_parser, main

SAMPLE = "they was going. this is important"
CLEAN = "The report was finished on time."

_ENV_VARS = (
    "LLM_PRIMARY",
    "LLM_FALLBACK",
    "GEMINI_API_KEY",
    "MISTRAL_API_KEY",
    "LINGUAPOLISH_LANGUAGE",
    "LINGUAPOLISH_REMOTE_TIMEOUT",
    "LINGUAPOLISH_ENABLE_FALLBACK",
)


@pytest.fixture
def workdir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    for name in _ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    (tmp_path / "empty.env").write_text("", encoding="utf-8")
    return tmp_path


def _write(directory: Path, text: str, name: str = "input.txt") -> Path:
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


def _check(directory: Path, *extra: str) -> list[str]:
    return ["check", *extra, "--dotenv", str(directory / "empty.env")]


def test_parser_rejects_conflicting_strategies() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["check", "a.txt", "--remote", "--language-tool"])


def test_check_prints_issues_and_stats(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write(workdir, SAMPLE)

    assert main(_check(workdir, str(source))) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("0:8 [grammar] THEY_WAS-0: Subject-verb agreement error -> they were")
    assert any(line.startswith("16:1 [capitalization]") for line in out)
    assert any(line.startswith("33:0 [punctuation]") for line in out)
    assert out[-1] == "3 issue(s) | 33 characters | 6 words"


def test_check_json_output(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write(workdir, SAMPLE)

    assert main(_check(workdir, str(source), "--json")) == 0

    records = json.loads(capsys.readouterr().out)
    assert [record["type"] for record in records] == ["grammar", "capitalization", "punctuation"]
    assert records[0]["text"] == "they was"
    assert records[0]["position"] == 0
    assert records[0]["length"] == 8
    assert records[1]["contextPosition"] == 16


def test_check_reads_stdin(
    workdir: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO(SAMPLE))

    assert main(_check(workdir, "-", "--apply-all")) == 0

    assert capsys.readouterr().out == "they were going. This is important."


def test_apply_all_writes_output_file(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write(workdir, SAMPLE)
    target = workdir / "fixed.txt"

    assert main(_check(workdir, str(source), "--apply-all", "--output", str(target))) == 0

    assert target.read_text(encoding="utf-8") == "they were going. This is important."
    assert capsys.readouterr().out == ""
    assert source.read_text(encoding="utf-8") == SAMPLE


def test_report_writes_markdown_and_csv(workdir: Path) -> None:
    source = _write(workdir, SAMPLE)
    report = workdir / "reports" / "check.md"

    assert main(_check(workdir, str(source), "--report", str(report), "--language", "en-us")) == 0

    markdown = report.read_text(encoding="utf-8")
    assert markdown.startswith("# Writing Check Report")
    assert "- Language: en-us" in markdown
    assert "- Total issues found: 3" in markdown
    assert "`THEY_WAS-0`" in markdown

    with report.with_suffix(".csv").open(encoding="utf-8", newline="") as handle:
        rows = list(csv.reader(handle))
    assert rows[0][0] == "Id"
    assert len(rows) == 4
    assert rows[1][:4] == ["THEY_WAS-0", "grammar", "0", "8"]


def test_missing_source_returns_error(workdir: Path) -> None:
    assert main(_check(workdir, str(workdir / "absent.txt"))) == 1


def test_seeded_fallback_is_reproducible(
    workdir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source = _write(workdir, CLEAN)

    assert main(_check(workdir, str(source), "--seed", "3")) == 0
    first = capsys.readouterr().out
    assert main(_check(workdir, str(source), "--seed", "3")) == 0
    second = capsys.readouterr().out

    assert first == second
    assert "random-" in first
    assert first.splitlines()[-1].startswith("1 issue(s)")


def test_no_fallback_flag_disables_demonstration_issue(
    workdir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source = _write(workdir, CLEAN)

    assert main(_check(workdir, str(source), "--no-fallback")) == 0

    assert capsys.readouterr().out.splitlines() == ["0 issue(s) | 32 characters | 6 words"]


def test_remote_without_api_keys_returns_error(workdir: Path) -> None:
    source = _write(workdir, SAMPLE)
    assert main(_check(workdir, str(source), "--remote")) == 1


def test_remote_unknown_provider_returns_error(
    workdir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    source = _write(workdir, SAMPLE)
    assert main(_check(workdir, str(source), "--remote", "--provider", "openai")) == 1
