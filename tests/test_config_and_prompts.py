from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from linguapolish.config import DEFAULT_LANGUAGE, DEFAULT_REMOTE_TIMEOUT, Settings
from linguapolish.prompt.render_prompt import (
    _read_prompt,
    _strip_code_fences,
    render_prompts,
    render_system_prompt,
    render_user_prompt,
)

_ENV_VARS = (
    "LLM_PRIMARY",
    "LLM_FALLBACK",
    "LINGUAPOLISH_LANGUAGE",
    "LINGUAPOLISH_REMOTE_TIMEOUT",
    "LINGUAPOLISH_ENABLE_FALLBACK",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    for name in _ENV_VARS:
        # setenv first so teardown also removes values loaded from .env files
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # keep load_dotenv() from finding a developer's .env file
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_settings_defaults(clean_env: Path) -> None:
    settings = Settings.from_env(clean_env / "missing.env")
    assert settings.language == DEFAULT_LANGUAGE
    assert settings.enable_fallback is True
    assert settings.remote_timeout == DEFAULT_REMOTE_TIMEOUT
    assert settings.primary_provider is None
    assert settings.fallback_providers == []


def test_settings_from_env(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PRIMARY", "Mistral")
    monkeypatch.setenv("LLM_FALLBACK", "gemini")
    monkeypatch.setenv("LINGUAPOLISH_LANGUAGE", "en-gb")
    monkeypatch.setenv("LINGUAPOLISH_REMOTE_TIMEOUT", "4.5")
    monkeypatch.setenv("LINGUAPOLISH_ENABLE_FALLBACK", "no")

    settings = Settings.from_env(clean_env / "missing.env")

    assert settings.primary_provider == "mistral"
    assert settings.fallback_providers == ["gemini"]
    assert settings.language == "en-gb"
    assert settings.remote_timeout == 4.5
    assert settings.enable_fallback is False


@pytest.mark.parametrize("raw", ["soon", "-2", "0"])
def test_bad_timeout_falls_back_to_default(
    raw: str, clean_env: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LINGUAPOLISH_REMOTE_TIMEOUT", raw)
    assert Settings.from_env(clean_env / "missing.env").remote_timeout == DEFAULT_REMOTE_TIMEOUT


def test_settings_read_dotenv_file(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = clean_env / "custom.env"
    env_file.write_text("LINGUAPOLISH_LANGUAGE=fr\n", encoding="utf-8")
    settings = Settings.from_env(env_file)
    assert settings.language == "fr"


def test_strip_code_fences() -> None:
    assert _strip_code_fences("```markdown\nHello\n```") == "Hello"
    assert _strip_code_fences("  ```\nHello\n  ```") == "Hello"
    assert _strip_code_fences("No fences") == "No fences"


def test_read_prompt_missing_file() -> None:
    with pytest.raises(FileNotFoundError):
        _read_prompt("does_not_exist.md")


def test_system_prompt_includes_output_format_partial() -> None:
    system = render_system_prompt()
    assert "## Output format" in system
    assert '"capitalization"' in system
    assert "```" not in system
    assert "{{" not in system


def test_user_prompt_keeps_text_unescaped() -> None:
    text = 'Tom & Jerry said "<hi>" {{not a tag}}'
    prompt = render_user_prompt("en-us", text)
    assert "Language: en-us" in prompt
    assert text in prompt


def test_render_prompts_pair() -> None:
    system, user = render_prompts("es", "Hola")
    assert system == render_system_prompt()
    assert user.endswith("Hola\nTEXT>>>")
