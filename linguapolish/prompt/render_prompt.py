"""Render prompt templates in linguapolish/prompt/promptFiles using pystache.

Templates may include partials (``{{> output_format}}``); partial files that
are wrapped in a Markdown code fence have the fence stripped before use. The
analysed text is inserted unescaped (``{{{text}}}``) so it reaches the model
byte for byte.
"""

from __future__ import annotations

from pathlib import Path

import pystache

PROMPTS_DIR = Path(__file__).parent / "promptFiles"

SYSTEM_TEMPLATE = "analyse_text_system.md"
USER_TEMPLATE = "analyse_text_user.md"

TEMPLATE_PARTIALS = {
    SYSTEM_TEMPLATE: ["output_format"],
    USER_TEMPLATE: [],
}


def _read_prompt(name: str) -> str:
    p = PROMPTS_DIR / name
    if not p.exists():
        raise FileNotFoundError(f"Prompt file not found: {p}")
    return p.read_text(encoding="utf-8")


def _strip_code_fences(s: str) -> str:
    """Strip a single leading and trailing code-fence line if present."""
    lines = s.splitlines()
    if not lines:
        return s
    if lines[0].lstrip().startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].lstrip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def render_template(template_name: str, context: dict | None = None) -> str:
    partials = {
        name: _strip_code_fences(_read_prompt(f"{name}.md"))
        for name in TEMPLATE_PARTIALS.get(template_name, [])
    }
    renderer = pystache.Renderer(partials=partials)
    return renderer.render(_read_prompt(template_name), context or {}).strip()


def render_system_prompt() -> str:
    return render_template(SYSTEM_TEMPLATE)


def render_user_prompt(language: str, text: str) -> str:
    return render_template(USER_TEMPLATE, {"language": language, "text": text})


def render_prompts(language: str, text: str) -> tuple[str, str]:
    """Render the (system, user) prompt pair for analysing ``text``."""
    return render_system_prompt(), render_user_prompt(language, text)
