"""Render the proofreader prompt templates in ``promptFiles`` using pystache.

Templates insert document text with triple mustaches so Markdown and
Japanese punctuation reach the model unescaped. Leading/trailing code-fence
wrappers in template files are stripped before rendering.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import pystache

PROMPTS_DIR = Path(__file__).parent / "promptFiles"

SYSTEM_TEMPLATE = "system_prompt.md"
SEGMENTATION_TEMPLATE = "segment_sentences.md"
CORRECTION_TEMPLATE = "correct_sentence.md"

# Partials are shared by the two task templates
_PARTIALS = ("markdown_preservation",)


@lru_cache(maxsize=None)
def _read_prompt(name: str) -> str:
    p = PROMPTS_DIR / name
    if not p.exists():
        raise FileNotFoundError(f"Prompt file not found: {p}")
    return _strip_code_fences(p.read_text(encoding="utf-8"))


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
    partials = {name: _read_prompt(f"{name}.md") for name in _PARTIALS}
    renderer = pystache.Renderer(partials=partials, missing_tags="strict")
    return renderer.render(_read_prompt(template_name), context or {})


def system_prompt() -> str:
    return render_template(SYSTEM_TEMPLATE)


def build_segmentation_prompt(paragraph_text: str) -> str:
    """User prompt asking for the paragraph's sentences, extracted verbatim."""
    return render_template(SEGMENTATION_TEMPLATE, {"paragraph": paragraph_text})


def build_correction_prompt(target_sentence: str, context: str) -> str:
    """User prompt asking to proofread ``target_sentence`` only.

    ``context`` holds the neighbouring sentences and is for disambiguation.
    """
    return render_template(
        CORRECTION_TEMPLATE,
        {"target": target_sentence, "context": context},
    )
