from __future__ import annotations

from .render_prompt import PROMPTS_DIR, build_correction_prompt, build_segmentation_prompt, render_template, system_prompt

__all__ = [
    "PROMPTS_DIR",
    "build_correction_prompt",
    "build_segmentation_prompt",
    "render_template",
    "system_prompt",
]
