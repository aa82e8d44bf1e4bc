"""Prompt management: registry, builder, and domain-specific templates."""

from __future__ import annotations

from izi_lab.prompts.builder import build_system_prompt, render_rule
from izi_lab.prompts.registry import available_prompts, configure, configure_from_path, get_prompt, reset

__all__ = [
    "available_prompts",
    "build_system_prompt",
    "configure",
    "configure_from_path",
    "get_prompt",
    "render_rule",
    "reset",
]
