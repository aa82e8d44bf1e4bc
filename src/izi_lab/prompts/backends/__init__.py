"""Prompt sources: packaged templates and in-memory overrides."""

from __future__ import annotations

from izi_lab.prompts.backends.memory_backend import MemoryPromptBackend
from izi_lab.prompts.backends.protocol import IPromptBackend
from izi_lab.prompts.backends.template_backend import TemplateModuleBackend

__all__ = ["IPromptBackend", "MemoryPromptBackend", "TemplateModuleBackend"]
