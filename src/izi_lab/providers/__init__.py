"""LLM provider clients."""

from __future__ import annotations

from izi_lab.providers.client import LLMClient

__all__ = ["LLMClient"]
