"""Packaged prompt templates.

Templates live in ``izi_lab.prompts.templates.<domain>.<category>`` modules,
each holding a ``_PROMPT_DATA`` dict.  The dict is read directly so lookups
never re-enter the module's ``__getattr__``.
"""

from __future__ import annotations

import importlib

_TEMPLATE_PACKAGE = "izi_lab.prompts.templates"


class TemplateModuleBackend:
    """Serves the text shipped with the package."""

    def __init__(self, package: str = _TEMPLATE_PACKAGE) -> None:
        self._package = package
        self._data: dict[tuple[str, str], dict[str, str]] = {}

    def _group(self, domain: str, category: str) -> dict[str, str]:
        key = (domain, category)
        if key not in self._data:
            module_path = f"{self._package}.{domain}.{category}"
            try:
                module = importlib.import_module(module_path)
            except ModuleNotFoundError as exc:
                raise KeyError(f"No prompt templates for {domain}/{category}") from exc
            self._data[key] = dict(getattr(module, "_PROMPT_DATA", {}))
        return self._data[key]

    def get(self, domain: str, category: str, name: str) -> str:
        group = self._group(domain, category)
        if name not in group:
            raise KeyError(f"Prompt {name!r} not found in {domain}/{category}")
        return group[name]

    def names(self, domain: str, category: str) -> list[str]:
        try:
            return sorted(self._group(domain, category))
        except KeyError:
            return []
