"""Prompt registry: an ordered chain of prompt sources.

Lookups walk the chain and return the first hit.  By default the chain is
just the packaged templates; overrides go in front of them::

    prompt = get_prompt("lab", "extraction", "HEMOGRAM_RULE")

    from izi_lab.prompts import configure
    from izi_lab.prompts.backends import MemoryPromptBackend
    configure(overrides=MemoryPromptBackend({("lab", "extraction", "PCR_RULE"): "..."}))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from izi_lab.prompts.backends.memory_backend import MemoryPromptBackend
from izi_lab.prompts.backends.protocol import IPromptBackend
from izi_lab.prompts.backends.template_backend import TemplateModuleBackend

log = logging.getLogger(__name__)

_chain: list[IPromptBackend] = []


def configure(
    *,
    overrides: IPromptBackend | None = None,
    fallback_to_templates: bool = True,
) -> None:
    """Rebuild the chain.

    ``overrides`` is consulted first.  Packaged templates stay behind it
    unless ``fallback_to_templates`` is False.  Calling with no arguments
    restores the default chain.
    """
    chain: list[IPromptBackend] = []
    if overrides is not None:
        chain.append(overrides)
    if fallback_to_templates or overrides is None:
        chain.append(TemplateModuleBackend())
    _chain[:] = chain
    log.debug("Prompt chain: %s", [type(b).__name__ for b in chain])


def configure_from_path(path: Optional[Path]) -> None:
    """Put the overrides stored at ``path`` in front of the templates."""
    if path is None:
        configure()
        return
    configure(overrides=MemoryPromptBackend.from_json_file(path))


def get_prompt(domain: str, category: str, name: str) -> str:
    """First text for ``(domain, category, name)`` along the chain.

    Raises:
        KeyError: If no source knows the prompt.
    """
    if not _chain:
        configure()
    for backend in _chain:
        try:
            return backend.get(domain, category, name)
        except KeyError:
            continue
    raise KeyError(f"Prompt {name!r} not found in {domain}/{category}")


def available_prompts(domain: str, category: str) -> list[str]:
    """Every name any source in the chain can serve for the group."""
    if not _chain:
        configure()
    names: set[str] = set()
    for backend in _chain:
        names.update(backend.names(domain, category))
    return sorted(names)


def reset() -> None:
    """Drop the chain; the next lookup rebuilds the default one."""
    _chain.clear()
