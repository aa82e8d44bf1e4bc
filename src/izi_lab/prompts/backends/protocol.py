"""Contract shared by every prompt source."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IPromptBackend(Protocol):
    """A synchronous source of prompt text keyed by ``(domain, category, name)``.

    Lookups run inside template-module ``__getattr__`` so they cannot await.
    """

    def get(self, domain: str, category: str, name: str) -> str:
        """Return the text for ``name``; raise ``KeyError`` when absent."""
        ...

    def names(self, domain: str, category: str) -> list[str]:
        """Names this source can serve for one template group, sorted."""
        ...
