"""Dict-backed prompt overrides, loadable from a JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

log = logging.getLogger(__name__)

PromptKey = tuple[str, str, str]


def parse_key(raw: str) -> PromptKey:
    """Split a ``"domain/category/NAME"`` key."""
    parts = [p.strip() for p in raw.split("/")]
    if len(parts) != 3 or not all(parts):
        raise ValueError(f"Prompt override key must be 'domain/category/NAME', got {raw!r}")
    return parts[0], parts[1], parts[2]


class MemoryPromptBackend:
    """Serves prompts from a dict keyed by ``(domain, category, name)``."""

    def __init__(self, prompts: dict[PromptKey, str] | None = None) -> None:
        self._store: dict[PromptKey, str] = dict(prompts or {})

    @classmethod
    def from_json_file(cls, path: Path) -> MemoryPromptBackend:
        """Load overrides from a JSON object of ``"domain/category/NAME": text``."""
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Prompt overrides in {path} must be a JSON object")
        prompts = {parse_key(k): str(v) for k, v in payload.items()}
        log.info("Loaded %d prompt override(s) from %s", len(prompts), path)
        return cls(prompts)

    def put(self, domain: str, category: str, name: str, text: str) -> None:
        self._store[(domain, category, name)] = text

    def get(self, domain: str, category: str, name: str) -> str:
        try:
            return self._store[(domain, category, name)]
        except KeyError:
            raise KeyError(f"No override for {domain}/{category}/{name}") from None

    def names(self, domain: str, category: str) -> list[str]:
        return sorted(n for d, c, n in self._store if d == domain and c == category)

    def __len__(self) -> int:
        return len(self._store)
