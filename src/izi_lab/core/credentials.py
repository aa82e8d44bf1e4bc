"""Credential check performed at first use of the extraction service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from izi_lab.exceptions import ConfigurationError

if TYPE_CHECKING:
    from izi_lab.core.config import LLMConfig

log = logging.getLogger(__name__)

# Providers that use local auth and do not require an API key
_NO_KEY_PROVIDERS = frozenset({"ollama"})

_PLACEHOLDER_KEYS = frozenset({"", "no-key"})


def require_api_key(config: LLMConfig) -> str | None:
    """Return the API key to send, or raise ``ConfigurationError`` if it is missing.

    Returns ``None`` for providers that run without a key.
    """
    if config.provider in _NO_KEY_PROVIDERS:
        return None
    if config.api_key.strip() in _PLACEHOLDER_KEYS:
        log.error("Extraction credential missing for provider %s", config.provider)
        raise ConfigurationError()
    return config.api_key
