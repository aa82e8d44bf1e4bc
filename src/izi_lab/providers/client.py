"""Async LLM client: credential check, retry with backoff, lenient JSON parsing.

Calls go through an ``IInferenceBackend``; the default one uses
``litellm.acompletion()`` so any LiteLLM model id works.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
import re
from typing import Any, Iterator

from izi_lab.core.config import LLMConfig
from izi_lab.core.credentials import require_api_key
from izi_lab.exceptions import NonRetryableError, RetryableError
from izi_lab.inference.protocols import IInferenceBackend
from izi_lab.inference.realtime import RealTimeBackend

log = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def _loads_lenient(text: str) -> Any | None:
    text = text.strip()
    if not text:
        return None
    for attempt in (text, _TRAILING_COMMA_RE.sub(r"\1", text)):
        try:
            return json.loads(attempt)
        except json.JSONDecodeError:
            continue
    return None


def _balanced_span(content: str, start: int) -> str | None:
    """Text from ``start`` to its matching close bracket, skipping strings."""
    depth = 0
    in_string = False
    escape = False
    for i in range(start, len(content)):
        ch = content[i]
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif ch == '"':
            in_string = not in_string
        elif in_string:
            continue
        elif ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
            if depth == 0:
                return content[start : i + 1]
    return None


def _json_candidates(content: str) -> Iterator[str]:
    for match in _FENCE_RE.finditer(content):
        yield match.group(1)
    yield content
    starts = [i for i in (content.find("["), content.find("{")) if i != -1]
    if starts:
        # Outermost span only, never a record nested inside it.
        span = _balanced_span(content, min(starts))
        if span is not None:
            yield span


class LLMClient:
    """Sends pre-built messages and returns the reply text."""

    def __init__(self, config: LLMConfig, backend: IInferenceBackend | None = None) -> None:
        self._config = config
        self._backend = backend or RealTimeBackend()

    @property
    def model(self) -> str:
        return self._config.model

    @staticmethod
    def _is_retryable(exc: Exception) -> bool:
        """Auth, bad-request and not-found errors fail fast; everything else retries."""
        from litellm.exceptions import AuthenticationError, BadRequestError, NotFoundError

        return not isinstance(exc, (AuthenticationError, BadRequestError, NotFoundError))

    def _params(
        self,
        api_key: str,
        response_format: dict[str, Any] | None,
        temperature: float | None,
    ) -> dict[str, Any]:
        return {
            "temperature": self._config.temperature if temperature is None else temperature,
            "top_p": self._config.top_p,
            "seed": self._config.seed,
            "timeout": self._config.timeout,
            "api_key": api_key,
            "api_base": self._config.base_url,
            "response_format": response_format,
        }

    def _backoff(self, attempt: int) -> float:
        base = min(2 ** attempt, self._config.retry_max_delay)
        return base + random.uniform(0, base * self._config.retry_jitter_factor)

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        response_format: dict[str, Any] | None = None,
        temperature: float | None = None,
    ) -> str:
        """Run one completion and return its text.

        Raises:
            ConfigurationError: credential missing; raised before any network call.
            NonRetryableError: the provider rejected, blocked or truncated the reply.
            RetryableError: every attempt failed with a transient error.
        """
        params = self._params(require_api_key(self._config), response_format, temperature)
        attempts = self._config.max_retries
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                result = await self._backend.infer(messages, self._config.model, **params)
            except Exception as exc:
                if not self._is_retryable(exc):
                    raise NonRetryableError(f"LLM request rejected: {type(exc).__name__}") from exc
                last_error = exc
                if attempt < attempts - 1:
                    wait = self._backoff(attempt)
                    log.warning(
                        "LLM attempt %d/%d failed: %s (retrying in %.1fs)",
                        attempt + 1, attempts, type(exc).__name__, wait,
                    )
                    await asyncio.sleep(wait)
                continue

            if result.filtered:
                raise NonRetryableError("LLM response blocked by the provider's safety filter")
            if result.truncated:
                log.error("LLM output truncated at max tokens (model=%s)", self._config.model)
                raise NonRetryableError("LLM response truncated at the output token limit")
            return result.content

        raise RetryableError(
            f"LLM API failed after {attempts} attempt(s): {type(last_error).__name__}"
        ) from last_error

    @staticmethod
    def extract_json(content: str) -> Any | None:
        """Parse JSON out of a model reply.

        Tries fenced blocks, then the whole text, then the balanced span
        opened by the earliest ``[`` or ``{``.  Trailing commas are tolerated.  Returns
        ``None`` when nothing parses.
        """
        for candidate in _json_candidates(content):
            parsed = _loads_lenient(candidate)
            if parsed is not None:
                return parsed
        log.error("No JSON found in LLM response (%d chars)", len(content))
        return None
