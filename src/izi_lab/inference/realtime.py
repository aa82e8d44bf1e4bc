"""LiteLLM-backed inference."""

from __future__ import annotations

import logging
from typing import Any

from izi_lab.inference.protocols import FILTERED, FINISHED, TRUNCATED, InferenceResult

log = logging.getLogger(__name__)

_FINISH_REASONS = {
    "stop": FINISHED,
    "length": TRUNCATED,
    "max_tokens": TRUNCATED,
    "content_filter": FILTERED,
    "safety": FILTERED,
}


def _usage(response: Any) -> dict[str, int]:
    usage = getattr(response, "usage", None)
    if not usage:
        return {}
    return {
        "prompt_tokens": getattr(usage, "prompt_tokens", 0),
        "completion_tokens": getattr(usage, "completion_tokens", 0),
        "total_tokens": getattr(usage, "total_tokens", 0),
    }


class RealTimeBackend:
    """Calls ``litellm.acompletion`` once per request.

    LiteLLM routes ``gemini/``, ``openai/``, ``anthropic/`` and ``ollama/``
    model ids.  With ``drop_params`` on, options a provider does not support
    (``seed`` or ``response_format`` on some local models) are dropped
    instead of failing the request.
    """

    def __init__(self, *, drop_params: bool = True) -> None:
        self._drop_params = drop_params

    async def infer(
        self,
        messages: list[dict[str, Any]],
        model: str,
        **params: Any,
    ) -> InferenceResult:
        from litellm import acompletion

        kwargs: dict[str, Any] = {k: v for k, v in params.items() if v is not None}
        response = await acompletion(
            model=model,
            messages=messages,
            drop_params=self._drop_params,
            **kwargs,
        )
        choice = response.choices[0]
        raw_reason = choice.finish_reason or "stop"
        result = InferenceResult(
            content=choice.message.content or "",
            finish_reason=_FINISH_REASONS.get(str(raw_reason).lower(), FINISHED),
            model=getattr(response, "model", None) or model,
            usage=_usage(response),
        )
        log.debug("Inference finished (%s), usage=%s", result.finish_reason, result.usage)
        return result
