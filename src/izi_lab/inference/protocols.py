"""Contract between the LLM client and whatever actually runs the model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

FINISHED = "finished"
TRUNCATED = "max_output_reached"
FILTERED = "content_filtered"


@dataclass
class InferenceResult:
    """One model reply.

    ``finish_reason`` is normalized to ``FINISHED``, ``TRUNCATED`` or
    ``FILTERED`` whatever the provider called it.
    """

    content: str
    finish_reason: str = FINISHED
    model: str = ""
    usage: dict[str, int] = field(default_factory=dict)

    @property
    def truncated(self) -> bool:
        return self.finish_reason == TRUNCATED

    @property
    def filtered(self) -> bool:
        return self.finish_reason == FILTERED


@runtime_checkable
class IInferenceBackend(Protocol):
    """Runs one chat completion.

    ``messages`` are OpenAI-style; a user message may carry a list of
    content blocks (text, image_url, file, input_audio).  ``params`` carries
    sampling options, ``response_format`` and the credential.
    """

    async def infer(
        self,
        messages: list[dict[str, Any]],
        model: str,
        **params: Any,
    ) -> InferenceResult:
        ...
