"""Extraction invoker: rule-driven instructions + one schema-constrained LLM call."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from pydantic import ValidationError

from izi_lab.domains.lab.models import AnalysisPreferences, CustomAbbreviation, HistoryPolicy
from izi_lab.domains.lab.rules import build_rule_set
from izi_lab.exceptions import ExtractionError, JSONParseError, LLMClientError
from izi_lab.extraction.schema import RAW_BATCH_ADAPTER, RawExtraction, response_format
from izi_lab.models import InlineBinaryPart, Part, TextPart
from izi_lab.prompts.builder import build_system_prompt
from izi_lab.prompts.registry import get_prompt
from izi_lab.providers.client import LLMClient

log = logging.getLogger(__name__)

_AUDIO_FORMATS = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/mp4": "m4a",
    "audio/x-m4a": "m4a",
}


def part_to_content_block(part: Part) -> dict[str, Any]:
    """Render a canonical part as an OpenAI-style content block for LiteLLM."""
    if isinstance(part, TextPart):
        return {"type": "text", "text": part.content}

    mime = part.mime_type.lower()
    if mime.startswith("image/"):
        return {
            "type": "image_url",
            "image_url": {"url": f"data:{part.mime_type};base64,{part.base64_payload}"},
        }
    if mime.startswith("audio/"):
        audio_format = _AUDIO_FORMATS.get(mime.split(";", 1)[0], mime.split("/", 1)[1].split(";", 1)[0])
        return {
            "type": "input_audio",
            "input_audio": {"data": part.base64_payload, "format": audio_format},
        }
    return {
        "type": "file",
        "file": {"file_data": f"data:{part.mime_type};base64,{part.base64_payload}"},
    }


def build_messages(parts: Sequence[Part], system_prompt: str) -> list[dict[str, Any]]:
    """System instruction followed by a single user turn carrying every part."""
    blocks = [part_to_content_block(p) for p in parts]
    blocks.append({"type": "text", "text": get_prompt("lab", "ingestion", "ANALYZE_DOCUMENTS_PROMPT")})
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": blocks},
    ]


class ExtractionInvoker:
    """Builds the instruction set, calls the model once and validates the reply.

    Any failure after the credential check surfaces as ``ExtractionError``;
    a failed call never yields partial results.
    """

    def __init__(self, client: LLMClient, *, structured_output: bool = True) -> None:
        self._client = client
        self._structured_output = structured_output

    async def extract(
        self,
        parts: Sequence[Part],
        preferences: AnalysisPreferences,
        custom_abbreviations: Sequence[CustomAbbreviation] = (),
        history_policy: HistoryPolicy = HistoryPolicy.SEPARATE,
    ) -> list[RawExtraction]:
        if not parts:
            log.info("Empty part list; skipping extraction call")
            return []

        rules = build_rule_set(preferences, tuple(custom_abbreviations), history_policy)
        system_prompt = build_system_prompt(rules)
        messages = build_messages(parts, system_prompt)

        binary_count = sum(1 for p in parts if isinstance(p, InlineBinaryPart))
        log.info(
            "Submitting extraction: %d part(s), %d binary, %d rule(s), policy=%s",
            len(parts), binary_count, len(rules), history_policy.value,
        )

        try:
            content = await self._client.complete(
                messages,
                response_format=response_format() if self._structured_output else None,
            )
        except LLMClientError as exc:
            log.error("Extraction call failed: %s", exc)
            raise ExtractionError() from exc

        return self.parse_response(content)

    def parse_response(self, content: str) -> list[RawExtraction]:
        """Parse and validate a raw model reply into extraction objects."""
        if not content or not content.strip():
            log.error("Extraction returned an empty response")
            raise ExtractionError()

        parsed = self._client.extract_json(content)
        if parsed is None:
            raise JSONParseError(raw_response=content)
        if isinstance(parsed, dict):
            parsed = [parsed]
        if not isinstance(parsed, list):
            log.error("Extraction returned JSON of type %s", type(parsed).__name__)
            raise JSONParseError(raw_response=content)

        try:
            records = RAW_BATCH_ADAPTER.validate_python(parsed)
        except ValidationError as exc:
            log.error("Extraction response failed schema validation: %d error(s)", exc.error_count())
            raise JSONParseError(raw_response=content) from exc

        log.info("Extraction returned %d record(s)", len(records))
        return records
