"""Tests for the extraction invoker and its response schema."""

from __future__ import annotations

import json
from typing import Any

import pytest

from izi_lab.core.config import LLMConfig
from izi_lab.domains.lab.models import AnalysisPreferences, CustomAbbreviation, HistoryPolicy
from izi_lab.exceptions import ConfigurationError, ExtractionError, JSONParseError
from izi_lab.extraction import ExtractionInvoker, part_to_content_block, response_format
from izi_lab.models import InlineBinaryPart, TextPart
from izi_lab.providers.client import LLMClient
from tests.fakes.fake_inference import FakeInferenceBackend


def _invoker(backend: FakeInferenceBackend, config: LLMConfig, **kwargs: Any) -> ExtractionInvoker:
    return ExtractionInvoker(LLMClient(config, backend=backend), **kwargs)


_TEXT = [TextPart(content="Analyze the following raw text from a medical document:\n\nHb 12.5")]


class TestContentBlocks:
    def test_text_block(self) -> None:
        assert part_to_content_block(TextPart(content="hi")) == {"type": "text", "text": "hi"}

    def test_image_block_uses_data_uri(self) -> None:
        block = part_to_content_block(InlineBinaryPart(mime_type="image/png", base64_payload="QUJD"))
        assert block == {"type": "image_url", "image_url": {"url": "data:image/png;base64,QUJD"}}

    def test_pdf_block_uses_file_data(self) -> None:
        block = part_to_content_block(InlineBinaryPart(mime_type="application/pdf", base64_payload="QUJD"))
        assert block == {"type": "file", "file": {"file_data": "data:application/pdf;base64,QUJD"}}

    def test_audio_block(self) -> None:
        block = part_to_content_block(InlineBinaryPart(mime_type="audio/mpeg", base64_payload="QUJD"))
        assert block == {"type": "input_audio", "input_audio": {"data": "QUJD", "format": "mp3"}}


class TestExtract:
    @pytest.mark.asyncio
    async def test_request_shape(self, llm_config: LLMConfig, hb_na_payload: list[dict]) -> None:
        backend = FakeInferenceBackend.returning_json(hb_na_payload)
        custom = [CustomAbbreviation(id="1", exam_name="Plaquetas", abbreviation="Plaq")]
        await _invoker(backend, llm_config).extract(
            _TEXT, AnalysisPreferences(show_reference_values=True), custom,
        )

        assert len(backend.calls) == 1
        assert "Include reference ranges" in backend.last_system_prompt
        assert '"Plaquetas" MUST be abbreviated as "Plaq"' in backend.last_system_prompt
        blocks = backend.last_user_blocks
        assert blocks[0]["text"].endswith("Hb 12.5")
        assert blocks[-1]["text"].startswith("Analyze these medical documents.")
        assert backend.calls[0]["params"]["response_format"] == response_format()

    @pytest.mark.asyncio
    async def test_structured_output_can_be_disabled(self, llm_config: LLMConfig) -> None:
        backend = FakeInferenceBackend()
        await _invoker(backend, llm_config, structured_output=False).extract(_TEXT, AnalysisPreferences())
        assert backend.calls[0]["params"]["response_format"] is None

    @pytest.mark.asyncio
    async def test_grouped_policy_reaches_prompt(self, llm_config: LLMConfig) -> None:
        backend = FakeInferenceBackend()
        await _invoker(backend, llm_config).extract(
            _TEXT, AnalysisPreferences(), history_policy=HistoryPolicy.GROUPED,
        )
        assert "HISTORICAL EVOLUTION" in backend.last_system_prompt

    @pytest.mark.asyncio
    async def test_parses_camel_case_records(self, llm_config: LLMConfig, hb_na_payload: list[dict]) -> None:
        backend = FakeInferenceBackend.returning_json(hb_na_payload)
        records = await _invoker(backend, llm_config).extract(_TEXT, AnalysisPreferences())
        assert len(records) == 1
        assert records[0].patient_initials == "MJR"
        assert records[0].category == "LAB"
        assert [r.abbreviation for r in records[0].lab_results] == ["Hb", "Na"]
        assert records[0].lab_results[1].abnormality == "HIGH"
        assert records[0].lab_results[0].reference_range == "12-16"

    @pytest.mark.asyncio
    async def test_single_object_is_wrapped(self, llm_config: LLMConfig, mri_payload: list[dict]) -> None:
        backend = FakeInferenceBackend.returning_json(mri_payload[0])
        records = await _invoker(backend, llm_config).extract(_TEXT, AnalysisPreferences())
        assert len(records) == 1
        assert records[0].non_lab_data.exam_title == "Ressonância Magnética de Crânio"

    @pytest.mark.asyncio
    async def test_empty_parts_skip_the_call(self, llm_config: LLMConfig) -> None:
        backend = FakeInferenceBackend()
        assert await _invoker(backend, llm_config).extract([], AnalysisPreferences()) == []
        assert backend.calls == []


class TestFailures:
    @pytest.mark.asyncio
    async def test_empty_response(self, llm_config: LLMConfig) -> None:
        backend = FakeInferenceBackend(default_content="   ")
        with pytest.raises(ExtractionError):
            await _invoker(backend, llm_config).extract(_TEXT, AnalysisPreferences())

    @pytest.mark.asyncio
    async def test_unparseable_response(self, llm_config: LLMConfig) -> None:
        backend = FakeInferenceBackend(default_content="Desculpe, não consegui ler o documento.")
        with pytest.raises(JSONParseError) as exc_info:
            await _invoker(backend, llm_config).extract(_TEXT, AnalysisPreferences())
        assert exc_info.value.raw_response.startswith("Desculpe")

    @pytest.mark.asyncio
    async def test_schema_violation(self, llm_config: LLMConfig) -> None:
        payload = [{"patientInitials": "AB", "category": "LAB", "labResults": [{"value": "1"}]}]
        backend = FakeInferenceBackend(default_content=json.dumps(payload))
        with pytest.raises(ExtractionError):
            await _invoker(backend, llm_config).extract(_TEXT, AnalysisPreferences())

    @pytest.mark.asyncio
    async def test_service_failure_is_wrapped(self, llm_config: LLMConfig) -> None:
        backend = FakeInferenceBackend(error=ConnectionError("offline"))
        with pytest.raises(ExtractionError) as exc_info:
            await _invoker(backend, llm_config).extract(_TEXT, AnalysisPreferences())
        assert "Não foi possível processar o documento" in str(exc_info.value)
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_missing_credential_propagates(self) -> None:
        backend = FakeInferenceBackend()
        invoker = _invoker(backend, LLMConfig(api_key="", max_retries=1))
        with pytest.raises(ConfigurationError):
            await invoker.extract(_TEXT, AnalysisPreferences())
        assert backend.calls == []


class TestResponseSchema:
    def test_required_fields_on_the_wire(self) -> None:
        schema = response_format()["json_schema"]["schema"]
        record = schema["$defs"]["RawExtraction"]
        assert record["required"] == ["patientInitials", "category"]
        assert "labResults" in record["properties"]
        assert schema["type"] == "array"

    def test_abnormality_is_constrained(self) -> None:
        lab = response_format()["json_schema"]["schema"]["$defs"]["RawLabResult"]
        assert lab["properties"]["abnormality"]["enum"] == ["HIGH", "LOW", "NORMAL"]
