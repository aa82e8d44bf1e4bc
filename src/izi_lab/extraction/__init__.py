"""Extraction invoker and raw response schema."""

from __future__ import annotations

from izi_lab.extraction.invoker import ExtractionInvoker, build_messages, part_to_content_block
from izi_lab.extraction.schema import (
    RawExtraction,
    RawLabResult,
    RawNonLabData,
    response_format,
    response_json_schema,
)

__all__ = [
    "ExtractionInvoker",
    "RawExtraction",
    "RawLabResult",
    "RawNonLabData",
    "build_messages",
    "part_to_content_block",
    "response_format",
    "response_json_schema",
]
