"""Tests for the input normalizer and upload validation."""

from __future__ import annotations

import base64
import io
from pathlib import Path

import pytest

from izi_lab.core.config import IngestionConfig
from izi_lab.exceptions import ExtractionError, InputNormalizationError, InputValidationError
from izi_lab.ingestion import InputNormalizer, normalize_input, validate_upload
from izi_lab.models import AudioBlob, InlineBinaryPart, TextPart, UploadedFile


class _BrokenStream(io.RawIOBase):
    def read(self, *args: object) -> bytes:
        raise OSError("disk went away")


class TestTextInput:
    def test_text_becomes_single_prefixed_part(self) -> None:
        parts = normalize_input("Hb 12.5 (12-16)")
        assert len(parts) == 1
        assert isinstance(parts[0], TextPart)
        assert parts[0].content.startswith("Analyze the following raw text from a medical document:")
        assert parts[0].content.endswith("Hb 12.5 (12-16)")

    def test_blank_text_yields_no_parts(self) -> None:
        assert normalize_input("   \n") == []


class TestAudioInput:
    def test_audio_defaults_to_wav(self) -> None:
        parts = normalize_input(AudioBlob(content=b"RIFF0000"))
        assert isinstance(parts[0], InlineBinaryPart)
        assert parts[0].mime_type == "audio/wav"
        assert base64.b64decode(parts[0].base64_payload) == b"RIFF0000"
        assert isinstance(parts[1], TextPart)
        assert "Transcribe precisely" in parts[1].content

    def test_audio_keeps_declared_mime(self) -> None:
        parts = normalize_input(AudioBlob(content=b"abc", mime_type="audio/webm"))
        assert parts[0].mime_type == "audio/webm"

    def test_configured_default_audio_mime(self) -> None:
        parts = InputNormalizer(default_audio_mime="audio/ogg").normalize(AudioBlob(content=b"abc"))
        assert parts[0].mime_type == "audio/ogg"


class TestFileInput:
    def test_one_part_per_file_in_order(self, tmp_path: Path) -> None:
        pdf_path = tmp_path / "exam.pdf"
        pdf_path.write_bytes(b"%PDF-1.7 fake")
        files = [
            UploadedFile(content=pdf_path, mime_type="application/pdf"),
            UploadedFile(content=b"\x89PNG\r\n", mime_type="image/png"),
            UploadedFile(content=io.BytesIO(b"\xff\xd8\xff"), mime_type="image/jpeg"),
        ]
        parts = normalize_input(files)
        assert [p.mime_type for p in parts] == ["application/pdf", "image/png", "image/jpeg"]
        assert base64.b64decode(parts[0].base64_payload) == b"%PDF-1.7 fake"
        assert base64.b64decode(parts[1].base64_payload) == b"\x89PNG\r\n"
        assert base64.b64decode(parts[2].base64_payload) == b"\xff\xd8\xff"

    def test_empty_file_list(self) -> None:
        assert normalize_input([]) == []

    def test_unreadable_file_fails_whole_call(self, tmp_path: Path) -> None:
        files = [
            UploadedFile(content=b"ok", mime_type="image/png"),
            UploadedFile(content=tmp_path / "missing.pdf", mime_type="application/pdf"),
        ]
        with pytest.raises(InputNormalizationError):
            normalize_input(files)

    def test_stream_error_is_wrapped(self) -> None:
        with pytest.raises(InputNormalizationError) as exc_info:
            normalize_input([UploadedFile(content=_BrokenStream(), mime_type="image/png")])
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_normalization_error_is_an_extraction_error(self) -> None:
        with pytest.raises(ExtractionError):
            normalize_input(["not an upload"])  # type: ignore[list-item]

    def test_unsupported_source_type(self) -> None:
        with pytest.raises(InputNormalizationError):
            normalize_input(42)  # type: ignore[arg-type]


class TestValidateUpload:
    def test_pdf_and_images_accepted(self) -> None:
        config = IngestionConfig()
        validate_upload("application/pdf", 1024, config)
        validate_upload("image/jpeg", 1024, config)
        validate_upload("image/png", 1024, config)

    def test_other_mime_rejected(self) -> None:
        with pytest.raises(InputValidationError) as exc_info:
            validate_upload("text/plain", 10, IngestionConfig(), filename="notes.txt")
        assert exc_info.value.filename == "notes.txt"

    def test_oversized_file_rejected(self) -> None:
        config = IngestionConfig()
        validate_upload("application/pdf", config.max_file_bytes, config)
        with pytest.raises(InputValidationError, match="15 MB"):
            validate_upload("application/pdf", config.max_file_bytes + 1, config)
