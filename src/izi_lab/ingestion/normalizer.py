"""Input normalizer: heterogeneous input to an ordered list of request parts."""

from __future__ import annotations

import base64
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO, Union

from izi_lab.exceptions import InputNormalizationError
from izi_lab.models import AudioBlob, InlineBinaryPart, InputSource, Part, TextPart, UploadedFile
from izi_lab.prompts.registry import get_prompt

log = logging.getLogger(__name__)

DEFAULT_AUDIO_MIME = "audio/wav"


def _read_bytes(content: Union[bytes, Path, BinaryIO]) -> bytes:
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    if isinstance(content, Path):
        return content.read_bytes()
    data = content.read()
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError(f"Expected a binary stream, got {type(data).__name__}")
    return bytes(data)


def encode_base64(content: Union[bytes, Path, BinaryIO]) -> str:
    """Byte-exact standard base64 of *content*."""
    return base64.b64encode(_read_bytes(content)).decode("ascii")


class InputNormalizer:
    """Converts a file set, an audio blob or raw text into request parts.

    Pure transformation: nothing is cached, and a failure on any input fails
    the whole call without returning a partial list.
    """

    def __init__(self, *, default_audio_mime: str = DEFAULT_AUDIO_MIME) -> None:
        self._default_audio_mime = default_audio_mime

    def normalize(self, source: InputSource) -> list[Part]:
        if isinstance(source, str):
            return self._from_text(source)
        if isinstance(source, AudioBlob):
            return self._from_audio(source)
        if isinstance(source, Sequence) and not isinstance(source, (bytes, bytearray)):
            return self._from_files(source)
        log.error("Unsupported input type: %s", type(source).__name__)
        raise InputNormalizationError()

    def _from_text(self, text: str) -> list[Part]:
        if not text.strip():
            return []
        template = get_prompt("lab", "ingestion", "TEXT_INPUT_PROMPT")
        return [TextPart(content=template.format(text=text))]

    def _from_audio(self, blob: AudioBlob) -> list[Part]:
        try:
            payload = encode_base64(blob.content)
        except (OSError, TypeError, ValueError) as exc:
            log.error("Audio blob could not be encoded: %s", type(exc).__name__)
            raise InputNormalizationError() from exc
        return [
            InlineBinaryPart(
                mime_type=blob.mime_type or self._default_audio_mime,
                base64_payload=payload,
            ),
            TextPart(content=get_prompt("lab", "ingestion", "AUDIO_INPUT_PROMPT")),
        ]

    def _from_files(self, files: Sequence[UploadedFile]) -> list[Part]:
        parts: list[Part] = []
        for index, upload in enumerate(files):
            if not isinstance(upload, UploadedFile):
                log.error("File %d is not an UploadedFile: %s", index, type(upload).__name__)
                raise InputNormalizationError()
            try:
                payload = encode_base64(upload.content)
            except (OSError, TypeError, ValueError) as exc:
                log.error(
                    "File %d (%s) could not be encoded: %s",
                    index, upload.mime_type, type(exc).__name__,
                )
                raise InputNormalizationError() from exc
            parts.append(InlineBinaryPart(mime_type=upload.mime_type, base64_payload=payload))
        log.debug("Normalized %d file(s) into request parts", len(parts))
        return parts


def normalize_input(source: InputSource, *, default_audio_mime: str = DEFAULT_AUDIO_MIME) -> list[Part]:
    """Module-level convenience wrapper around ``InputNormalizer.normalize``."""
    return InputNormalizer(default_audio_mime=default_audio_mime).normalize(source)
