"""Data models for izi-lab inputs and canonical request parts.

Domain records (``ExamRecord`` and friends) live in
``izi_lab.domains.lab.models``; the raw LLM response schema lives in
``izi_lab.extraction.schema``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Literal, Optional, Union

from pydantic import BaseModel

# ── Caller inputs ────────────────────────────────────────────────────


@dataclass
class UploadedFile:
    """A file produced by the acquisition collaborator (PDF or image).

    ``content`` may be raw bytes, a readable binary stream or a path.
    """

    content: Union[bytes, Path, BinaryIO]
    mime_type: str
    filename: str = ""
    size: Optional[int] = None


@dataclass
class AudioBlob:
    """A single recorded audio clip."""

    content: Union[bytes, Path, BinaryIO]
    mime_type: str = ""


InputSource = Union[list[UploadedFile], tuple[UploadedFile, ...], AudioBlob, str]


# ── Canonical request parts ──────────────────────────────────────────


class InlineBinaryPart(BaseModel):
    """Binary payload sent inline as base64."""

    kind: Literal["inline_binary"] = "inline_binary"
    mime_type: str
    base64_payload: str


class TextPart(BaseModel):
    """Plain text instruction or document content."""

    kind: Literal["text"] = "text"
    content: str


Part = Union[InlineBinaryPart, TextPart]
