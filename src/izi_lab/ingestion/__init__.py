"""Input acquisition boundary: upload checks and part normalization."""

from __future__ import annotations

from izi_lab.ingestion.normalizer import InputNormalizer, encode_base64, normalize_input
from izi_lab.ingestion.validation import is_allowed_mime, validate_upload

__all__ = [
    "InputNormalizer",
    "encode_base64",
    "is_allowed_mime",
    "normalize_input",
    "validate_upload",
]
