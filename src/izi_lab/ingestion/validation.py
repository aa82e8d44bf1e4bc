"""Upload checks applied by acquisition collaborators before normalization."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from izi_lab.exceptions import InputValidationError

if TYPE_CHECKING:
    from izi_lab.core.config import IngestionConfig

log = logging.getLogger(__name__)


def is_allowed_mime(mime_type: str, config: IngestionConfig) -> bool:
    """``application/pdf`` or any ``image/*`` under the default config."""
    mime = (mime_type or "").lower().split(";", 1)[0].strip()
    if mime in config.allowed_mime_types:
        return True
    return any(mime.startswith(prefix) for prefix in config.allowed_mime_prefixes)


def validate_upload(mime_type: str, size: int, config: IngestionConfig, *, filename: str = "") -> None:
    """Reject disallowed MIME types and oversized files.

    Raises:
        InputValidationError: naming the offending file.
    """
    if not is_allowed_mime(mime_type, config):
        log.warning("Rejected upload with MIME type %r", mime_type)
        raise InputValidationError(
            f"Tipo de arquivo não suportado: {mime_type or 'desconhecido'}. Envie PDF ou imagem.",
            filename=filename,
        )
    if size > config.max_file_bytes:
        limit_mb = config.max_file_bytes // (1024 * 1024)
        log.warning("Rejected upload of %d bytes (limit %d)", size, config.max_file_bytes)
        raise InputValidationError(
            f"Arquivo excede o limite de {limit_mb} MB.",
            filename=filename,
        )
