"""Output formatter protocol for exporting a session's records."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, Sequence, runtime_checkable

from izi_lab.domains.lab.models import ExamRecord


@runtime_checkable
class IOutputFormatter(Protocol):
    """Contract for export formatters (JSON today; spreadsheet/PDF live outside the core)."""

    def format(self, records: Sequence[ExamRecord], **kwargs: Any) -> bytes:
        ...

    def format_to_file(self, records: Sequence[ExamRecord], path: Path, **kwargs: Any) -> Path:
        ...

    @property
    def content_type(self) -> str:
        ...


__all__ = ["IOutputFormatter"]
