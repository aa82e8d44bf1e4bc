"""JSON export of exam records, with rendered summaries alongside the raw fields."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Sequence

from izi_lab.domains.lab.models import ExamRecord
from izi_lab.formatting.summary import SummaryFormatter


class JSONFormatter:
    """Renders a sequence of ExamRecord as indented JSON bytes."""

    def __init__(self, summary_formatter: Optional[SummaryFormatter] = None) -> None:
        self._summaries = summary_formatter or SummaryFormatter()

    def record_payload(self, record: ExamRecord) -> dict[str, Any]:
        data = record.to_dict()
        data["fullSummary"] = self._summaries.full_summary(record)
        data["abnormalSummary"] = self._summaries.abnormal_summary(record)
        data["rows"] = self._summaries.export_rows(record)
        return data

    def format(self, records: Sequence[ExamRecord], **kwargs: Any) -> bytes:
        """Serialize *records* to pretty-printed JSON bytes.

        Pass ``session_id`` to include it at the top level.
        """
        payload: dict[str, Any] = {"records": [self.record_payload(r) for r in records]}
        if kwargs.get("session_id"):
            payload = {"sessionId": kwargs["session_id"], **payload}
        return json.dumps(payload, indent=2, ensure_ascii=False, default=str).encode()

    def format_to_file(self, records: Sequence[ExamRecord], path: Path, **kwargs: Any) -> Path:
        """Write JSON to *path* and return it."""
        path.write_bytes(self.format(records, **kwargs))
        return path

    @property
    def content_type(self) -> str:
        return "application/json"
