"""Merge engine: the per-session, append-only result set."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import uuid
from enum import Enum
from typing import Optional, Sequence

from izi_lab.domains.lab.models import ExamRecord
from izi_lab.exceptions import NotFoundError
from izi_lab.models import InputSource

log = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    SUCCESS = "success"
    ERROR = "error"


class ExamSession:
    """Ordered records for one working session plus its UI-facing status.

    Records are only ever appended (with fresh ids), removed by id, or
    cleared.  Repeated uploads of the same patient produce separate records;
    there is no cross-batch deduplication.
    """

    def __init__(self, session_id: Optional[str] = None) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.status = SessionStatus.IDLE
        self.error_message: Optional[str] = None
        self._records: list[ExamRecord] = []
        self._pending: list[InputSource] = []
        self._issued_ids: set[str] = set()
        self.lock = asyncio.Lock()

    @classmethod
    def from_records(cls, records: Sequence[ExamRecord], session_id: Optional[str] = None) -> ExamSession:
        """Session seeded with already-identified records (ids are kept)."""
        session = cls(session_id)
        session._records = list(records)
        session._issued_ids = {r.id for r in records if r.id}
        if session._records:
            session.status = SessionStatus.SUCCESS
        return session

    @property
    def records(self) -> tuple[ExamRecord, ...]:
        return tuple(self._records)

    @property
    def pending(self) -> tuple[InputSource, ...]:
        return tuple(self._pending)

    @property
    def is_empty(self) -> bool:
        return not self._records

    def __len__(self) -> int:
        return len(self._records)

    def get(self, record_id: str) -> ExamRecord:
        for record in self._records:
            if record.id == record_id:
                return record
        raise NotFoundError(f"Record not found: {record_id}")

    def _new_id(self) -> str:
        record_id = uuid.uuid4().hex
        while record_id in self._issued_ids:
            record_id = uuid.uuid4().hex
        self._issued_ids.add(record_id)
        return record_id

    def append_batch(self, records: Sequence[ExamRecord]) -> list[ExamRecord]:
        """Assign fresh ids and append *records* after the existing ones."""
        added = [dataclasses.replace(record, id=self._new_id()) for record in records]
        self._records.extend(added)
        self.status = SessionStatus.SUCCESS
        self.error_message = None
        log.info("Session %s: appended %d record(s), total %d", self.session_id, len(added), len(self._records))
        return added

    def remove(self, record_id: str) -> None:
        """Drop one record; an emptied session returns to IDLE."""
        remaining = [r for r in self._records if r.id != record_id]
        if len(remaining) == len(self._records):
            raise NotFoundError(f"Record not found: {record_id}")
        self._records = remaining
        if not self._records:
            self.status = SessionStatus.IDLE
            self.error_message = None
        log.debug("Session %s: removed record %s", self.session_id, record_id)

    def reset(self) -> None:
        """Clear records, pending input and error state unconditionally."""
        self._records.clear()
        self._pending.clear()
        self.status = SessionStatus.IDLE
        self.error_message = None
        log.debug("Session %s: reset", self.session_id)

    def enqueue(self, source: InputSource) -> None:
        self._pending.append(source)

    def take_pending(self) -> list[InputSource]:
        """Return and clear the not-yet-processed inputs."""
        pending, self._pending = self._pending, []
        return pending

    def begin_analysis(self) -> None:
        self.status = SessionStatus.ANALYZING
        self.error_message = None

    def fail(self, message: str) -> None:
        """Record a failed batch; existing records stay untouched."""
        self.status = SessionStatus.ERROR
        self.error_message = message
        log.warning("Session %s: analysis failed", self.session_id)
