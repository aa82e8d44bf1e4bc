"""Per-session result set and its in-memory store."""

from __future__ import annotations

from izi_lab.session.merge import ExamSession, SessionStatus
from izi_lab.session.store import SessionStore

__all__ = ["ExamSession", "SessionStatus", "SessionStore"]
