"""In-memory session store: dict-backed, one process only."""

from __future__ import annotations

import logging
from typing import Optional

from izi_lab.exceptions import NotFoundError
from izi_lab.session.merge import ExamSession

log = logging.getLogger(__name__)


class SessionStore:
    """Keeps ``ExamSession`` objects in a plain dict keyed by session id."""

    def __init__(self) -> None:
        self._sessions: dict[str, ExamSession] = {}

    def create(self, session_id: Optional[str] = None) -> ExamSession:
        session = ExamSession(session_id)
        self._sessions[session.session_id] = session
        log.debug("Created session %s", session.session_id)
        return session

    def get(self, session_id: str) -> ExamSession:
        if session_id not in self._sessions:
            raise NotFoundError(f"Session not found: {session_id}")
        return self._sessions[session_id]

    def exists(self, session_id: str) -> bool:
        return session_id in self._sessions

    def drop(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def list_ids(self) -> list[str]:
        return sorted(self._sessions)
