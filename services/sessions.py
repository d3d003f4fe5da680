"""In-memory store for interviews that are still in progress."""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from agents.types import InterviewSession, Question
from config.settings import settings
from observability import log_event
from services.errors import SessionNotFoundError


@dataclass
class ActiveSession:
    """Mutable per-session state owned by the orchestrator."""

    session: InterviewSession
    questions: List[Question]
    cursor: int = 0
    previous_answers: Dict[str, str] = field(default_factory=dict)
    last_touched: float = 0.0
    lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def current_question(self) -> Optional[Question]:
        if self.cursor >= len(self.questions):
            return None
        return self.questions[self.cursor]


class SessionStore:
    """Thread-safe map of active sessions with idle expiry.

    ``sweep`` is driven externally (the API runs it on a timer); reads refresh
    a session's idle clock.
    """

    def __init__(self, idle_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.idle_seconds = settings.SESSION_IDLE_SECONDS if idle_seconds is None else idle_seconds
        self._clock = clock
        self._sessions: Dict[str, ActiveSession] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._guard:
            return session_id in self._sessions

    def add(self, active: ActiveSession) -> None:
        active.last_touched = self._clock()
        with self._guard:
            self._sessions[active.session.id] = active

    def get(self, session_id: str) -> ActiveSession:
        with self._guard:
            active = self._sessions.get(session_id)
            if active is None:
                raise SessionNotFoundError(session_id)
            active.last_touched = self._clock()
            return active

    def remove(self, session_id: str) -> Optional[ActiveSession]:
        with self._guard:
            return self._sessions.pop(session_id, None)

    def sweep(self, now: Optional[float] = None) -> List[str]:
        """Drop sessions idle for longer than ``idle_seconds``; return their ids."""

        now = self._clock() if now is None else now
        with self._guard:
            expired = [
                session_id
                for session_id, active in self._sessions.items()
                if now - active.last_touched > self.idle_seconds
            ]
            for session_id in expired:
                del self._sessions[session_id]
        for session_id in expired:
            log_event("session_expired", session_id, idle_s=self.idle_seconds)
        return expired

    def clear(self) -> None:
        with self._guard:
            self._sessions.clear()


__all__ = ["ActiveSession", "SessionStore"]
