"""Persistence helpers for completed interview sessions."""
from __future__ import annotations

import datetime as dt
import json
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, Field

from agents.types import InterviewSession, SessionSummary

from .sqlite import get_conn


class SessionRepository(Protocol):  # Persistence collaborator used by the orchestrator
    def save_completed_session(self, session: InterviewSession) -> None: ...

    def list_recent_sessions(self, limit: int = 10) -> List[SessionSummary]: ...


class CompletedSessionPayload(BaseModel):
    id: str
    visa_type: str
    destination_country: str
    language: str = "en"
    start_time: str
    end_time: Optional[str] = None
    total_questions: int
    questions_asked: List[Dict[str, Any]] = Field(default_factory=list)
    overall_score: int
    passed: bool
    holistic_score: Optional[int] = None
    feedback: Optional[str] = None
    improvements: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    ai_powered: bool = False

    @classmethod
    def from_session(cls, session: InterviewSession) -> "CompletedSessionPayload":
        return cls(
            id=session.id,
            visa_type=session.visa_type,
            destination_country=session.destination_country,
            language=session.language,
            start_time=session.start_time.isoformat(),
            end_time=session.end_time.isoformat() if session.end_time else None,
            total_questions=session.total_questions,
            questions_asked=[answer.model_dump(mode="json") for answer in session.answers],
            overall_score=session.overall_score,
            passed=session.passed,
            holistic_score=session.holistic_score,
            feedback=session.feedback.render(session.language) if session.feedback else None,
            improvements=list(session.improvements),
            strengths=list(session.strengths),
            concerns=list(session.concerns),
            ai_powered=session.ai_powered,
        )


def insert_completed_session(**data: Any) -> str:
    """Insert (or replace) a completed session row and return its id."""

    payload = CompletedSessionPayload(**data)
    created_at = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute(
            """INSERT OR REPLACE INTO interview_sessions
               (id, visa_type, destination_country, language, start_time, end_time, total_questions,
                questions_asked, overall_score, passed, holistic_score, feedback, improvements,
                strengths, concerns, ai_powered, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                payload.id,
                payload.visa_type,
                payload.destination_country,
                payload.language,
                payload.start_time,
                payload.end_time,
                payload.total_questions,
                json.dumps(payload.questions_asked, ensure_ascii=False),
                payload.overall_score,
                int(payload.passed),
                payload.holistic_score,
                payload.feedback,
                json.dumps(payload.improvements, ensure_ascii=False),
                json.dumps(payload.strengths, ensure_ascii=False),
                json.dumps(payload.concerns, ensure_ascii=False),
                int(payload.ai_powered),
                created_at,
            ),
        )
    return payload.id


def list_recent_sessions(limit: int = 10) -> List[SessionSummary]:
    """Most recent completed sessions first."""

    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute(
            """SELECT id, visa_type, destination_country, start_time, overall_score, passed, ai_powered
               FROM interview_sessions
               ORDER BY start_time DESC
               LIMIT ?""",
            (max(0, int(limit)),),
        )
        rows = cur.fetchall()
    return [
        SessionSummary(
            session_id=row[0],
            visa_type=row[1],
            destination_country=row[2],
            start_time=row[3],
            overall_score=row[4],
            passed=bool(row[5]),
            ai_powered=bool(row[6]),
        )
        for row in rows
    ]


class SqliteSessionRepository:
    """Repository over the ``interview_sessions`` table at ``settings.DB_PATH``."""

    def save_completed_session(self, session: InterviewSession) -> None:
        insert_completed_session(**CompletedSessionPayload.from_session(session).model_dump())

    def list_recent_sessions(self, limit: int = 10) -> List[SessionSummary]:
        return list_recent_sessions(limit)


__all__ = [
    "CompletedSessionPayload",
    "SessionRepository",
    "SqliteSessionRepository",
    "insert_completed_session",
    "list_recent_sessions",
]
