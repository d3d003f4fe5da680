"""Pydantic schemas for the interview rehearsal API."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class StartReq(BaseModel):
    visa_type: str
    destination_country: str
    language: Optional[str] = None


class AnswerReq(BaseModel):
    session_id: str
    answer: str = Field(min_length=1)
    response_time_ms: int = Field(default=0, ge=0)


class EndReq(BaseModel):
    session_id: str


class QuestionPayload(BaseModel):
    id: str
    text: str
    text_localized: Optional[str] = None
    answer_type: str
    question_number: int
    total_questions: int


class ScoresPayload(BaseModel):
    completeness: int
    clarity: int
    relevance: int
    confidence: int
    consistency: int
    total: int


class StartResp(BaseModel):
    session_id: str
    language: str
    question: QuestionPayload


class AnswerResp(BaseModel):
    question_number: int
    scores: ScoresPayload
    feedback: str
    feedback_translations: Dict[str, str] = Field(default_factory=dict)
    flagged: bool
    flag_reason: Optional[str] = None
    ai_powered: bool = False
    next_question: Optional[QuestionPayload] = None
    is_complete: bool


class SessionResult(BaseModel):
    session_id: str
    visa_type: str
    destination: str
    language: str
    total_questions: int
    questions_answered: int
    overall_score: int
    passed: bool
    holistic_score: Optional[int] = None
    feedback: str
    improvements: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    score_breakdown: Dict[str, int] = Field(default_factory=dict)
    flagged_answers: int
    duration: str
    ai_powered: bool = False


class HistoryItem(BaseModel):
    session_id: str
    visa_type: str
    destination_country: str
    date: str
    score: int
    passed: bool
    ai_powered: bool = False


class HistoryResp(BaseModel):
    history: List[HistoryItem] = Field(default_factory=list)


class VisaTypeInfo(BaseModel):
    type: str
    label: str
    label_urdu: str
    description: str


class AiStatusResp(BaseModel):
    available: bool
    configured: bool
    enabled: bool
    rate_limited: bool
    retry_in_seconds: Optional[float] = None
    model: Optional[str] = None
