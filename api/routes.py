"""FastAPI routes for mock immigration interviews."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request

from agents.types import Question
from api.schemas import (
    AiStatusResp,
    AnswerReq,
    AnswerResp,
    EndReq,
    HistoryItem,
    HistoryResp,
    QuestionPayload,
    ScoresPayload,
    SessionResult,
    StartReq,
    StartResp,
    VisaTypeInfo,
)
from services.errors import InvalidInputError, SessionCompleteError, SessionNotFoundError
from services.orchestrator import InterviewOrchestrator
from services.scoring import dimension_averages, format_duration


router = APIRouter(prefix="/api/interview")

VISA_TYPE_INFO: List[VisaTypeInfo] = [
    VisaTypeInfo(type="tourist", label="Tourist Visa", label_urdu="سیاحتی ویزا", description="For tourism and sightseeing"),
    VisaTypeInfo(type="visit", label="Visit Visa", label_urdu="وزٹ ویزا", description="For visiting family or friends"),
    VisaTypeInfo(type="family", label="Family Visa", label_urdu="فیملی ویزا", description="For joining family members"),
    VisaTypeInfo(type="work", label="Work Visa", label_urdu="ورک ویزا", description="For employment abroad"),
    VisaTypeInfo(type="student", label="Student Visa", label_urdu="اسٹوڈنٹ ویزا", description="For studying abroad"),
    VisaTypeInfo(type="business", label="Business Visa", label_urdu="بزنس ویزا", description="For business activities"),
]


def _orchestrator(request: Request) -> InterviewOrchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Interview service is not ready")
    return orchestrator


def _question_payload(question: Question, number: int, total: int, language: str) -> QuestionPayload:
    localized = question.text_for(language) if language != "en" else None
    return QuestionPayload(
        id=question.id,
        text=question.text,
        text_localized=localized,
        answer_type=question.answer_type,
        question_number=number,
        total_questions=total,
    )


@router.post("/start", response_model=StartResp)
def start(req: StartReq, request: Request) -> StartResp:
    orchestrator = _orchestrator(request)
    try:
        result = orchestrator.start(req.visa_type, req.destination_country, req.language)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return StartResp(
        session_id=result.session_id,
        language=result.language,
        question=_question_payload(result.question, 1, result.total_questions, result.language),
    )


@router.post("/answer", response_model=AnswerResp)
def answer(req: AnswerReq, request: Request) -> AnswerResp:
    orchestrator = _orchestrator(request)
    try:
        progress = orchestrator.progress(req.session_id)
        result = orchestrator.submit_answer(req.session_id, req.answer.strip(), req.response_time_ms)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except SessionCompleteError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    language = progress["language"]
    next_question = None
    if result.next_question is not None:
        next_question = _question_payload(
            result.next_question, result.question_number + 1, progress["total_questions"], language
        )
    feedback = result.feedback
    return AnswerResp(
        question_number=result.question_number,
        scores=ScoresPayload(**result.scores.model_dump()),
        feedback=feedback.render(language),
        feedback_translations=dict(feedback.alternates),
        flagged=result.flagged,
        flag_reason=result.flag_reason,
        ai_powered=result.ai_powered,
        next_question=next_question,
        is_complete=result.is_complete,
    )


@router.post("/end", response_model=SessionResult)
def end(req: EndReq, request: Request) -> SessionResult:
    orchestrator = _orchestrator(request)
    try:
        session = orchestrator.end(req.session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return SessionResult(
        session_id=session.id,
        visa_type=session.visa_type,
        destination=session.destination_country,
        language=session.language,
        total_questions=session.total_questions,
        questions_answered=len(session.answers),
        overall_score=session.overall_score,
        passed=session.passed,
        holistic_score=session.holistic_score,
        feedback=session.feedback.render(session.language) if session.feedback else "",
        improvements=session.improvements,
        strengths=session.strengths,
        concerns=session.concerns,
        score_breakdown=dimension_averages(session.answers),
        flagged_answers=session.flagged_count(),
        duration=format_duration(session.duration_seconds()),
        ai_powered=session.ai_powered,
    )


@router.get("/history", response_model=HistoryResp)
def history(request: Request, limit: int = Query(default=10, ge=1, le=100)) -> HistoryResp:
    summaries = _orchestrator(request).history(limit)
    return HistoryResp(
        history=[
            HistoryItem(
                session_id=item.session_id,
                visa_type=item.visa_type,
                destination_country=item.destination_country,
                date=item.start_time,
                score=item.overall_score,
                passed=item.passed,
                ai_powered=item.ai_powered,
            )
            for item in summaries
        ]
    )


@router.get("/visa-types", response_model=List[VisaTypeInfo])
def visa_types() -> List[VisaTypeInfo]:
    return VISA_TYPE_INFO


@router.get("/sessions/{session_id}/question", response_model=Optional[QuestionPayload])
def current_question(session_id: str, request: Request) -> Optional[QuestionPayload]:
    orchestrator = _orchestrator(request)
    try:
        progress = orchestrator.progress(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    question = progress["question"]
    if question is None:
        return None
    return _question_payload(question, progress["question_number"], progress["total_questions"], progress["language"])


@router.get("/ai-status", response_model=AiStatusResp)
def ai_status(request: Request) -> AiStatusResp:
    return AiStatusResp(**_orchestrator(request).ai_status())
