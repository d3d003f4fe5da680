"""Interview session lifecycle: start, answer, end."""
from __future__ import annotations

import datetime as dt
import logging
import random
import uuid
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from agents.answer_evaluator import AnswerEvaluator
from agents.final_assessment import FinalAssessmentAggregator
from agents.rule_scorer import RuleBasedScorer
from agents.types import (
    VISA_TYPES,
    AnswerEvaluation,
    Feedback,
    InterviewContext,
    InterviewSession,
    PriorExchange,
    Question,
    QuestionAnswer,
    ScoreBreakdown,
    ScoredAnswer,
    SessionSummary,
    normalize_language,
)
from config.settings import Settings, settings as default_settings
from observability import log_event, span
from question_bank import QuestionBank
from services.errors import InvalidInputError, InvalidVisaTypeError, SessionCompleteError, SessionNotFoundError
from services.scoring import (
    dimension_averages,
    improvements_for,
    merge_unique,
    overall_score,
    session_feedback,
    strengths_for,
)
from services.sessions import ActiveSession, SessionStore
from storage.sessions import SessionRepository
from translation import Translator

logger = logging.getLogger(__name__)


class StartResult(BaseModel):
    session_id: str
    question: Question
    question_number: int = 1
    total_questions: int
    language: str


class AnswerResult(BaseModel):
    question_number: int
    scores: ScoreBreakdown
    feedback: Feedback
    flagged: bool
    flag_reason: Optional[str] = None
    ai_powered: bool = False
    next_question: Optional[Question] = None
    is_complete: bool = False


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class InterviewOrchestrator:
    """Drives sessions through in_progress -> completed.

    Every collaborator is injected; calls for one session are serialized by
    the session's lock while different sessions proceed independently.
    """

    def __init__(
        self,
        *,
        bank: QuestionBank,
        store: SessionStore,
        evaluator: AnswerEvaluator,
        scorer: Optional[RuleBasedScorer] = None,
        aggregator: Optional[FinalAssessmentAggregator] = None,
        repository: Optional[SessionRepository] = None,
        translator: Optional[Translator] = None,
        config: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        now: Callable[[], dt.datetime] = _utcnow,
    ) -> None:
        self.config = config or default_settings
        self.bank = bank
        self.store = store
        self.evaluator = evaluator
        self.translator = translator
        self.scorer = scorer or RuleBasedScorer(bank.duration_expectations, translator=translator)
        self.aggregator = aggregator or FinalAssessmentAggregator(
            evaluator, pass_threshold=self.config.PASS_THRESHOLD, translator=translator
        )
        self.repository = repository
        self.rng = rng
        self._now = now

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, visa_type: str, destination_country: str, language: Optional[str] = None) -> StartResult:
        visa_key = (visa_type or "").strip().lower()
        if visa_key not in VISA_TYPES:
            raise InvalidVisaTypeError(visa_type, VISA_TYPES)
        destination = (destination_country or "").strip()
        if not destination:
            raise InvalidInputError("Destination country is required")
        try:
            lang = normalize_language(language or self.config.DEFAULT_LANGUAGE)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc

        questions = self.bank.questions_for_visa_type(
            visa_key, self.config.QUESTIONS_PER_SESSION, rng=self.rng
        )
        if not questions:
            raise InvalidInputError(f"No questions available for visa type '{visa_key}'")

        session = InterviewSession(
            id=str(uuid.uuid4()),
            visa_type=visa_key,
            destination_country=destination,
            language=lang,
            start_time=self._now(),
            total_questions=len(questions),
        )
        self.store.add(ActiveSession(session=session, questions=list(questions)))
        log_event(
            "session_started",
            session.id,
            visa_type=visa_key,
            destination=destination,
            language=lang,
            questions=[q.id for q in questions],
        )
        return StartResult(
            session_id=session.id,
            question=questions[0],
            total_questions=len(questions),
            language=lang,
        )

    def submit_answer(self, session_id: str, answer: str, response_time_ms: int = 0) -> AnswerResult:
        active = self.store.get(session_id)
        with active.lock:
            if active.session.status == "completed":
                raise SessionNotFoundError(session_id)
            question = active.current_question
            if question is None:
                raise SessionCompleteError(session_id)
            session = active.session
            context = self._context(active)
            timings: Dict[str, int] = {}

            with span(timings, "rule_ms"):
                rule = self.scorer.score(question, answer, session.visa_type, active.previous_answers)
            with span(timings, "ai_ms"):
                evaluation = self.evaluator.evaluate_answer(question, answer, context)
            record = self._record(question, answer, response_time_ms, rule, evaluation)

            active.previous_answers[question.id] = self.scorer.engine.normalize(answer)
            session.answers.append(record)
            active.cursor += 1
            next_question = active.current_question

        log_event(
            "answer_scored",
            session_id,
            question_id=question.id,
            score=record.scores.total,
            flagged=record.flagged,
            ai=record.ai_powered,
            **timings,
        )
        if not record.ai_powered and self.evaluator.generator is not None:
            log_event("ai_fallback", session_id, question_id=question.id)
        if record.flagged:
            logger.info("Answer flagged session=%s question=%s reason=%s", session_id, question.id, record.flag_reason)
        logger.debug("Answer preview session=%s question=%s text=%.40r", session_id, question.id, answer)
        return AnswerResult(
            question_number=len(session.answers),
            scores=record.scores,
            feedback=record.feedback,
            flagged=record.flagged,
            flag_reason=record.flag_reason,
            ai_powered=record.ai_powered,
            next_question=next_question,
            is_complete=next_question is None,
        )

    def end(self, session_id: str) -> InterviewSession:
        active = self.store.get(session_id)
        with active.lock:
            session = active.session
            if session.status == "completed":
                raise SessionNotFoundError(session_id)
            session.end_time = self._now()
            answers = session.answers

            score = overall_score(answers)
            passed = score >= self.config.PASS_THRESHOLD
            averages = dimension_averages(answers)
            improvements = improvements_for(averages, session.flagged_count()) if answers else []
            strengths = strengths_for(averages) if answers else []
            concerns = [answer.flag_reason for answer in answers if answer.flagged and answer.flag_reason]

            assessment = None
            if answers and self.config.HOLISTIC_ASSESSMENT_ENABLED:
                assessment = self.aggregator.assess(self._context(active))

            session.overall_score = score
            session.passed = passed
            session.feedback = session_feedback(score, passed, self.translator)
            if assessment is not None:
                session.holistic_score = assessment.score
                improvements = merge_unique(improvements, assessment.improvements)
                strengths = merge_unique(strengths, assessment.strengths)
                concerns = merge_unique(concerns, assessment.concerns)
            session.improvements = improvements
            session.strengths = strengths
            session.concerns = merge_unique(concerns)
            session.ai_powered = any(answer.ai_powered for answer in answers) or bool(
                assessment is not None and assessment.ai_powered
            )
            session.status = "completed"
            self.store.remove(session_id)

        log_event(
            "session_completed",
            session_id,
            outcome="passed" if session.passed else "failed",
            score=session.overall_score,
            answered=len(session.answers),
            ai=session.ai_powered,
        )
        self._persist(session)
        return session

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def current_question(self, session_id: str) -> Optional[Question]:
        return self.store.get(session_id).current_question

    def progress(self, session_id: str) -> Dict[str, Any]:
        active = self.store.get(session_id)
        return {
            "question": active.current_question,
            "question_number": active.cursor + 1,
            "total_questions": len(active.questions),
            "language": active.session.language,
        }

    def history(self, limit: int = 10) -> List[SessionSummary]:
        if self.repository is None:
            return []
        try:
            return self.repository.list_recent_sessions(limit)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not load interview history: %s", exc)
            return []

    def ai_status(self) -> Dict[str, Any]:
        return self.evaluator.status()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _context(self, active: ActiveSession) -> InterviewContext:
        session = active.session
        return InterviewContext(
            visa_type=session.visa_type,
            destination_country=session.destination_country,
            language=session.language,
            previous=[
                PriorExchange(question_id=a.question_id, question=a.question_text, answer=a.answer)
                for a in session.answers
            ],
        )

    def _record(
        self,
        question: Question,
        answer: str,
        response_time_ms: int,
        rule: ScoredAnswer,
        evaluation: AnswerEvaluation,
    ) -> QuestionAnswer:
        if evaluation.ai_powered:
            ai_reasons = list(evaluation.flags)
            if not evaluation.is_valid:
                ai_reasons.append("Answer judged invalid")
            flag_reason = "; ".join([r for r in [rule.flag_reason] if r] + ai_reasons) or None
            return QuestionAnswer(
                question_id=question.id,
                question_text=question.text,
                answer=answer,
                response_time_ms=response_time_ms,
                scores=evaluation.breakdown,
                flagged=rule.flagged or bool(ai_reasons),
                flag_reason=flag_reason,
                feedback=evaluation.feedback,
                ai_powered=True,
            )
        return QuestionAnswer(
            question_id=question.id,
            question_text=question.text,
            answer=answer,
            response_time_ms=response_time_ms,
            scores=rule.scores,
            flagged=rule.flagged,
            flag_reason=rule.flag_reason,
            feedback=rule.feedback,
            ai_powered=False,
        )

    def _persist(self, session: InterviewSession) -> None:
        if self.repository is None:
            return
        try:
            self.repository.save_completed_session(session)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to persist session %s: %s", session.id, exc)


__all__ = ["AnswerResult", "InterviewOrchestrator", "StartResult"]
