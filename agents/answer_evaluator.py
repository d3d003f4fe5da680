"""Model-assisted answer evaluation with rate-limit cooldown and a length fallback."""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agents.prompts import build_answer_prompt
from agents.types import AnswerEvaluation, FactCheck, Feedback, InterviewContext, Question, ScoreBreakdown, clamp_score
from config.settings import settings
from llm_gateway import Generator, LlmGatewayError, RateLimitError, extract_json_object
from translation import Translator, compose_feedback

logger = logging.getLogger(__name__)

NO_AI_RECORDED = "[No AI] Answer recorded. AI evaluation unavailable."
NO_AI_MORE_DETAIL = "[No AI] Please provide more detail."


class AiAnswerPayload(BaseModel):
    """JSON reply requested by the answer prompt; missing fields take defaults."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", allow_inf_nan=False)

    score: float = 50
    completeness: Optional[float] = None
    clarity: Optional[float] = None
    relevance: Optional[float] = None
    confidence: Optional[float] = None
    consistency: Optional[float] = None
    is_valid: bool = Field(default=True, alias="isValid")
    feedback: str = "Answer evaluated."
    feedback_urdu: Optional[str] = Field(default=None, alias="feedbackUrdu")
    flags: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    fact_check: FactCheck = Field(default_factory=FactCheck, alias="factCheck")
    spelling_errors: List[str] = Field(default_factory=list, alias="spellingErrors")
    consistency_issues: List[str] = Field(default_factory=list, alias="consistencyIssues")

    @field_validator("score", mode="before")
    @classmethod
    def _score_default(cls, value: Any) -> Any:
        return 50 if value is None else value

    @field_validator("is_valid", mode="before")
    @classmethod
    def _valid_unless_false(cls, value: Any) -> bool:
        return value is not False

    @field_validator("feedback", mode="before")
    @classmethod
    def _feedback_default(cls, value: Any) -> Any:
        return value or "Answer evaluated."

    @field_validator("fact_check", mode="before")
    @classmethod
    def _fact_check_default(cls, value: Any) -> Any:
        return value or {}

    @field_validator("flags", "suggestions", "spelling_errors", "consistency_issues", mode="before")
    @classmethod
    def _list_default(cls, value: Any) -> Any:
        return value or []

    def to_evaluation(self, language: str) -> AnswerEvaluation:
        dims: Dict[str, float] = {}
        for name in ("completeness", "clarity", "relevance", "confidence", "consistency"):
            value = getattr(self, name)
            dims[name] = self.score if value is None else value
        alternates = {}
        if self.feedback_urdu and language != "ur":
            alternates["ur"] = self.feedback_urdu
        return AnswerEvaluation(
            score=clamp_score(self.score),
            breakdown=ScoreBreakdown.build(**dims),
            is_valid=self.is_valid,
            feedback=Feedback(text=self.feedback, language=language, alternates=alternates),
            flags=list(self.flags),
            suggestions=list(self.suggestions),
            fact_check=self.fact_check,
            spelling_errors=list(self.spelling_errors),
            consistency_issues=list(self.consistency_issues),
            ai_powered=True,
        )


def fallback_evaluation(answer: str, translator: Optional[Translator] = None) -> AnswerEvaluation:
    """Length-only estimate used whenever the model cannot be consulted."""

    length = len((answer or "").strip())
    if length > 50:
        score = 70
    elif length > 20:
        score = 50
    else:
        score = 30
    message = NO_AI_RECORDED if length > 20 else NO_AI_MORE_DETAIL
    return AnswerEvaluation(
        score=score,
        breakdown=ScoreBreakdown.uniform(score),
        is_valid=length > 5,
        feedback=compose_feedback([message], translator),
        flags=["Answer too brief"] if length < 10 else [],
        suggestions=["Provide more specific details"] if length < 20 else [],
        ai_powered=False,
    )


class AnswerEvaluator:
    """Consults the model collaborator; never raises to its caller.

    After retries are exhausted on a rate limit the evaluator stays
    unavailable for ``cooldown_s`` seconds, during which no calls are made.
    """

    def __init__(
        self,
        generator: Optional[Generator] = None,
        *,
        enabled: Optional[bool] = None,
        max_retries: Optional[int] = None,
        cooldown_s: Optional[float] = None,
        max_backoff_s: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        translator: Optional[Translator] = None,
    ) -> None:
        self.generator = generator
        self.enabled = settings.AI_SCORING_ENABLED if enabled is None else enabled
        self.max_retries = settings.AI_MAX_RETRIES if max_retries is None else max_retries
        self.cooldown_s = settings.AI_COOLDOWN_SECONDS if cooldown_s is None else cooldown_s
        self.max_backoff_s = settings.AI_MAX_BACKOFF_SECONDS if max_backoff_s is None else max_backoff_s
        self._sleep = sleep
        self._clock = clock
        self.translator = translator
        self._lock = threading.Lock()
        self._rate_limited_until: Optional[float] = None

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------
    def rate_limited(self) -> bool:
        with self._lock:
            if self._rate_limited_until is None:
                return False
            if self._clock() >= self._rate_limited_until:
                self._rate_limited_until = None
                logger.info("AI rate-limit cooldown elapsed")
                return False
            return True

    def is_available(self) -> bool:
        return self.generator is not None and self.enabled and not self.rate_limited()

    def status(self) -> Dict[str, Any]:
        limited = self.rate_limited()
        retry_in = None
        with self._lock:
            if self._rate_limited_until is not None:
                retry_in = max(0.0, self._rate_limited_until - self._clock())
        return {
            "available": self.generator is not None and self.enabled and not limited,
            "configured": self.generator is not None,
            "enabled": self.enabled,
            "rate_limited": limited,
            "retry_in_seconds": retry_in,
            "model": getattr(self.generator, "active_model", None),
        }

    def _enter_cooldown(self) -> None:
        with self._lock:
            self._rate_limited_until = self._clock() + self.cooldown_s

    # ------------------------------------------------------------------
    # Model calls
    # ------------------------------------------------------------------
    def complete(self, prompt: str) -> Optional[str]:
        """Return the model reply, or ``None`` when unavailable or failed."""

        generator = self.generator
        if generator is None or not self.is_available():
            return None
        attempts = self.max_retries + 1
        for attempt in range(attempts):
            try:
                return generator(prompt)
            except RateLimitError as exc:
                if attempt + 1 < attempts:
                    if exc.retry_after is not None:
                        delay = min(exc.retry_after, self.max_backoff_s)
                    else:
                        delay = min(5.0 * (attempt + 1), self.max_backoff_s)
                    logger.warning(
                        "AI rate limited, retrying in %.1fs (attempt %d/%d)", delay, attempt + 1, attempts
                    )
                    self._sleep(delay)
                    continue
                self._enter_cooldown()
                logger.error("AI rate limit persisted; pausing AI scoring for %.0fs", self.cooldown_s)
                return None
            except LlmGatewayError as exc:
                logger.error("AI call failed: %s", exc)
                return None
            except Exception as exc:  # noqa: BLE001
                logger.error("AI collaborator raised unexpectedly: %s", exc)
                return None
        return None

    def evaluate_answer(self, question: Question, answer: str, context: InterviewContext) -> AnswerEvaluation:
        if not self.is_available():
            return fallback_evaluation(answer, self.translator)
        reply = self.complete(build_answer_prompt(question, answer, context))
        if reply is None:
            return fallback_evaluation(answer, self.translator)
        try:
            payload = AiAnswerPayload.model_validate(extract_json_object(reply))
            return payload.to_evaluation(context.language)
        except (LlmGatewayError, ValueError) as exc:
            logger.warning("Unusable AI evaluation for %s: %s", question.id, exc)
            return fallback_evaluation(answer, self.translator)


__all__ = ["AiAnswerPayload", "AnswerEvaluator", "fallback_evaluation"]
