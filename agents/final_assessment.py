"""Holistic end-of-interview assessment."""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agents.answer_evaluator import AnswerEvaluator
from agents.prompts import build_assessment_prompt
from agents.types import Feedback, FinalAssessment, InterviewContext, clamp_score
from config.settings import settings
from llm_gateway import LlmGatewayError, extract_json_object
from translation import Translator, compose_feedback

logger = logging.getLogger(__name__)

NO_AI_ASSESSMENT = "[No AI] Interview completed. AI evaluation was not available for this session."


class AiAssessmentPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", allow_inf_nan=False)

    overall_score: float = Field(default=50, alias="overallScore")
    feedback: str = "Assessment complete."
    feedback_urdu: Optional[str] = Field(default=None, alias="feedbackUrdu")
    improvements: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)

    @field_validator("overall_score", mode="before")
    @classmethod
    def _score_default(cls, value: Any) -> Any:
        return 50 if value is None else value

    @field_validator("feedback", mode="before")
    @classmethod
    def _feedback_default(cls, value: Any) -> Any:
        return value or "Assessment complete."

    @field_validator("improvements", "strengths", "concerns", mode="before")
    @classmethod
    def _list_default(cls, value: Any) -> Any:
        return value or []


def fallback_assessment(
    context: InterviewContext,
    pass_threshold: int,
    translator: Optional[Translator] = None,
) -> FinalAssessment:
    """Average-answer-length heuristic used when the model is not consulted."""

    lengths = [len(item.answer.strip()) for item in context.previous]
    average = sum(lengths) / len(lengths) if lengths else 0.0
    if average > 50:
        score = 65
    elif average > 30:
        score = 55
    else:
        score = 45
    return FinalAssessment(
        score=score,
        passed=score >= pass_threshold,
        feedback=compose_feedback([NO_AI_ASSESSMENT], translator),
        improvements=["Provide more detailed answers", "Be more specific about dates and names"],
        strengths=["Completed all questions"],
        concerns=["Answers were too brief"] if average < 30 else [],
        ai_powered=False,
    )


class FinalAssessmentAggregator:
    def __init__(
        self,
        evaluator: AnswerEvaluator,
        *,
        pass_threshold: Optional[int] = None,
        translator: Optional[Translator] = None,
    ) -> None:
        self.evaluator = evaluator
        self.pass_threshold = settings.PASS_THRESHOLD if pass_threshold is None else pass_threshold
        self.translator = translator

    def assess(self, context: InterviewContext) -> FinalAssessment:
        """Ask the model for a transcript-wide verdict, falling back to the length heuristic.

        ``passed`` is always judged against the configured pass threshold, not
        the model's own verdict.
        """

        reply = self.evaluator.complete(build_assessment_prompt(context))
        if reply is None:
            return fallback_assessment(context, self.pass_threshold, self.translator)
        try:
            payload = AiAssessmentPayload.model_validate(extract_json_object(reply))
            score = clamp_score(payload.overall_score)
        except (LlmGatewayError, ValueError) as exc:
            logger.warning("Unusable AI assessment: %s", exc)
            return fallback_assessment(context, self.pass_threshold, self.translator)

        alternates = {}
        if payload.feedback_urdu and context.language != "ur":
            alternates["ur"] = payload.feedback_urdu
        return FinalAssessment(
            score=score,
            passed=score >= self.pass_threshold,
            feedback=Feedback(text=payload.feedback, language=context.language, alternates=alternates),
            improvements=list(payload.improvements),
            strengths=list(payload.strengths),
            concerns=list(payload.concerns),
            ai_powered=True,
        )


__all__ = ["AiAssessmentPayload", "FinalAssessmentAggregator", "fallback_assessment"]
