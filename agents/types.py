"""Shared type definitions for the scoring agents and the orchestrator."""
from __future__ import annotations

import datetime as dt
import math
from typing import Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

VisaType = Literal["tourist", "visit", "family", "work", "student", "business"]
VISA_TYPES: Tuple[str, ...] = ("tourist", "visit", "family", "work", "student", "business")

Language = Literal["en", "ur"]
LANGUAGE_ALIASES = {"english": "en", "urdu": "ur", "en": "en", "ur": "ur"}

Dimension = Literal["completeness", "clarity", "relevance", "confidence", "consistency"]
DIMENSIONS: Tuple[str, ...] = ("completeness", "clarity", "relevance", "confidence", "consistency")

AnswerType = Literal["text", "duration", "yes_no", "date", "number", "name", "address"]
RuleType = Literal[
    "contains",
    "not_contains",
    "min_length",
    "max_length",
    "pattern",
    "duration_plausibility",
    "cross_answer_consistency",
]


def normalize_language(value: object) -> str:
    key = str(value or "en").strip().lower()
    if key not in LANGUAGE_ALIASES:
        raise ValueError(f"Unsupported language '{value}'")
    return LANGUAGE_ALIASES[key]


def round_half_up(value: float) -> int:
    """Round halves away from zero for non-negative scores (52.5 -> 53)."""

    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    return max(0, min(100, int(round_half_up(value))))


# ----------------------------------------------------------------------
# Question catalog
# ----------------------------------------------------------------------
class ScoringRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: RuleType
    value: Union[int, float, str]
    points: int
    category: Dimension
    reason: Optional[str] = None


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    translations: Dict[str, str] = Field(default_factory=dict)
    category: Literal["universal", "visa_specific"]
    visa_types: Union[Literal["all"], Tuple[VisaType, ...]] = "all"
    answer_type: AnswerType = "text"
    rules: Tuple[ScoringRule, ...] = ()
    green_flags: Tuple[str, ...] = ()
    red_flags: Tuple[str, ...] = ()

    def applies_to(self, visa_type: str) -> bool:
        return self.visa_types == "all" or visa_type in self.visa_types

    def text_for(self, language: str) -> str:
        return self.translations.get(language) or self.text


class DurationExpectation(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int
    max: int
    unit: Literal["days", "weeks", "months", "years"] = "days"


# ----------------------------------------------------------------------
# Scores & feedback
# ----------------------------------------------------------------------
class Feedback(BaseModel):
    """Feedback text in one language with optional translations keyed by language."""

    model_config = ConfigDict(frozen=True)

    text: str
    language: Language = "en"
    alternates: Dict[str, str] = Field(default_factory=dict)

    def render(self, language: str) -> str:
        if language == self.language:
            return self.text
        return self.alternates.get(language) or self.text


class ScoreBreakdown(BaseModel):
    """Five clamped dimensions plus their rounded mean; build via :meth:`build`."""

    model_config = ConfigDict(frozen=True)

    completeness: int = Field(ge=0, le=100)
    clarity: int = Field(ge=0, le=100)
    relevance: int = Field(ge=0, le=100)
    confidence: int = Field(ge=0, le=100)
    consistency: int = Field(ge=0, le=100)
    total: int = Field(ge=0, le=100)

    @classmethod
    def build(
        cls,
        *,
        completeness: float,
        clarity: float,
        relevance: float,
        confidence: float,
        consistency: float,
    ) -> "ScoreBreakdown":
        dims = {
            "completeness": clamp_score(completeness),
            "clarity": clamp_score(clarity),
            "relevance": clamp_score(relevance),
            "confidence": clamp_score(confidence),
            "consistency": clamp_score(consistency),
        }
        total = round_half_up(sum(dims.values()) / len(dims))
        return cls(total=total, **dims)

    @classmethod
    def uniform(cls, value: float) -> "ScoreBreakdown":
        return cls.build(
            completeness=value,
            clarity=value,
            relevance=value,
            confidence=value,
            consistency=value,
        )

    def dimensions(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in DIMENSIONS}


class ScoredAnswer(BaseModel):  # Rule-based scorer output
    scores: ScoreBreakdown
    feedback: Feedback
    flagged: bool = False
    flag_reason: Optional[str] = None


class QuestionAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: str
    question_text: str
    answer: str
    response_time_ms: int = 0
    scores: ScoreBreakdown
    flagged: bool = False
    flag_reason: Optional[str] = None
    feedback: Feedback
    ai_powered: bool = False


class FactCheck(BaseModel):
    verified: bool = True
    issues: List[str] = Field(default_factory=list)


class AnswerEvaluation(BaseModel):
    score: int = Field(ge=0, le=100)
    breakdown: ScoreBreakdown
    is_valid: bool = True
    feedback: Feedback
    flags: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    fact_check: FactCheck = Field(default_factory=FactCheck)
    spelling_errors: List[str] = Field(default_factory=list)
    consistency_issues: List[str] = Field(default_factory=list)
    ai_powered: bool = False


class FinalAssessment(BaseModel):
    score: int = Field(ge=0, le=100)
    passed: bool
    feedback: Feedback
    improvements: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    ai_powered: bool = False


# ----------------------------------------------------------------------
# Context handed to the evaluator and the aggregator
# ----------------------------------------------------------------------
class PriorExchange(BaseModel):
    question_id: str
    question: str
    answer: str


class InterviewContext(BaseModel):
    visa_type: VisaType
    destination_country: str
    language: Language = "en"
    previous: List[PriorExchange] = Field(default_factory=list)

    @field_validator("language", mode="before")
    @classmethod
    def _language(cls, value: object) -> str:
        return normalize_language(value)


# ----------------------------------------------------------------------
# Sessions
# ----------------------------------------------------------------------
class InterviewSession(BaseModel):
    id: str
    visa_type: VisaType
    destination_country: str
    language: Language = "en"
    status: Literal["in_progress", "completed"] = "in_progress"
    start_time: dt.datetime
    end_time: Optional[dt.datetime] = None
    total_questions: int
    answers: List[QuestionAnswer] = Field(default_factory=list)
    overall_score: int = 0
    passed: bool = False
    feedback: Optional[Feedback] = None
    improvements: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    holistic_score: Optional[int] = None
    ai_powered: bool = False

    def flagged_count(self) -> int:
        return sum(1 for answer in self.answers if answer.flagged)

    def duration_seconds(self) -> int:
        end = self.end_time or dt.datetime.now(dt.timezone.utc)
        return max(0, int((end - self.start_time).total_seconds()))


class SessionSummary(BaseModel):
    session_id: str
    visa_type: str
    destination_country: str
    start_time: str
    overall_score: int
    passed: bool
    ai_powered: bool = False


__all__ = [
    "AnswerEvaluation",
    "AnswerType",
    "DIMENSIONS",
    "Dimension",
    "DurationExpectation",
    "FactCheck",
    "Feedback",
    "FinalAssessment",
    "InterviewContext",
    "InterviewSession",
    "LANGUAGE_ALIASES",
    "Language",
    "PriorExchange",
    "Question",
    "QuestionAnswer",
    "RuleType",
    "ScoreBreakdown",
    "ScoredAnswer",
    "ScoringRule",
    "SessionSummary",
    "VISA_TYPES",
    "VisaType",
    "clamp_score",
    "normalize_language",
    "round_half_up",
]
