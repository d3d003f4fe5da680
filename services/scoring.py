"""Per-session score aggregation helpers."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from agents.types import DIMENSIONS, Feedback, QuestionAnswer, round_half_up
from translation import Translator, compose_feedback

IMPROVEMENT_THRESHOLD = 70
STRENGTH_THRESHOLD = 80
FLAGGED_REVIEW_LIMIT = 2

DIMENSION_IMPROVEMENTS = {
    "completeness": "Provide more complete answers with specific details.",
    "clarity": "Be clearer and more direct in your responses.",
    "relevance": "Make sure your answers directly address the questions asked.",
    "confidence": 'Speak with more confidence. Avoid filler words like "maybe" or "I think".',
    "consistency": "Ensure your answers are consistent throughout the interview.",
}

DIMENSION_STRENGTHS = {
    "completeness": "Your answers were complete and specific.",
    "clarity": "You answered clearly and directly.",
    "relevance": "Your answers stayed on the questions asked.",
    "confidence": "You spoke with confidence.",
    "consistency": "Your story was consistent from start to finish.",
}

PASSED_FEEDBACK = (
    "Excellent performance! You scored {score}% and demonstrated good preparation "
    "for your immigration interview."
)
FAIR_FEEDBACK = "Good effort! You scored {score}%. With some improvements, you'll be well prepared for your interview."
WEAK_FEEDBACK = "You scored {score}%. More practice is recommended before your actual interview."


def overall_score(answers: Sequence[QuestionAnswer]) -> int:
    """Rounded mean of per-answer totals; 0 for an empty interview."""

    if not answers:
        return 0
    return round_half_up(sum(answer.scores.total for answer in answers) / len(answers))


def dimension_averages(answers: Sequence[QuestionAnswer]) -> Dict[str, int]:
    if not answers:
        return {name: 0 for name in DIMENSIONS}
    return {
        name: round_half_up(sum(getattr(answer.scores, name) for answer in answers) / len(answers))
        for name in DIMENSIONS
    }


def improvements_for(averages: Dict[str, int], flagged_count: int) -> List[str]:
    improvements = [
        DIMENSION_IMPROVEMENTS[name]
        for name in DIMENSIONS
        if averages.get(name, 0) < IMPROVEMENT_THRESHOLD
    ]
    if flagged_count > FLAGGED_REVIEW_LIMIT:
        improvements.append(
            f"{flagged_count} of your answers raised potential concerns. Review these carefully."
        )
    return improvements


def strengths_for(averages: Dict[str, int]) -> List[str]:
    return [DIMENSION_STRENGTHS[name] for name in DIMENSIONS if averages.get(name, 0) >= STRENGTH_THRESHOLD]


def session_feedback(score: int, passed: bool, translator: Optional[Translator] = None) -> Feedback:
    if passed:
        template = PASSED_FEEDBACK
    elif score >= 60:
        template = FAIR_FEEDBACK
    else:
        template = WEAK_FEEDBACK
    return compose_feedback([template], translator, score=score)


def merge_unique(*groups: Iterable[str]) -> List[str]:
    merged: List[str] = []
    seen = set()
    for group in groups:
        for item in group:
            key = item.strip().lower()
            if key and key not in seen:
                seen.add(key)
                merged.append(item.strip())
    return merged


def format_duration(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


__all__ = [
    "DIMENSION_IMPROVEMENTS",
    "dimension_averages",
    "format_duration",
    "improvements_for",
    "merge_unique",
    "overall_score",
    "session_feedback",
    "strengths_for",
]
