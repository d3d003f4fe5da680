"""Deterministic keyword and rule scoring for a single interview answer."""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Mapping, Optional, Set

from agents.consistency import ConsistencyChecker
from agents.durations import duration_in_days, expectation_days, extract_quantity, within_expectation
from agents.types import DIMENSIONS, DurationExpectation, Question, ScoreBreakdown, ScoredAnswer, ScoringRule
from config.lexicon import LexiconEngine, lexicon_engine
from translation import Translator, compose_feedback

logger = logging.getLogger(__name__)

NEUTRAL = 50
MIN_ANSWER_LENGTH = 2
DETAIL_LENGTH = 50
DETAIL_WORDS = 6

GREEN_FLAG_RELEVANCE = 25
GREEN_FLAG_COMPLETENESS = 10
RED_FLAG_RELEVANCE = -20
HEDGE_CONFIDENCE = -15
ASSERTIVE_CONFIDENCE = 35
DETAIL_COMPLETENESS = 20
DETAIL_CLARITY = 30
CONSISTENT_BONUS = 35

RETURN_TICKET_QUESTION = "u9"
RETURN_TICKET_VISAS = ("tourist", "visit")

MSG_TOO_SHORT = "Please provide a complete answer."
MSG_RED_FLAG = "This answer may raise concerns with immigration officers."
MSG_HEDGING = 'Try to sound more confident. Avoid words like "maybe" or "I think".'
MSG_NO_DURATION = "Please specify the duration clearly."
MSG_PERMANENT = "Indicating permanent stay is a red flag for most visa types."
MSG_TOURIST_TOO_LONG = "Tourist visa stays are typically short (few weeks). Long stays may raise concerns."
MSG_TOO_LONG = "This duration is longer than usual for this visa type and may raise concerns."
MSG_DURATION_OK = "Duration is appropriate."
MSG_YES_NO = "Please answer clearly with yes or no."
MSG_NO_AMOUNT = "Please give a specific amount."
MSG_RETURN_TICKET = "Having a return ticket is essential for tourist and visit visas."

STOPWORDS = frozenset({"that", "this", "with", "will", "have", "from", "they", "their", "there", "about", "would"})


def tier_message(total: int) -> str:
    if total >= 80:
        return "Good answer!"
    if total >= 60:
        return "Acceptable answer, but could be improved."
    return "This answer needs improvement."


def content_words(text: str) -> Set[str]:
    return {word for word in re.findall(r"[^\W\d_]{4,}", text) if word not in STOPWORDS}


class RuleBasedScorer:
    """Score an answer from keyword tables, answer-type checks and question rules."""

    def __init__(
        self,
        duration_expectations: Optional[Mapping[str, DurationExpectation]] = None,
        *,
        engine: Optional[LexiconEngine] = None,
        checker: Optional[ConsistencyChecker] = None,
        translator: Optional[Translator] = None,
    ) -> None:
        self.duration_expectations = dict(duration_expectations or {})
        self.engine = engine or lexicon_engine()
        self.checker = checker or ConsistencyChecker(self.engine)
        self.translator = translator

    def score(
        self,
        question: Question,
        answer: str,
        visa_type: str,
        previous_answers: Optional[Mapping[str, str]] = None,
    ) -> ScoredAnswer:
        previous_answers = previous_answers or {}
        engine = self.engine
        engine.reload_if_changed()
        lexicon = engine.lexicon
        text = engine.normalize(answer)

        dims: Dict[str, int] = dict.fromkeys(DIMENSIONS, NEUTRAL)
        parts: List[str] = []
        reasons: List[str] = []

        trivial = len(text) < MIN_ANSWER_LENGTH
        if trivial:
            dims["completeness"] = dims["clarity"] = 0
            reasons.append("Answer too short or empty")
            parts.append(MSG_TOO_SHORT)

        green = engine.find_phrases(text, question.green_flags)
        if green:
            dims["relevance"] += GREEN_FLAG_RELEVANCE * len(green)
            dims["completeness"] += GREEN_FLAG_COMPLETENESS

        red = engine.find_phrases(text, question.red_flags)
        if red:
            dims["relevance"] += RED_FLAG_RELEVANCE * len(red)
            reasons.append("Concerning response detected: " + ", ".join(red))
            parts.append(MSG_RED_FLAG)

        hedges = engine.find_phrases(text, lexicon.hedging)
        if hedges:
            dims["confidence"] += HEDGE_CONFIDENCE * len(hedges)
            parts.append(MSG_HEDGING)
        elif not trivial:
            dims["confidence"] += ASSERTIVE_CONFIDENCE

        if not trivial and len(text) >= DETAIL_LENGTH and len(text.split()) >= DETAIL_WORDS:
            dims["completeness"] += DETAIL_COMPLETENESS
            dims["clarity"] += DETAIL_CLARITY

        if question.answer_type == "duration":
            self._check_duration(text, visa_type, dims, parts, reasons)
        elif question.answer_type == "yes_no":
            if engine.find_phrases(text, lexicon.yes_no):
                dims["clarity"] += 20
            else:
                dims["clarity"] -= 10
                parts.append(MSG_YES_NO)
        elif question.answer_type == "number":
            if extract_quantity(text, engine) is None:
                dims["completeness"] -= 10
                parts.append(MSG_NO_AMOUNT)

        if question.id == RETURN_TICKET_QUESTION and visa_type in RETURN_TICKET_VISAS:
            if engine.find_phrases(text, lexicon.return_ticket_negative):
                dims["relevance"] = 10
                reasons.append("No return ticket - major concern for tourist/visit visa")
                parts.append(MSG_RETURN_TICKET)
            elif engine.find_phrases(text, lexicon.return_ticket_positive):
                dims["relevance"] = 100

        for rule in question.rules:
            if self._rule_holds(rule, text, visa_type, previous_answers):
                dims[rule.category] += rule.points

        consistency = self.checker.check(question, text, previous_answers)
        dims["consistency"] += consistency.adjustment
        if consistency.feedback:
            parts.append(consistency.feedback)
        elif not trivial:
            dims["consistency"] += CONSISTENT_BONUS

        if trivial:
            dims["completeness"] = dims["clarity"] = 0

        scores = ScoreBreakdown.build(**dims)
        if not parts:
            parts.append(tier_message(scores.total))
        return ScoredAnswer(
            scores=scores,
            feedback=compose_feedback(parts, self.translator),
            flagged=bool(reasons),
            flag_reason="; ".join(reasons) or None,
        )

    # ------------------------------------------------------------------
    # Answer-type checks
    # ------------------------------------------------------------------
    def _check_duration(
        self,
        text: str,
        visa_type: str,
        dims: Dict[str, int],
        parts: List[str],
        reasons: List[str],
    ) -> None:
        engine = self.engine
        if engine.find_phrases(text, engine.lexicon.permanence):
            dims["relevance"] -= 40
            reasons.append("Indicated permanent stay intention")
            parts.append(MSG_PERMANENT)
            return

        days = duration_in_days(text, engine)
        if days is None:
            dims["relevance"] -= 10
            parts.append(MSG_NO_DURATION)
            return

        expectation = self.duration_expectations.get(visa_type)
        if visa_type == "tourist" and days > 90:
            dims["relevance"] -= 30
            reasons.append("Duration too long for tourist visa")
            parts.append(MSG_TOURIST_TOO_LONG)
        elif expectation is None:
            return
        elif within_expectation(days, expectation):
            dims["relevance"] += 20
            parts.append(MSG_DURATION_OK)
        elif days > expectation_days(expectation)[1] * 1.5:
            dims["relevance"] -= 30
            reasons.append(f"Duration exceeds what is typical for a {visa_type} visa")
            parts.append(MSG_TOO_LONG)

    # ------------------------------------------------------------------
    # Question rules
    # ------------------------------------------------------------------
    def _rule_holds(
        self,
        rule: ScoringRule,
        text: str,
        visa_type: str,
        previous_answers: Mapping[str, str],
    ) -> bool:
        value = rule.value
        if rule.type == "contains":
            return str(value).lower() in text
        if rule.type == "not_contains":
            return str(value).lower() not in text
        if rule.type == "min_length":
            return len(text) >= int(value)
        if rule.type == "max_length":
            return len(text) <= int(value)
        if rule.type == "pattern":
            try:
                return re.search(str(value), text, re.IGNORECASE) is not None
            except re.error as exc:
                logger.warning("Invalid scoring pattern %r: %s", value, exc)
                return False
        if rule.type == "duration_plausibility":
            expectation = self.duration_expectations.get(visa_type)
            days = duration_in_days(text, self.engine)
            return expectation is not None and days is not None and within_expectation(days, expectation)
        if rule.type == "cross_answer_consistency":
            prior = previous_answers.get(str(value))
            if not prior:
                return False
            return bool(content_words(prior) & content_words(text))
        return False


__all__ = ["RuleBasedScorer", "content_words", "tier_message"]
