"""Rule-based scorer behaviour on individual answers."""
from __future__ import annotations

import pytest

from agents.rule_scorer import RuleBasedScorer, content_words, tier_message
from agents.types import Question, ScoringRule


@pytest.fixture
def scorer(bank):
    return RuleBasedScorer(bank.duration_expectations)


def test_empty_answer_zeroes_completeness_and_clarity(scorer, bank):
    result = scorer.score(bank.get("u1"), "a", "tourist")
    assert result.scores.completeness == 0
    assert result.scores.clarity == 0
    assert result.flagged
    assert "too short" in result.flag_reason


def test_clear_name_scores_high(scorer, bank):
    result = scorer.score(
        bank.get("u1"), "My full name is Muhammad Ali Khan as written in my passport", "tourist"
    )
    assert result.scores.total >= 80
    assert not result.flagged
    assert result.feedback.text == "Good answer!"
    assert result.feedback.alternates["ur"] == "اچھا جواب!"


def test_hedged_long_tourist_stay_is_flagged(scorer, bank):
    result = scorer.score(bank.get("u5"), "Maybe 2 years, not sure", "tourist")
    assert result.flagged
    assert result.scores.confidence < 50
    assert "Duration too long for tourist visa" in result.flag_reason
    assert "Tourist visa stays are typically short" in result.feedback.text
    assert 'Avoid words like "maybe"' in result.feedback.text


def test_permanent_stay_intention_is_flagged(scorer, bank):
    result = scorer.score(bank.get("u5"), "I want to settle there permanently", "visit")
    assert result.flagged
    assert "permanent stay" in result.flag_reason
    assert result.scores.relevance < 50


def test_duration_without_number_asks_for_clarity(scorer, bank):
    result = scorer.score(bank.get("u5"), "Just for a short while", "tourist")
    assert "Please specify the duration clearly." in result.feedback.text
    assert not result.flagged


def test_duration_within_expectation_is_rewarded(scorer, bank):
    result = scorer.score(bank.get("u5"), "Two weeks and then I return home", "tourist")
    assert result.scores.relevance == 100
    assert "Duration is appropriate." in result.feedback.text


def test_duration_far_beyond_visa_norm_is_flagged(scorer, bank):
    result = scorer.score(bank.get("u5"), "About 6 months", "business")
    assert result.flagged
    assert "business visa" in result.flag_reason


def test_return_ticket_no_forces_low_relevance(scorer, bank):
    result = scorer.score(bank.get("u9"), "no", "tourist")
    assert result.scores.relevance <= 10
    assert result.flagged
    assert "No return ticket" in result.flag_reason
    assert "return ticket is essential" in result.feedback.text


def test_return_ticket_yes_scores_full_relevance(scorer, bank):
    result = scorer.score(bank.get("u9"), "Yes, it is booked", "visit")
    assert result.scores.relevance == 100
    assert not result.flagged


def test_return_ticket_check_skipped_for_work_visa(scorer, bank):
    result = scorer.score(bank.get("u9"), "no", "work")
    assert "No return ticket - major concern" not in (result.flag_reason or "")


def test_know_does_not_count_as_no(scorer, bank):
    result = scorer.score(bank.get("u9"), "Yes I know it is confirmed", "tourist")
    assert result.scores.relevance == 100
    assert not result.flagged


def test_yes_no_question_without_clear_answer(scorer, bank):
    result = scorer.score(bank.get("t4"), "I will look into it", "tourist")
    assert "Please answer clearly with yes or no." in result.feedback.text


def test_amount_question_needs_a_number(scorer, bank):
    vague = scorer.score(bank.get("t3"), "Enough money for the trip", "tourist")
    specific = scorer.score(bank.get("t3"), "I am carrying 3000 dollars in cash", "tourist")
    assert "Please give a specific amount." in vague.feedback.text
    assert specific.scores.completeness > vague.scores.completeness


def test_red_flag_lowers_relevance(scorer, bank):
    result = scorer.score(bank.get("u6"), "I will find somewhere when I arrive", "tourist")
    assert result.flagged
    assert "will find" in result.flag_reason
    assert result.scores.relevance < 50


def test_roman_urdu_hedge_lowers_confidence(scorer, bank):
    assert scorer.score(bank.get("u4"), "shayad tourism", "tourist").scores.confidence < 50


def test_consistency_contradiction_lowers_score(scorer, bank):
    previous = {"u4": "tourism and holiday"}
    result = scorer.score(bank.get("u5"), "3 years", "tourist", previous)
    assert result.scores.consistency == 30
    assert "inconsistent with tourist purpose" in result.feedback.text


def test_places_matching_destination_earn_consistency(scorer, bank):
    previous = {"u3": "saudi arabia for umrah in makkah"}
    result = scorer.score(bank.get("t1"), "Makkah and Madinah", "tourist", previous)
    assert result.scores.consistency == 95


def test_invalid_pattern_rule_is_ignored(scorer):
    question = Question(
        id="x1",
        text="Anything?",
        category="universal",
        rules=(ScoringRule(type="pattern", value="([", points=50, category="clarity"),),
    )
    result = scorer.score(question, "some answer text", "tourist")
    assert result.scores.clarity == 50


def test_overlong_number_is_scored_without_error(scorer, bank):
    result = scorer.score(bank.get("u5"), "1" * 5000 + " days", "tourist", {})
    assert "Please specify the duration clearly." in result.feedback.text
    assert scorer.score(bank.get("t3"), "9" * 5000, "tourist").scores.completeness < 100


@pytest.mark.parametrize(
    "rule_type, value, holds",
    [
        ("contains", "friend", True),
        ("contains", "absent", False),
        ("not_contains", "absent", True),
        ("not_contains", "friend", False),
        ("min_length", 10, True),
        ("min_length", 40, False),
        ("max_length", 40, True),
        ("max_length", 5, False),
        ("pattern", r"^hello\b", True),
        ("pattern", r"\d+", False),
    ],
)
def test_rule_types(scorer, rule_type, value, holds):
    question = Question(
        id="x2",
        text="Say something",
        category="universal",
        rules=(ScoringRule(type=rule_type, value=value, points=10, category="clarity"),),
    )
    result = scorer.score(question, "Hello there friend", "tourist")
    assert result.scores.clarity == (60 if holds else 50)


def test_scoring_is_deterministic(scorer, bank):
    previous = {"u4": "tourism and holiday", "u3": "saudi arabia"}
    first = scorer.score(bank.get("u5"), "Maybe 2 years, not sure", "tourist", previous)
    second = scorer.score(bank.get("u5"), "Maybe 2 years, not sure", "tourist", dict(previous))
    assert first == second


def test_tier_message_thresholds():
    assert tier_message(80) == "Good answer!"
    assert tier_message(60) == "Acceptable answer, but could be improved."
    assert tier_message(59) == "This answer needs improvement."


def test_content_words_ignores_short_and_stop_words():
    assert content_words("i will visit makkah with my family") == {"visit", "makkah", "family"}
