"""Model-assisted evaluation: parsing, retries, cooldown and fallback."""
from __future__ import annotations

import json

import pytest

from agents.answer_evaluator import AnswerEvaluator, fallback_evaluation
from agents.types import InterviewContext
from llm_gateway import LlmGatewayError, RateLimitError


class FakeGenerator:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.prompts = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def context():
    return InterviewContext(visa_type="tourist", destination_country="Saudi Arabia", language="english")


def _evaluator(generator, clock, sleeps=None, **kwargs):
    sink = sleeps if sleeps is not None else []
    return AnswerEvaluator(
        generator,
        enabled=True,
        max_retries=2,
        cooldown_s=60,
        max_backoff_s=30,
        sleep=sink.append,
        clock=clock,
        **kwargs,
    )


def test_fallback_tiers_by_length():
    long_answer = fallback_evaluation("x" * 60)
    assert long_answer.score == 70
    assert long_answer.breakdown.clarity == 70
    assert not long_answer.ai_powered
    assert long_answer.feedback.text.startswith("[No AI]")

    medium = fallback_evaluation("x" * 30)
    assert medium.score == 50
    assert medium.suggestions == []

    short = fallback_evaluation("yes")
    assert short.score == 30
    assert "Answer too brief" in short.flags
    assert short.suggestions == ["Provide more specific details"]
    assert not short.is_valid


def test_unconfigured_evaluator_falls_back(bank, context, clock):
    evaluator = _evaluator(None, clock)
    result = evaluator.evaluate_answer(bank.get("u1"), "Muhammad Ali Khan", context)
    assert not result.ai_powered
    assert not evaluator.is_available()


def test_fenced_reply_is_parsed(bank, context, clock):
    reply = "```json\n" + json.dumps(
        {
            "score": 82,
            "relevance": 90,
            "feedback": "Clear answer.",
            "feedbackUrdu": "واضح جواب۔",
            "flags": None,
            "factCheck": None,
        }
    ) + "\n```"
    generator = FakeGenerator(reply)
    evaluator = _evaluator(generator, clock)
    result = evaluator.evaluate_answer(bank.get("u3"), "Saudi Arabia", context)
    assert result.ai_powered
    assert result.score == 82
    assert result.breakdown.relevance == 90
    assert result.breakdown.clarity == 82
    assert result.flags == []
    assert result.fact_check.verified
    assert result.feedback.alternates["ur"] == "واضح جواب۔"
    assert "Saudi Arabia" in generator.prompts[0]


def test_missing_fields_take_defaults(bank, context, clock):
    evaluator = _evaluator(FakeGenerator('{"isValid": null}'), clock)
    result = evaluator.evaluate_answer(bank.get("u3"), "Qatar", context)
    assert result.score == 50
    assert result.is_valid
    assert result.feedback.text == "Answer evaluated."


def test_unparseable_reply_falls_back(bank, context, clock):
    evaluator = _evaluator(FakeGenerator("I cannot answer that"), clock)
    result = evaluator.evaluate_answer(bank.get("u3"), "Qatar for work", context)
    assert not result.ai_powered


def test_rate_limit_retries_with_server_delay(bank, context, clock):
    sleeps = []
    generator = FakeGenerator(RateLimitError("429", retry_after=3), '{"score": 75}')
    evaluator = _evaluator(generator, clock, sleeps)
    result = evaluator.evaluate_answer(bank.get("u3"), "Malaysia", context)
    assert result.ai_powered
    assert sleeps == [3]
    assert len(generator.prompts) == 2


def test_backoff_is_capped(bank, context, clock):
    sleeps = []
    generator = FakeGenerator(RateLimitError("429", retry_after=120), '{"score": 75}')
    _evaluator(generator, clock, sleeps).evaluate_answer(bank.get("u3"), "Malaysia", context)
    assert sleeps == [30]


def test_persistent_rate_limit_enters_cooldown(bank, context, clock):
    sleeps = []
    generator = FakeGenerator(RateLimitError("429"))
    evaluator = _evaluator(generator, clock, sleeps)

    result = evaluator.evaluate_answer(bank.get("u3"), "Malaysia", context)
    assert not result.ai_powered
    assert sleeps == [5, 10]
    assert len(generator.prompts) == 3
    assert not evaluator.is_available()
    status = evaluator.status()
    assert status["rate_limited"] and status["retry_in_seconds"] == 60

    evaluator.evaluate_answer(bank.get("u3"), "Malaysia", context)
    assert len(generator.prompts) == 3

    clock.advance(61)
    assert evaluator.is_available()


def test_gateway_error_falls_back_without_cooldown(bank, context, clock):
    evaluator = _evaluator(FakeGenerator(LlmGatewayError("boom")), clock)
    result = evaluator.evaluate_answer(bank.get("u3"), "Malaysia", context)
    assert not result.ai_powered
    assert evaluator.is_available()


def test_disabled_evaluator_never_calls_model(bank, context, clock):
    generator = FakeGenerator('{"score": 90}')
    evaluator = AnswerEvaluator(generator, enabled=False, clock=clock)
    assert not evaluator.evaluate_answer(bank.get("u3"), "Malaysia", context).ai_powered
    assert generator.prompts == []


@pytest.mark.parametrize("reply", ['{"score": NaN}', '{"score": 80, "clarity": Infinity}', '{"score": -Infinity}'])
def test_non_finite_scores_fall_back(bank, context, clock, reply):
    evaluator = _evaluator(FakeGenerator(reply), clock)
    result = evaluator.evaluate_answer(bank.get("u1"), "Muhammad Ali Khan", context)
    assert not result.ai_powered
    assert result.score == 30
