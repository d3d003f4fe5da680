"""Cross-answer contradiction checks between related interview questions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence, Tuple

from agents.durations import duration_in_days
from agents.types import Question
from config.lexicon import LexiconEngine, lexicon_engine

Outcome = Optional[Tuple[int, str]]

TOURIST_PURPOSE = ("tourism", "tourist", "holiday", "sightseeing", "vacation", "umrah")
WORK_PURPOSE = ("work", "job", "employment")
NO_INCOME = ("unemployed", "no job", "nothing", "jobless")
SELF_SPONSOR = ("myself", "self", "my own")


@dataclass(frozen=True)
class ConsistencyResult:
    adjustment: int = 0
    feedback: Optional[str] = None

    @property
    def contradiction(self) -> bool:
        return self.adjustment < 0


@dataclass(frozen=True)
class ConsistencyPair:
    """Two related questions and the check run once both are answered.

    ``check`` receives the answers in (first, second) order regardless of
    which one was given last.
    """

    first: str
    second: str
    check: Callable[[str, str, LexiconEngine], Outcome]


def _purpose_vs_duration(purpose: str, duration: str, engine: LexiconEngine) -> Outcome:
    days = duration_in_days(duration, engine)
    if engine.find_phrases(purpose, TOURIST_PURPOSE):
        if engine.contains_phrase(duration, "year") or engine.contains_phrase(duration, "years"):
            return -20, "Your stated duration seems inconsistent with tourist purpose."
        if days is not None and days > 90:
            return -20, "Your stated duration seems inconsistent with tourist purpose."
    if engine.find_phrases(purpose, WORK_PURPOSE) and days is not None and days < 30:
        return -15, "A stay of only a few days seems inconsistent with employment abroad."
    return None


def _destination_vs_places(destination: str, places: str, engine: LexiconEngine) -> Outcome:
    city_map = engine.lexicon.destination_cities
    countries = [
        country
        for country, cities in city_map.items()
        if engine.contains_phrase(destination, country) or engine.find_phrases(destination, cities)
    ]
    if not countries:
        return None
    named = {
        city
        for cities in city_map.values()
        for city in cities
        if engine.contains_phrase(places, city)
    }
    if not named:
        return None
    expected = {city for country in countries for city in city_map[country]}
    if named & expected:
        return None
    return -20, "The places you named do not match the country you are traveling to."


def _occupation_vs_sponsor(occupation: str, sponsor: str, engine: LexiconEngine) -> Outcome:
    if engine.find_phrases(occupation, NO_INCOME) and engine.find_phrases(sponsor, SELF_SPONSOR):
        return -15, "Sponsoring yourself without a stated income may raise questions."
    return None


DEFAULT_PAIRS: Tuple[ConsistencyPair, ...] = (
    ConsistencyPair("u4", "u5", _purpose_vs_duration),
    ConsistencyPair("u3", "t1", _destination_vs_places),
    ConsistencyPair("u8", "u10", _occupation_vs_sponsor),
)


class ConsistencyChecker:
    """Table of targeted question pairs; unmatched pairs contribute nothing."""

    def __init__(
        self,
        engine: Optional[LexiconEngine] = None,
        pairs: Sequence[ConsistencyPair] = DEFAULT_PAIRS,
    ) -> None:
        self.engine = engine or lexicon_engine()
        self.pairs = tuple(pairs)

    def check(
        self,
        question: Question,
        answer: str,
        previous_answers: Mapping[str, str],
    ) -> ConsistencyResult:
        adjustment = 0
        messages = []
        for pair in self.pairs:
            if question.id == pair.first and pair.second in previous_answers:
                outcome = pair.check(answer, previous_answers[pair.second], self.engine)
            elif question.id == pair.second and pair.first in previous_answers:
                outcome = pair.check(previous_answers[pair.first], answer, self.engine)
            else:
                continue
            if outcome is not None:
                adjustment += outcome[0]
                messages.append(outcome[1])
        return ConsistencyResult(adjustment, " ".join(messages) or None)


__all__ = ["ConsistencyChecker", "ConsistencyPair", "ConsistencyResult", "DEFAULT_PAIRS"]
