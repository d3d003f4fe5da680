"""Question catalog loading and per-visa question selection."""
from __future__ import annotations

import logging
import random
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml
from pydantic import BaseModel, Field

from agents.types import VISA_TYPES, DurationExpectation, Question
from config.settings import settings

logger = logging.getLogger(__name__)

CATALOG_PATH = Path(__file__).resolve().parent / "questions.yaml"


class QuestionCatalog(BaseModel):  # Raw catalog document
    version: int = 1
    duration_expectations: Dict[str, DurationExpectation] = Field(default_factory=dict)
    questions: List[Question]


class QuestionBank:
    """Immutable question catalog with a seedable selector."""

    def __init__(
        self,
        questions: Sequence[Question],
        duration_expectations: Optional[Dict[str, DurationExpectation]] = None,
        *,
        rng: Optional[random.Random] = None,
        universal_quota: Optional[int] = None,
        specific_quota: Optional[int] = None,
    ) -> None:
        self._questions = tuple(questions)
        self._by_id = {question.id: question for question in self._questions}
        if len(self._by_id) != len(self._questions):
            raise ValueError("Question ids must be unique")
        self.duration_expectations = dict(duration_expectations or {})
        self._rng = rng or random.Random()
        self.universal_quota = settings.UNIVERSAL_QUOTA if universal_quota is None else universal_quota
        self.specific_quota = settings.VISA_SPECIFIC_QUOTA if specific_quota is None else specific_quota

    @property
    def questions(self) -> Sequence[Question]:
        return self._questions

    def get(self, question_id: str) -> Optional[Question]:
        return self._by_id.get(question_id)

    def questions_for_visa_type(
        self,
        visa_type: str,
        count: int = 10,
        rng: Optional[random.Random] = None,
    ) -> List[Question]:
        """Pick universal then visa-specific questions, shuffle, and truncate to ``count``.

        Returns every applicable question when fewer than ``count`` exist.
        """

        if visa_type not in VISA_TYPES:
            raise ValueError(f"Unknown visa type '{visa_type}'")
        universal = [
            q for q in self._questions if q.category == "universal" and q.applies_to(visa_type)
        ][: self.universal_quota]
        specific = [
            q for q in self._questions if q.category == "visa_specific" and q.applies_to(visa_type)
        ][: self.specific_quota]
        selected = universal + specific
        (rng or self._rng).shuffle(selected)
        return selected[: max(0, count)]

    def expectation_for(self, visa_type: str) -> Optional[DurationExpectation]:
        return self.duration_expectations.get(visa_type)


def load_catalog(path: Path = CATALOG_PATH) -> QuestionCatalog:
    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    catalog = QuestionCatalog.model_validate(raw)
    logger.info("Loaded %d questions from %s", len(catalog.questions), path)
    return catalog


def build_question_bank(path: Path = CATALOG_PATH, rng: Optional[random.Random] = None) -> QuestionBank:
    catalog = load_catalog(path)
    return QuestionBank(catalog.questions, catalog.duration_expectations, rng=rng)


@lru_cache(maxsize=1)
def default_question_bank() -> QuestionBank:
    return build_question_bank()


__all__ = [
    "CATALOG_PATH",
    "QuestionBank",
    "QuestionCatalog",
    "build_question_bank",
    "default_question_bank",
    "load_catalog",
]
