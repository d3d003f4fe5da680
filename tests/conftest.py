import os
import random
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

from agents.answer_evaluator import AnswerEvaluator
from config.settings import settings
from question_bank import build_question_bank
from services.orchestrator import InterviewOrchestrator
from services.sessions import SessionStore
from storage.migrate import migrate
from storage.sessions import SqliteSessionRepository


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


@pytest.fixture
def bank():
    return build_question_bank(rng=random.Random(7))


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_orchestrator(bank):
    def _make(generator=None, repository=None, store=None, seed=11, **evaluator_kwargs):
        evaluator_kwargs.setdefault("sleep", lambda _s: None)
        return InterviewOrchestrator(
            bank=bank,
            store=store if store is not None else SessionStore(),
            evaluator=AnswerEvaluator(generator, enabled=True, **evaluator_kwargs),
            repository=repository if repository is not None else SqliteSessionRepository(),
            rng=random.Random(seed),
        )

    return _make


STRONG_TOURIST_ANSWERS = {
    "u1": "My full name is Muhammad Ali Khan as written in my passport",
    "u2": "I am a Pakistani citizen holding a valid green Pakistan passport",
    "u3": "I am traveling to Saudi Arabia to perform Umrah in Makkah and Madinah",
    "u4": "The purpose of my trip is tourism and a holiday to perform Umrah with my family",
    "u5": "I will stay for 14 days and then return home on my booked flight",
    "u6": "I will be staying at the Hilton hotel in Makkah which is already booked",
    "t1": "I will visit Makkah and Madinah for Umrah and then Jeddah for shopping",
    "t2": "Yes, my hotel reservation is booked and confirmed for the whole stay",
    "t3": "I am carrying 3000 dollars in cash and a debit card for expenses",
    "t4": "Yes, I have insurance covering medical emergencies for the entire trip",
}


@pytest.fixture
def strong_tourist_answers():
    return dict(STRONG_TOURIST_ANSWERS)
