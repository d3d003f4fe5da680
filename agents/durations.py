"""Parse stay durations such as "2 weeks" or "three months" into days."""
from __future__ import annotations

import re
from typing import Optional, Tuple

from agents.types import DurationExpectation
from config.lexicon import LexiconEngine

EXPECTATION_UNIT_DAYS = {"days": 1, "weeks": 7, "months": 30, "years": 365}
DIGITS = r"\d{1,6}"  # longer digit runs are not read as quantities


def _unit_alternation(engine: LexiconEngine) -> str:
    units = sorted(engine.lexicon.duration_units, key=len, reverse=True)
    return "|".join(re.escape(unit) for unit in units)


def _number_alternation(engine: LexiconEngine) -> str:
    words = sorted(engine.lexicon.number_words, key=len, reverse=True)
    return "|".join([DIGITS] + [re.escape(word) for word in words])


def _quantity(token: str, engine: LexiconEngine) -> int:
    if token.isdigit():
        return int(token)
    if token in ("a", "an"):
        return 1
    return engine.lexicon.number_words[token]


def extract_quantity(text: str, engine: LexiconEngine) -> Optional[int]:
    """First number in ``text``, written as digits or as a number word."""

    match = re.search(r"(?<!\w)(" + _number_alternation(engine) + r")(?!\w)", text)
    if match is None:
        return None
    return _quantity(match.group(1), engine)


def duration_in_days(text: str, engine: LexiconEngine) -> Optional[int]:
    """Convert ``text`` to a day count; a bare number counts as days.

    "a month" and "an year" count as one unit. Returns ``None`` when no
    quantity can be found.
    """

    units = _unit_alternation(engine)
    unit_days = engine.lexicon.duration_units
    if units:
        paired = re.search(
            r"(?<!\w)(" + _number_alternation(engine) + r"|a|an)\s*(" + units + r")s?(?!\w)",
            text,
        )
        if paired is not None:
            return _quantity(paired.group(1), engine) * unit_days[paired.group(2)]

    quantity = extract_quantity(text, engine)
    if quantity is None:
        return None
    if units:
        unit = re.search(r"(?<!\w)(" + units + r")s?(?!\w)", text)
        if unit is not None:
            return quantity * unit_days[unit.group(1)]
    return quantity


def expectation_days(expectation: DurationExpectation) -> Tuple[int, int]:
    factor = EXPECTATION_UNIT_DAYS[expectation.unit]
    return expectation.min * factor, expectation.max * factor


def within_expectation(days: int, expectation: DurationExpectation, tolerance: float = 1.5) -> bool:
    min_days, max_days = expectation_days(expectation)
    return min_days <= days <= max_days * tolerance


__all__ = ["duration_in_days", "expectation_days", "extract_quantity", "within_expectation"]
