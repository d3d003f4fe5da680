"""YAML-driven keyword lexicon used by the rule-based scorer."""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import yaml

from config.settings import settings

LEXICON_DIR = os.environ.get("LEXICON_DIR", str(Path(__file__).resolve().parent / "lexicons"))

_QUOTES = {"’": "'", "‘": "'", "“": '"', "”": '"'}


@dataclass
class Lexicon:
    """Merged keyword tables for every loaded locale."""

    normalizers: List[str] = field(default_factory=list)
    hedging: List[str] = field(default_factory=list)
    permanence: List[str] = field(default_factory=list)
    yes_no: List[str] = field(default_factory=list)
    return_ticket_negative: List[str] = field(default_factory=list)
    return_ticket_positive: List[str] = field(default_factory=list)
    number_words: Dict[str, int] = field(default_factory=dict)
    duration_units: Dict[str, int] = field(default_factory=dict)
    destination_cities: Dict[str, List[str]] = field(default_factory=dict)


def _load_yaml(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _extend_unique(target: List[str], values: Iterable[str]) -> None:
    for value in values or []:
        text = str(value).strip().lower()
        if text and text not in target:
            target.append(text)


def _merge(lexicon: Lexicon, cfg: dict) -> None:
    _extend_unique(lexicon.normalizers, cfg.get("normalizers", []))
    _extend_unique(lexicon.hedging, cfg.get("hedging", []))
    _extend_unique(lexicon.permanence, cfg.get("permanence", []))
    _extend_unique(lexicon.yes_no, cfg.get("yes_no", []))
    ticket = cfg.get("return_ticket") or {}
    _extend_unique(lexicon.return_ticket_negative, ticket.get("negative", []))
    _extend_unique(lexicon.return_ticket_positive, ticket.get("positive", []))
    for word, value in (cfg.get("number_words") or {}).items():
        lexicon.number_words[str(word).lower()] = int(value)
    for unit, days in (cfg.get("duration_units") or {}).items():
        lexicon.duration_units[str(unit).lower()] = int(days)
    for country, cities in (cfg.get("destination_cities") or {}).items():
        bucket = lexicon.destination_cities.setdefault(str(country).lower(), [])
        _extend_unique(bucket, cities)


def phrase_pattern(phrase: str) -> re.Pattern[str]:
    """Whole-word pattern for ``phrase``; inner whitespace matches any run of spaces."""

    parts = [re.escape(part) for part in phrase.split()]
    return re.compile(r"(?<!\w)" + r"\s+".join(parts) + r"(?!\w)")


class LexiconEngine:
    """Load per-locale keyword files and answer phrase lookups."""

    def __init__(self, directory: str = LEXICON_DIR, locales: Optional[Sequence[str]] = None):
        self.directory = directory
        self.locales = list(locales or ["en"])
        self._mtimes: Dict[str, float] = {}
        self._patterns: Dict[str, re.Pattern[str]] = {}
        self.lexicon = Lexicon()
        self.reload_if_changed(force=True)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def _paths(self) -> List[str]:
        return [os.path.join(self.directory, f"{locale}.yaml") for locale in self.locales]

    def reload_if_changed(self, force: bool = False) -> None:
        """Reload every locale file when any timestamp changes."""

        mtimes: Dict[str, float] = {}
        for path in self._paths():
            try:
                mtimes[path] = os.stat(path).st_mtime
            except FileNotFoundError:
                continue
        if not force and mtimes == self._mtimes:
            return

        lexicon = Lexicon()
        for path in mtimes:
            _merge(lexicon, _load_yaml(path))
        if not lexicon.normalizers:
            lexicon.normalizers = ["strip_whitespace", "collapse_spaces", "to_lower"]
        self.lexicon = lexicon
        self._mtimes = mtimes
        self._patterns = {}

    # ------------------------------------------------------------------
    # Matching helpers
    # ------------------------------------------------------------------
    def normalize(self, text: str) -> str:
        ops = self.lexicon.normalizers
        sample = text or ""
        if "straighten_quotes" in ops:
            for source, target in _QUOTES.items():
                sample = sample.replace(source, target)
        if "strip_whitespace" in ops:
            sample = sample.strip()
        if "collapse_spaces" in ops:
            sample = re.sub(r"\s+", " ", sample)
        if "to_lower" in ops:
            sample = sample.lower()
        return sample

    def _pattern(self, phrase: str) -> re.Pattern[str]:
        pattern = self._patterns.get(phrase)
        if pattern is None:
            pattern = phrase_pattern(phrase)
            self._patterns[phrase] = pattern
        return pattern

    def contains_phrase(self, text: str, phrase: str) -> bool:
        needle = phrase.strip().lower()
        return bool(needle) and self._pattern(needle).search(text) is not None

    def find_phrases(self, text: str, phrases: Iterable[str]) -> List[str]:
        """Return the phrases found in already-normalized ``text``, in list order."""

        return [phrase for phrase in phrases if self.contains_phrase(text, phrase)]


_engine: Optional[LexiconEngine] = None


def lexicon_engine() -> LexiconEngine:
    global _engine
    if _engine is None:
        _engine = LexiconEngine(locales=settings.LEXICON_LOCALES)
    return _engine


__all__ = ["LEXICON_DIR", "Lexicon", "LexiconEngine", "lexicon_engine", "phrase_pattern"]
