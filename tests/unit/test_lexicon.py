from __future__ import annotations

import os
import time

from config.lexicon import LexiconEngine, phrase_pattern


def _write(path, text):
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(text)


def test_locales_are_merged(tmp_path):
    _write(tmp_path / "en.yaml", "hedging: [maybe]\nyes_no: ['yes']\n")
    _write(tmp_path / "ur.yaml", "hedging: [shayad, maybe]\nyes_no: [haan]\n")
    engine = LexiconEngine(directory=str(tmp_path), locales=["en", "ur"])
    assert engine.lexicon.hedging == ["maybe", "shayad"]
    assert engine.lexicon.yes_no == ["yes", "haan"]


def test_missing_locale_file_is_skipped(tmp_path):
    _write(tmp_path / "en.yaml", "permanence: [forever]\n")
    engine = LexiconEngine(directory=str(tmp_path), locales=["en", "xx"])
    assert engine.lexicon.permanence == ["forever"]
    assert engine.lexicon.normalizers == ["strip_whitespace", "collapse_spaces", "to_lower"]


def test_reload_picks_up_changes(tmp_path):
    path = tmp_path / "en.yaml"
    _write(path, "hedging: [maybe]\n")
    engine = LexiconEngine(directory=str(tmp_path), locales=["en"])
    _write(path, "hedging: [perhaps]\n")
    later = time.time() + 5
    os.utime(path, (later, later))
    engine.reload_if_changed()
    assert engine.lexicon.hedging == ["perhaps"]


def test_normalize_and_phrase_matching(tmp_path):
    _write(tmp_path / "en.yaml", "normalizers: [strip_whitespace, collapse_spaces, straighten_quotes, to_lower]\n")
    engine = LexiconEngine(directory=str(tmp_path), locales=["en"])
    text = engine.normalize("  I DON’T   know ")
    assert text == "i don't know"
    assert engine.contains_phrase(text, "don't know")
    assert not engine.contains_phrase(text, "no")
    assert engine.find_phrases("visit family soon", ["family", "visit  family", "friends"]) == [
        "family",
        "visit  family",
    ]


def test_phrase_pattern_requires_whole_words():
    assert phrase_pattern("um").search("umrah trip") is None
    assert phrase_pattern("um").search("um, two weeks") is not None
