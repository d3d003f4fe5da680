"""Catalog-backed translation of feedback messages."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Protocol, Sequence

import yaml

from agents.types import Feedback

logger = logging.getLogger(__name__)

CATALOG_PATH = Path(__file__).resolve().parent / "catalog.yaml"
TARGET_LANGUAGES = ("ur",)


class Translator(Protocol):  # Translation collaborator
    def translate(self, text: str, target: str) -> Optional[str]: ...


class CatalogTranslator:
    """Exact-match lookup over a YAML message catalog; unknown text yields ``None``."""

    def __init__(self, path: Path = CATALOG_PATH):
        self.path = path
        self._table: Dict[str, Dict[str, str]] = {}
        with open(path, "r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
        for entry in raw.get("messages", []):
            source = entry.get("en")
            if not source:
                continue
            for language, text in entry.items():
                if language != "en" and text:
                    self._table.setdefault(language, {})[source] = text

    def translate(self, text: str, target: str) -> Optional[str]:
        if target == "en":
            return text
        return self._table.get(target, {}).get(text)


@lru_cache(maxsize=1)
def default_translator() -> CatalogTranslator:
    return CatalogTranslator()


def compose_feedback(
    parts: Sequence[str],
    translator: Optional[Translator] = None,
    *,
    languages: Iterable[str] = TARGET_LANGUAGES,
    **params: Any,
) -> Feedback:
    """Join English message templates into one :class:`Feedback` with translations.

    A language is only added to ``alternates`` when every part translates.
    """

    translator = translator or default_translator()
    text = " ".join(part.format(**params) for part in parts)
    alternates: Dict[str, str] = {}
    for language in languages:
        translated = [translator.translate(part, language) for part in parts]
        if all(translated):
            alternates[language] = " ".join(item.format(**params) for item in translated if item)
        else:
            logger.debug("Missing %s translation for feedback parts", language)
    return Feedback(text=text, language="en", alternates=alternates)


__all__ = ["CATALOG_PATH", "CatalogTranslator", "Translator", "compose_feedback", "default_translator"]
