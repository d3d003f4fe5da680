from __future__ import annotations  # Re-export translation helpers

from .translator import CatalogTranslator, Translator, compose_feedback, default_translator

__all__ = ["CatalogTranslator", "Translator", "compose_feedback", "default_translator"]
