from __future__ import annotations  # Re-export question bank public API

from .bank import CATALOG_PATH, QuestionBank, build_question_bank, default_question_bank, load_catalog

__all__ = ["CATALOG_PATH", "QuestionBank", "build_question_bank", "default_question_bank", "load_catalog"]
