"""Configuration package for the interview rehearsal service."""
from .lexicon import Lexicon, LexiconEngine, lexicon_engine
from .routes import AppConfig, LlmRoute, load_config
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "Lexicon",
    "LexiconEngine",
    "LlmRoute",
    "Settings",
    "lexicon_engine",
    "load_config",
    "settings",
]
