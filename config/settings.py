"""Application settings and configuration management."""
from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    APP_CONFIG_PATH: str = "app_config.json"

    AI_SCORING_ENABLED: bool = True
    HOLISTIC_ASSESSMENT_ENABLED: bool = True
    AI_MAX_RETRIES: int = Field(default=2, ge=0)
    AI_COOLDOWN_SECONDS: float = 60.0
    AI_MAX_BACKOFF_SECONDS: float = 30.0

    PASS_THRESHOLD: int = Field(default=80, ge=0, le=100)
    QUESTIONS_PER_SESSION: int = Field(default=10, ge=1)
    UNIVERSAL_QUOTA: int = 6
    VISA_SPECIFIC_QUOTA: int = 4

    SESSION_IDLE_SECONDS: float = 3600.0
    SWEEP_INTERVAL_SECONDS: float = 300.0

    LEXICON_LOCALES: List[str] = Field(default_factory=lambda: ["en", "ur"])
    DEFAULT_LANGUAGE: str = "en"
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
