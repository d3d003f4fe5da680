"""Model route configuration loaded from ``app_config.json``."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class LlmRoute(BaseModel):
    """LLM endpoint configuration."""

    name: str
    base_url: str
    endpoint: str = "/chat/completions"
    model: str
    timeout_s: float = Field(default=20.0, ge=0.1)
    api_key_env: Optional[str] = None
    response_format: Optional[str] = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    temperature: Optional[float] = None

    def api_key(self) -> Optional[str]:
        if not self.api_key_env:
            return None
        return os.getenv(self.api_key_env) or None


class AppConfig(BaseModel):
    """Application configuration root.

    ``answer_evaluation`` lists route names in preference order: the primary
    model first, then its fallbacks.
    """

    llm_routes: Dict[str, LlmRoute]
    answer_evaluation: List[str] = Field(default_factory=list)

    def evaluation_routes(self) -> List[LlmRoute]:
        routes: List[LlmRoute] = []
        for name in self.answer_evaluation:
            if name not in self.llm_routes:
                raise KeyError(f"Route '{name}' missing for answer_evaluation")
            routes.append(self.llm_routes[name])
        return routes


def load_config(path: Path) -> AppConfig:
    """Load configuration from disk."""

    data = Path(path).read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)


__all__ = ["AppConfig", "LlmRoute", "load_config"]
