from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import (
    Generator,
    HttpClient,
    HttpResponse,
    LlmGatewayError,
    ModelNotFoundError,
    RateLimitError,
    ResilientGenerator,
    complete,
    extract_json_object,
)

__all__ = [
    "Generator",
    "HttpClient",
    "HttpResponse",
    "LlmGatewayError",
    "ModelNotFoundError",
    "RateLimitError",
    "ResilientGenerator",
    "complete",
    "extract_json_object",
]
