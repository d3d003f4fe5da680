from __future__ import annotations  # LLM request gateway module

import json
import logging
import re
import threading
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Tuple

import httpx

from config import AppConfig, LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup

_RETRY_IN = re.compile(r"retry in\s+([\d.]+)\s*s", re.IGNORECASE)
_DECODER = json.JSONDecoder()


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    @property
    def headers(self) -> Any: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


class RateLimitError(LlmGatewayError):  # Provider quota exhausted (HTTP 429)
    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class ModelNotFoundError(LlmGatewayError):  # Route's model is unknown to the provider
    pass


Generator = Callable[[str], str]


def complete(prompt: str, *, cfg: LlmRoute, client: Optional[HttpClient] = None) -> str:
    """Send ``prompt`` to one route and return the raw reply text."""

    payload: Dict[str, Any] = {
        "model": cfg.model,
        "messages": [{"role": "user", "content": prompt}],
    }
    if cfg.temperature is not None:
        payload["temperature"] = cfg.temperature
    if cfg.response_format:
        payload["response_format"] = {"type": cfg.response_format}
    headers = {"Content-Type": "application/json"}
    api_key = cfg.api_key()
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)

    logger.info("LLM request send route=%s model=%s", cfg.name, cfg.model)
    try:
        response, close_cb = _post(f"{cfg.base_url}{cfg.endpoint}", payload, headers, cfg.timeout_s, client)
    except Exception as exc:  # noqa: BLE001
        logger.error("LLM transport failure: %s", exc)
        raise LlmGatewayError("LLM transport failed") from exc
    try:
        status = response.status_code
        if status == 429 or (status >= 400 and _mentions_quota(response)):
            retry_after = _retry_after(response)
            logger.warning("LLM rate limited route=%s retry_after=%s", cfg.name, retry_after)
            raise RateLimitError(f"LLM route {cfg.name} rate limited", retry_after=retry_after)
        if status == 404:
            raise ModelNotFoundError(f"Model {cfg.model} not found")
        if status >= 400:
            logger.error("LLM error status: %s", status)
            raise LlmGatewayError(f"LLM returned status {status}")
        try:
            data = response.json()
        except Exception as exc:  # noqa: BLE001
            logger.error("Invalid JSON payload from LLM: %s", exc)
            raise LlmGatewayError("LLM payload was not JSON") from exc
        content = _extract_content(data)
        logger.info("LLM request done route=%s model=%s", cfg.name, cfg.model)
        return content
    finally:
        _close_safely(close_cb)


class ResilientGenerator:
    """``generate(prompt) -> text`` over ordered routes, primary first.

    Routes whose model the provider reports missing are skipped; the first
    route that answers becomes the preferred one for later calls. Rate limits
    are raised to the caller, which owns the retry policy.
    """

    def __init__(self, routes: Sequence[LlmRoute], *, client: Optional[HttpClient] = None):
        self.routes = list(routes)
        self.client = client
        self._active = 0
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: AppConfig, *, client: Optional[HttpClient] = None) -> "ResilientGenerator":
        return cls(cfg.evaluation_routes(), client=client)

    @property
    def configured(self) -> bool:
        return bool(self.routes) and any(route.api_key() for route in self.routes)

    @property
    def active_model(self) -> Optional[str]:
        if not self.routes:
            return None
        return self.routes[self._active].model

    def __call__(self, prompt: str) -> str:
        return self.generate(prompt)

    def generate(self, prompt: str) -> str:
        if not self.routes:
            raise LlmGatewayError("No LLM routes configured")
        with self._lock:
            start = self._active
        order = list(range(start, len(self.routes))) + list(range(0, start))
        for index in order:
            route = self.routes[index]
            try:
                text = complete(prompt, cfg=route, client=self.client)
            except ModelNotFoundError:
                logger.warning("Model %s not available, trying next route", route.model)
                continue
            if index != start:
                with self._lock:
                    self._active = index
                logger.info("Switched preferred model to %s", route.model)
            return text
        raise LlmGatewayError("No configured model is available")


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse the first well-formed ``{...}`` object found in a model reply."""

    cleaned = _strip_code_fences(text or "")
    start = cleaned.find("{")
    if start < 0:
        raise LlmGatewayError("LLM reply did not contain a JSON object")
    while start >= 0:
        try:
            data, _end = _DECODER.raw_decode(cleaned, start)
        except json.JSONDecodeError:
            start = cleaned.find("{", start + 1)
            continue
        return data
    raise LlmGatewayError("LLM reply JSON could not be parsed")


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        return client.post(url, json=payload, headers=headers, timeout=timeout), None
    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, json=payload, headers=headers)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:  # Close HTTP client callback when provided
    if close_cb is not None:
        close_cb()


def _mentions_quota(response: HttpResponse) -> bool:
    body = (response.text or "").lower()
    return "quota" in body or "too many requests" in body


def _retry_after(response: HttpResponse) -> Optional[float]:  # Server-suggested delay in seconds
    headers = getattr(response, "headers", None) or {}
    header = headers.get("retry-after") or headers.get("Retry-After")
    if header:
        try:
            return float(header)
        except ValueError:
            pass
    match = _RETRY_IN.search(response.text or "")
    if match:
        return float(match.group(1))
    return None


def _extract_content(data: Any) -> str:  # Extract message content from LLM response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content")


def _strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        if lines:
            lines = lines[1:]
            while lines and lines[-1].strip() == "":
                lines = lines[:-1]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            text = "\n".join(lines).strip()
    return text
