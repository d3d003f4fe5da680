"""Gateway behaviour against a fake HTTP client."""
from __future__ import annotations

import pytest

from config import AppConfig, LlmRoute
from llm_gateway import (
    LlmGatewayError,
    RateLimitError,
    ResilientGenerator,
    complete,
    extract_json_object,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text="", headers=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.headers = headers or {}

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeClient:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def post(self, url, *, json, headers, timeout):
        self.calls.append({"url": url, "json": json, "headers": headers})
        outcome = self.responses[json["model"]]
        return outcome.pop(0) if isinstance(outcome, list) else outcome


def _route(name: str, model: str) -> LlmRoute:
    return LlmRoute(
        name=name,
        base_url="http://llm.test/v1",
        model=model,
        timeout_s=1.0,
        api_key_env="TEST_GEMINI_KEY",
        temperature=0.2,
    )


def _ok(content: str) -> FakeResponse:
    return FakeResponse(payload={"choices": [{"message": {"content": content}}]})


def test_complete_sends_chat_payload(monkeypatch):
    monkeypatch.setenv("TEST_GEMINI_KEY", "secret")
    client = FakeClient({"flash": _ok("hello")})
    assert complete("prompt", cfg=_route("primary", "flash"), client=client) == "hello"
    call = client.calls[0]
    assert call["url"] == "http://llm.test/v1/chat/completions"
    assert call["json"]["messages"] == [{"role": "user", "content": "prompt"}]
    assert call["json"]["temperature"] == 0.2
    assert call["headers"]["Authorization"] == "Bearer secret"


def test_429_raises_rate_limit_with_header_delay():
    client = FakeClient({"flash": FakeResponse(status_code=429, headers={"retry-after": "7"})})
    with pytest.raises(RateLimitError) as excinfo:
        complete("p", cfg=_route("primary", "flash"), client=client)
    assert excinfo.value.retry_after == 7.0


def test_quota_message_delay_is_parsed():
    body = '{"error": {"message": "Quota exceeded. Please retry in 12.5s."}}'
    client = FakeClient({"flash": FakeResponse(status_code=429, text=body)})
    with pytest.raises(RateLimitError) as excinfo:
        complete("p", cfg=_route("primary", "flash"), client=client)
    assert excinfo.value.retry_after == 12.5


def test_server_error_raises_gateway_error():
    client = FakeClient({"flash": FakeResponse(status_code=500, text="internal")})
    with pytest.raises(LlmGatewayError):
        complete("p", cfg=_route("primary", "flash"), client=client)


def test_missing_model_switches_route_and_sticks():
    client = FakeClient(
        {
            "flash": [FakeResponse(status_code=404)],
            "flash-lite": [_ok("first"), _ok("second")],
        }
    )
    generator = ResilientGenerator([_route("primary", "flash"), _route("backup", "flash-lite")], client=client)
    assert generator("p") == "first"
    assert generator.active_model == "flash-lite"
    assert generator("p") == "second"
    assert [call["json"]["model"] for call in client.calls] == ["flash", "flash-lite", "flash-lite"]


def test_rate_limit_is_not_swallowed_by_generator():
    client = FakeClient({"flash": FakeResponse(status_code=429), "flash-lite": _ok("unused")})
    generator = ResilientGenerator([_route("primary", "flash"), _route("backup", "flash-lite")], client=client)
    with pytest.raises(RateLimitError):
        generator("p")


def test_all_routes_missing():
    client = FakeClient({"flash": FakeResponse(status_code=404)})
    with pytest.raises(LlmGatewayError):
        ResilientGenerator([_route("primary", "flash")], client=client)("p")


def test_from_config_orders_routes(monkeypatch):
    monkeypatch.delenv("TEST_GEMINI_KEY", raising=False)
    cfg = AppConfig(
        llm_routes={"a": _route("a", "flash"), "b": _route("b", "flash-lite")},
        answer_evaluation=["b", "a"],
    )
    generator = ResilientGenerator.from_config(cfg)
    assert generator.active_model == "flash-lite"
    assert not generator.configured


def test_extract_json_object():
    assert extract_json_object('Sure! {"score": 80} hope that helps') == {"score": 80}
    assert extract_json_object('```json\n{"a": {"b": 1}}\n```') == {"a": {"b": 1}}
    with pytest.raises(LlmGatewayError):
        extract_json_object("no json here")
    with pytest.raises(LlmGatewayError):
        extract_json_object("{not: valid}")


def test_extract_json_object_stops_at_first_complete_object():
    assert extract_json_object('{"score": 70} note {x}') == {"score": 70}
    assert extract_json_object('see {draft} then {"score": 55}') == {"score": 55}
