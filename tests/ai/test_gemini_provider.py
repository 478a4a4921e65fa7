from __future__ import annotations

import pytest
import requests

from vitals.ai.providers import build_text_provider
from vitals.ai.providers.base import CompletionConfig, TextCompletionError
from vitals.ai.providers.gemini_provider import GeminiProvider


class _FakeResponse:
    def __init__(self, *, status_code: int, payload=None, raise_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._raise_json = raise_json

    def json(self):
        if self._raise_json:
            raise ValueError("not json")
        return self._payload


def _reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_missing_key_never_reaches_the_network(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    calls = {"post": 0}
    monkeypatch.setattr(
        "vitals.ai.providers.gemini_provider.requests.post",
        lambda *args, **kwargs: calls.__setitem__("post", calls["post"] + 1),
    )

    with pytest.raises(TextCompletionError) as exc_info:
        GeminiProvider().complete("hello", CompletionConfig())
    assert exc_info.value.code == "MISSING_CREDENTIALS"
    assert calls["post"] == 0


def test_request_shape_and_text(monkeypatch):
    captured = {}

    def fake_post(url, params=None, json=None, timeout=None):
        captured.update(url=url, params=params, json=json, timeout=timeout)
        return _FakeResponse(status_code=200, payload=_reply("hi there"))

    monkeypatch.setattr("vitals.ai.providers.gemini_provider.requests.post", fake_post)
    provider = GeminiProvider(api_key="k-123", base_url="https://example.test/v1beta/", timeout_s=12)
    text = provider.complete(
        "Analyze",
        CompletionConfig(model="advanced", temperature=0.3, max_tokens=1024, system_prompt="Be terse"),
    )

    assert text == "hi there"
    assert captured["url"] == "https://example.test/v1beta/models/gemini-3-pro-preview:generateContent"
    assert captured["params"] == {"key": "k-123"}
    assert captured["timeout"] == 12
    contents = captured["json"]["contents"]
    assert [item["role"] for item in contents] == ["user", "model", "user"]
    assert contents[0]["parts"][0]["text"] == "System: Be terse"
    assert contents[-1]["parts"][0]["text"] == "Analyze"
    assert captured["json"]["generationConfig"] == {"temperature": 0.3, "maxOutputTokens": 1024}


def test_key_from_environment_and_no_system_turn(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    captured = {}

    def fake_post(url, params=None, json=None, timeout=None):
        captured.update(url=url, params=params, json=json)
        return _FakeResponse(status_code=200, payload=_reply("ok"))

    monkeypatch.setattr("vitals.ai.providers.gemini_provider.requests.post", fake_post)
    GeminiProvider(models={"fast": "flash-test"}).complete("ping", CompletionConfig(model="fast"))

    assert captured["params"] == {"key": "env-key"}
    assert captured["url"].endswith("/models/flash-test:generateContent")
    assert len(captured["json"]["contents"]) == 1


def test_http_error_carries_api_message(monkeypatch):
    monkeypatch.setattr(
        "vitals.ai.providers.gemini_provider.requests.post",
        lambda *args, **kwargs: _FakeResponse(status_code=429, payload={"error": {"message": "quota exceeded"}}),
    )
    with pytest.raises(TextCompletionError) as exc_info:
        GeminiProvider(api_key="k").complete("x", CompletionConfig())
    assert exc_info.value.code == "HTTP_ERROR"
    assert exc_info.value.message == "quota exceeded"
    assert exc_info.value.meta["status_code"] == 429


def test_http_error_without_json_body(monkeypatch):
    monkeypatch.setattr(
        "vitals.ai.providers.gemini_provider.requests.post",
        lambda *args, **kwargs: _FakeResponse(status_code=503, raise_json=True),
    )
    with pytest.raises(TextCompletionError) as exc_info:
        GeminiProvider(api_key="k").complete("x", CompletionConfig())
    assert exc_info.value.message == "Gemini API error: 503"


def test_timeout_and_network_errors(monkeypatch):
    def raise_timeout(*args, **kwargs):
        raise requests.Timeout("slow")

    def raise_connection(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr("vitals.ai.providers.gemini_provider.requests.post", raise_timeout)
    with pytest.raises(TextCompletionError) as exc_info:
        GeminiProvider(api_key="k").complete("x", CompletionConfig())
    assert exc_info.value.code == "TIMEOUT"

    monkeypatch.setattr("vitals.ai.providers.gemini_provider.requests.post", raise_connection)
    with pytest.raises(TextCompletionError) as exc_info:
        GeminiProvider(api_key="k").complete("x", CompletionConfig())
    assert exc_info.value.code == "NETWORK_ERROR"


def test_missing_candidates_yield_empty_text(monkeypatch):
    monkeypatch.setattr(
        "vitals.ai.providers.gemini_provider.requests.post",
        lambda *args, **kwargs: _FakeResponse(status_code=200, payload={"candidates": []}),
    )
    assert GeminiProvider(api_key="k").complete("x", CompletionConfig()) == ""


def test_build_text_provider_registry():
    assert build_text_provider("Gemini", api_key="k").name == "gemini"
    assert build_text_provider("offline").name == "offline"
    with pytest.raises(ValueError):
        build_text_provider("openai")


def test_offline_provider_is_disabled():
    with pytest.raises(TextCompletionError) as exc_info:
        build_text_provider("offline").complete("x", CompletionConfig())
    assert exc_info.value.code == "PROVIDER_DISABLED"
