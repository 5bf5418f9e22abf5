"""Tests for the text-generation runner."""

from __future__ import annotations

import io
import json
from typing import Any, Dict, List
from urllib.error import HTTPError, URLError

import pytest

from folder_summary.config import ConfigError, LLMConfig
from folder_summary.errors import EnrichmentError
from folder_summary.llm import HTTPCall, LLMRunner, build_runner


class RecordingTransport:
    def __init__(self, response: Dict[str, Any]) -> None:
        self.response = response
        self.calls: List[HTTPCall] = []

    def __call__(self, call: HTTPCall) -> Dict[str, Any]:
        self.calls.append(call)
        return self.response


class FakeResponse:
    def __init__(self, payload: object) -> None:
        self._payload = payload

    def read(self) -> bytes:
        if isinstance(self._payload, bytes):
            return self._payload
        return json.dumps(self._payload).encode("utf-8")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def test_ollama_request_shape() -> None:
    transport = RecordingTransport({"response": " Adds numbers. \n"})
    runner = LLMRunner(LLMConfig(provider="ollama", request_timeout=12.0), transport=transport)

    assert runner.summarize("fn add() {}") == "Adds numbers."

    (call,) = transport.calls
    assert call.url == "http://localhost:11434/api/generate"
    assert call.payload == {
        "model": "mannix/gemma2-2b",
        "prompt": "Summarize this function in one line: fn add() {}",
        "stream": False,
    }
    assert call.timeout == 12.0
    assert runner.model_name == "Ollama (mannix/gemma2-2b)"


def test_ollama_forwards_generation_options() -> None:
    transport = RecordingTransport({"response": "ok"})
    runner = LLMRunner(
        LLMConfig(provider="ollama", temperature=0.1, max_tokens=32), transport=transport
    )

    runner.summarize("x")

    assert transport.calls[0].payload["options"] == {"temperature": 0.1, "num_predict": 32}


def test_openai_request_shape() -> None:
    transport = RecordingTransport({"choices": [{"message": {"content": "Parses input."}}]})
    config = LLMConfig(provider="openai", api_key="sk-test", base_url="http://proxy.local/v1/")
    runner = LLMRunner(config, transport=transport)

    assert runner.summarize("def parse(): ...") == "Parses input."

    (call,) = transport.calls
    assert call.url == "http://proxy.local/v1/chat/completions"
    assert call.headers == {"Authorization": "Bearer sk-test"}
    assert call.payload["model"] == "gpt-4o-mini"
    messages = call.payload["messages"]
    assert messages[0]["role"] == "system"
    assert messages[1] == {
        "role": "user",
        "content": "Summarize this function in one line: def parse(): ...",
    }
    assert runner.model_name == "OpenAI (gpt-4o-mini)"


def test_gemini_request_shape() -> None:
    transport = RecordingTransport(
        {"candidates": [{"content": {"parts": [{"text": "Formats a date."}]}}]}
    )
    runner = LLMRunner(LLMConfig(provider="gemini", api_key="g-key"), transport=transport)

    assert runner.summarize("function fmt() {}") == "Formats a date."

    (call,) = transport.calls
    assert call.url == (
        "https://generativelanguage.googleapis.com/v1beta/models/"
        "gemini-1.5-flash:generateContent?key=g-key"
    )
    assert call.payload == {
        "contents": [{"parts": [{"text": "Summarize this function in one line: function fmt() {}"}]}]
    }


def test_custom_prompt_prefix() -> None:
    transport = RecordingTransport({"response": "ok"})
    runner = LLMRunner(LLMConfig(prompt_prefix="Describe: "), transport=transport)

    runner.summarize("body")

    assert transport.calls[0].payload["prompt"] == "Describe: body"


@pytest.mark.parametrize(
    "response",
    [{"response": "   "}, {"unexpected": True}, {"response": None}],
)
def test_empty_or_malformed_responses_raise(response: Dict[str, Any]) -> None:
    runner = LLMRunner(LLMConfig(), transport=RecordingTransport(response))

    with pytest.raises(EnrichmentError):
        runner.summarize("x")


def test_http_transport_posts_json(monkeypatch) -> None:
    captured: Dict[str, Any] = {}

    def fake_urlopen(request, timeout=None):
        captured["url"] = request.full_url
        captured["headers"] = {key.lower(): value for key, value in request.header_items()}
        captured["payload"] = json.loads(request.data.decode("utf-8"))
        captured["timeout"] = timeout
        return FakeResponse({"choices": [{"message": {"content": "Whales are mammals."}}]})

    monkeypatch.setattr("folder_summary.llm.runner.urlopen", fake_urlopen)

    runner = LLMRunner(LLMConfig(provider="openai", api_key="k", request_timeout=30.0))
    assert runner.summarize("prompt") == "Whales are mammals."

    assert captured["url"] == "https://api.openai.com/v1/chat/completions"
    assert captured["headers"]["content-type"] == "application/json"
    assert captured["headers"]["authorization"] == "Bearer k"
    assert captured["timeout"] == 30.0
    assert captured["payload"]["model"] == "gpt-4o-mini"


def test_http_transport_wraps_network_errors(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise URLError("connection refused")

    monkeypatch.setattr("folder_summary.llm.runner.urlopen", fake_urlopen)

    with pytest.raises(EnrichmentError) as excinfo:
        LLMRunner(LLMConfig()).summarize("x")

    assert "connection refused" in str(excinfo.value)


def test_http_transport_wraps_status_errors(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise HTTPError(request.full_url, 500, "Server Error", hdrs=None, fp=io.BytesIO(b"boom"))

    monkeypatch.setattr("folder_summary.llm.runner.urlopen", fake_urlopen)

    with pytest.raises(EnrichmentError) as excinfo:
        LLMRunner(LLMConfig()).summarize("x")

    assert "500" in str(excinfo.value)


def test_http_transport_rejects_invalid_json(monkeypatch) -> None:
    monkeypatch.setattr(
        "folder_summary.llm.runner.urlopen",
        lambda request, timeout=None: FakeResponse(b"<html>"),
    )

    with pytest.raises(EnrichmentError):
        LLMRunner(LLMConfig()).summarize("x")


def test_build_runner_returns_none_when_disabled() -> None:
    assert build_runner(LLMConfig(provider="none")) is None


def test_build_runner_requires_api_keys() -> None:
    with pytest.raises(ConfigError):
        build_runner(LLMConfig(provider="openai"))
    with pytest.raises(ConfigError):
        build_runner(LLMConfig(provider="gemini"))


def test_build_runner_rejects_unknown_provider() -> None:
    with pytest.raises(ConfigError):
        build_runner(LLMConfig(provider="bogus"))


def test_build_runner_for_ollama_needs_no_key() -> None:
    runner = build_runner(LLMConfig(provider="ollama", model="llama3"))

    assert runner is not None
    assert runner.model_name == "Ollama (llama3)"
