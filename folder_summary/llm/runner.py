"""HTTP adapters for the supported text-generation providers (Ollama, OpenAI, Gemini)."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..config import ConfigError, LLMConfig
from ..errors import EnrichmentError
from ..logging import get_logger

logger = get_logger("llm.runner")

SYSTEM_PROMPT = "You are a helpful assistant that summarizes functions in one line."
PROVIDER_LABELS = {"ollama": "Ollama", "openai": "OpenAI", "gemini": "Gemini"}
DEFAULT_BASE_URLS = {
    "ollama": "http://localhost:11434",
    "openai": "https://api.openai.com/v1",
    "gemini": "https://generativelanguage.googleapis.com/v1beta",
}
_KEYED_PROVIDERS = {"openai": "OPENAI_API_KEY", "gemini": "GEMINI_API_KEY"}


@dataclass
class HTTPCall:
    """One JSON POST issued to a provider."""

    url: str
    payload: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: float = 60.0


Transport = Callable[[HTTPCall], Dict[str, Any]]


class LLMRunner:
    """Summarizes prompts with the provider described by an :class:`LLMConfig`.

    Instances hold no per-request state and may be shared by worker threads.
    """

    def __init__(self, config: LLMConfig, *, transport: Transport | None = None) -> None:
        if config.provider not in PROVIDER_LABELS:
            raise ConfigError(f"Invalid LLM provider: {config.provider}")
        self.config = config
        self.provider = config.provider
        self.model = config.resolved_model
        self.base_url = (config.base_url or DEFAULT_BASE_URLS[self.provider]).rstrip("/")
        self._transport = transport or _urllib_transport

    @property
    def model_name(self) -> str:
        return f"{PROVIDER_LABELS[self.provider]} ({self.model})"

    def summarize(self, prompt: str) -> str:
        """Return a one-line summary for ``prompt``."""
        text = f"{self.config.prompt_prefix}{prompt}"
        started = time.perf_counter()
        response = self._transport(self._build_call(text))
        output = self._extract_content(response)
        if not output.strip():
            raise EnrichmentError(f"{self.model_name} returned an empty response")
        log_performance(self.model_name, time.perf_counter() - started, text, output)
        return output.strip()

    def _build_call(self, text: str) -> HTTPCall:
        timeout = self.config.request_timeout or 60.0
        if self.provider == "ollama":
            payload: Dict[str, Any] = {"model": self.model, "prompt": text, "stream": False}
            options: Dict[str, Any] = {}
            if self.config.temperature is not None:
                options["temperature"] = self.config.temperature
            if self.config.max_tokens is not None:
                options["num_predict"] = self.config.max_tokens
            if options:
                payload["options"] = options
            return HTTPCall(f"{self.base_url}/api/generate", payload, timeout=timeout)

        if self.provider == "openai":
            payload = {
                "model": self.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": text},
                ],
            }
            if self.config.temperature is not None:
                payload["temperature"] = self.config.temperature
            if self.config.max_tokens is not None:
                payload["max_tokens"] = self.config.max_tokens
            headers = {"Authorization": f"Bearer {self.config.api_key}"}
            return HTTPCall(f"{self.base_url}/chat/completions", payload, headers, timeout)

        payload = {"contents": [{"parts": [{"text": text}]}]}
        generation: Dict[str, Any] = {}
        if self.config.temperature is not None:
            generation["temperature"] = self.config.temperature
        if self.config.max_tokens is not None:
            generation["maxOutputTokens"] = self.config.max_tokens
        if generation:
            payload["generationConfig"] = generation
        url = (
            f"{self.base_url}/models/{quote(self.model, safe='')}:generateContent"
            f"?key={quote(self.config.api_key or '', safe='')}"
        )
        return HTTPCall(url, payload, timeout=timeout)

    def _extract_content(self, payload: Dict[str, Any]) -> str:
        try:
            if self.provider == "ollama":
                content = payload["response"]
            elif self.provider == "openai":
                content = payload["choices"][0]["message"]["content"]
            else:
                content = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise EnrichmentError(
                f"{self.model_name} returned an unexpected payload: missing {exc}"
            ) from exc
        return content if isinstance(content, str) else ""


def build_runner(config: LLMConfig, *, transport: Transport | None = None) -> Optional[LLMRunner]:
    """Return a runner for ``config``, or None when summaries are disabled."""
    if not config.enabled:
        return None
    if config.provider not in PROVIDER_LABELS:
        raise ConfigError(f"Invalid LLM provider: {config.provider}")
    required_key = _KEYED_PROVIDERS.get(config.provider)
    if required_key and not config.api_key:
        raise ConfigError(
            f"The {config.provider} provider requires an API key; set {required_key} or llm.api_key"
        )
    return LLMRunner(config, transport=transport)


def calculate_tokens(text: str) -> int:
    """Whitespace token count; a rough stand-in for a model tokenizer."""
    return len(text.split())


def log_performance(model: str, duration: float, prompt: str, output: str) -> None:
    input_tokens = calculate_tokens(prompt)
    output_tokens = calculate_tokens(output)
    total = input_tokens + output_tokens
    rate = total / duration if duration > 0 else 0.0
    logger.info(
        "%s - duration %.2fs, input tokens %d, output tokens %d, total tokens %d, %.2f tokens/s",
        model,
        duration,
        input_tokens,
        output_tokens,
        total,
        rate,
    )


def _urllib_transport(call: HTTPCall) -> Dict[str, Any]:
    data = json.dumps(call.payload).encode("utf-8")
    headers = {"Content-Type": "application/json", **call.headers}
    request = Request(call.url, data=data, headers=headers, method="POST")

    try:
        with urlopen(request, timeout=call.timeout) as response:  # type: ignore[arg-type]
            raw = response.read()
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
        message = detail.strip() or exc.reason
        raise EnrichmentError(f"LLM request failed with status {exc.code}: {message}") from exc
    except URLError as exc:
        raise EnrichmentError(f"LLM request failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise EnrichmentError(f"LLM request timed out after {call.timeout}s") from exc

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise EnrichmentError("LLM request returned invalid JSON") from exc
    if not isinstance(payload, dict):
        raise EnrichmentError("LLM request returned a non-object JSON payload")
    return payload


__all__ = [
    "HTTPCall",
    "LLMRunner",
    "Transport",
    "build_runner",
    "calculate_tokens",
    "log_performance",
]
