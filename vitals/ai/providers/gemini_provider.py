from __future__ import annotations

import logging
import os
import time
from typing import Any

import requests

from vitals.ai.providers.base import BaseTextProvider, CompletionConfig, TextCompletionError

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
_DEFAULT_TIMEOUT_S = 30.0
DEFAULT_MODELS = {
    "fast": "gemini-3-flash-preview",
    "advanced": "gemini-3-pro-preview",
}
_SYSTEM_ACK = "Understood. I will follow these instructions."


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"Gemini API error: {response.status_code}"
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return f"Gemini API error: {response.status_code}"


def _first_text(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""
    candidates = payload.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    if not parts or not isinstance(parts[0], dict):
        return ""
    return str(parts[0].get("text") or "")


class GeminiProvider(BaseTextProvider):
    name = "gemini"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        models: dict[str, str] | None = None,
        timeout_s: float | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = (base_url or _DEFAULT_BASE_URL).rstrip("/")
        self._models = {**DEFAULT_MODELS, **(models or {})}
        self._timeout_s = timeout_s if timeout_s and timeout_s > 0 else _DEFAULT_TIMEOUT_S

    def _resolve_api_key(self) -> str:
        return str(self._api_key or os.getenv("GEMINI_API_KEY") or "").strip()

    def model_id(self, tier: str) -> str:
        return self._models.get(tier, self._models["fast"])

    def build_request(self, prompt: str, config: CompletionConfig) -> dict[str, Any]:
        contents: list[dict[str, Any]] = []
        if config.system_prompt:
            contents.append({"role": "user", "parts": [{"text": f"System: {config.system_prompt}"}]})
            contents.append({"role": "model", "parts": [{"text": _SYSTEM_ACK}]})
        contents.append({"role": "user", "parts": [{"text": prompt}]})
        return {
            "contents": contents,
            "generationConfig": {
                "temperature": config.temperature,
                "maxOutputTokens": config.max_tokens,
            },
        }

    def complete(self, prompt: str, config: CompletionConfig) -> str:
        api_key = self._resolve_api_key()
        if not api_key:
            raise TextCompletionError("MISSING_CREDENTIALS", "GEMINI_API_KEY is not configured")

        model = self.model_id(config.model)
        url = f"{self._base_url}/models/{model}:generateContent"
        timeout_s = config.timeout_s or self._timeout_s

        started = time.perf_counter()
        try:
            response = requests.post(
                url,
                params={"key": api_key},
                json=self.build_request(prompt, config),
                timeout=timeout_s,
            )
        except requests.Timeout as exc:
            raise TextCompletionError("TIMEOUT", "gemini request timed out", meta={"model": model}) from exc
        except requests.RequestException as exc:
            raise TextCompletionError("NETWORK_ERROR", str(exc), meta={"model": model}) from exc
        latency_ms = int((time.perf_counter() - started) * 1000)

        if not 200 <= response.status_code < 300:
            raise TextCompletionError(
                "HTTP_ERROR",
                _error_message(response),
                meta={"model": model, "status_code": response.status_code, "latency_ms": latency_ms},
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise TextCompletionError("HTTP_ERROR", "gemini response is not JSON", meta={"model": model}) from exc

        logger.debug("GEN provider=gemini model=%s latency_ms=%s", model, latency_ms)
        return _first_text(payload)
