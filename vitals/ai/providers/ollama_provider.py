from __future__ import annotations

import requests

from vitals.ai.providers.base import BaseTextProvider, CompletionConfig, TextCompletionError

_DEFAULT_URL = "http://localhost:11434/api/generate"
DEFAULT_MODELS = {
    "fast": "llama3:8b",
    "advanced": "gpt-oss:20b",
}


class OllamaProvider(BaseTextProvider):
    name = "ollama"

    def __init__(self, *, api_url: str | None = None, models: dict[str, str] | None = None, timeout_s: float = 90.0) -> None:
        self.api_url = api_url or _DEFAULT_URL
        self.models = {**DEFAULT_MODELS, **(models or {})}
        self.timeout_s = timeout_s

    def complete(self, prompt: str, config: CompletionConfig) -> str:
        model = self.models.get(config.model, self.models["fast"])
        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": config.temperature,
                "num_predict": config.max_tokens,
            },
        }
        if config.system_prompt:
            payload["system"] = config.system_prompt

        try:
            res = requests.post(self.api_url, json=payload, timeout=config.timeout_s or self.timeout_s)
            res.raise_for_status()
            body = res.json()
        except requests.Timeout as exc:
            raise TextCompletionError("TIMEOUT", f"ollama call timed out ({model})") from exc
        except requests.HTTPError as exc:
            raise TextCompletionError("HTTP_ERROR", str(exc), meta={"model": model}) from exc
        except requests.RequestException as exc:
            raise TextCompletionError("NETWORK_ERROR", str(exc), meta={"model": model}) from exc
        except ValueError as exc:
            raise TextCompletionError("HTTP_ERROR", "ollama response is not JSON", meta={"model": model}) from exc

        text = str(body.get("response", "") if isinstance(body, dict) else "").strip()
        if not text:
            raise TextCompletionError("EMPTY_RESPONSE", f"ollama returned no text ({model})")
        return text
