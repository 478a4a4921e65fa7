from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

ModelTier = Literal["fast", "advanced"]

ERROR_CODES = {
    "MISSING_CREDENTIALS",
    "TIMEOUT",
    "NETWORK_ERROR",
    "HTTP_ERROR",
    "EMPTY_RESPONSE",
    "PROVIDER_DISABLED",
}


class TextCompletionError(Exception):
    def __init__(self, code: str, message: str = "", *, meta: dict[str, Any] | None = None) -> None:
        self.code = code if code in ERROR_CODES else "NETWORK_ERROR"
        self.message = message or self.code
        self.meta = dict(meta or {})
        super().__init__(f"{self.code}: {self.message}")


@dataclass
class CompletionConfig:
    model: ModelTier = "fast"
    temperature: float = 0.7
    max_tokens: int = 2048
    system_prompt: str | None = None
    timeout_s: float | None = None
    meta: dict[str, Any] = field(default_factory=dict)


class BaseTextProvider:
    name = "base"

    def complete(self, prompt: str, config: CompletionConfig) -> str:
        raise NotImplementedError
