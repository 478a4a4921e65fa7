from __future__ import annotations

from vitals.ai.providers.base import BaseTextProvider, CompletionConfig, TextCompletionError


class OfflineProvider(BaseTextProvider):
    """Never reaches a model; every contract lands on its rule-based fallback."""

    name = "offline"

    def complete(self, prompt: str, config: CompletionConfig) -> str:
        raise TextCompletionError("PROVIDER_DISABLED", "text completion is disabled by configuration")
