from vitals.ai.providers.base import BaseTextProvider, CompletionConfig, TextCompletionError
from vitals.ai.providers.gemini_provider import GeminiProvider
from vitals.ai.providers.offline_provider import OfflineProvider
from vitals.ai.providers.ollama_provider import OllamaProvider

PROVIDERS = {
    "gemini": GeminiProvider,
    "ollama": OllamaProvider,
    "offline": OfflineProvider,
}


def build_text_provider(name: str, **options) -> BaseTextProvider:
    key = (name or "").strip().lower()
    provider_cls = PROVIDERS.get(key)
    if provider_cls is None:
        raise ValueError(f"unsupported ai provider: {name}")
    return provider_cls(**options)


__all__ = [
    "BaseTextProvider",
    "CompletionConfig",
    "TextCompletionError",
    "GeminiProvider",
    "OllamaProvider",
    "OfflineProvider",
    "build_text_provider",
]
