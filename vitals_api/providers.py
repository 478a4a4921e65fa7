from __future__ import annotations

from vitals.ai.providers import BaseTextProvider, build_text_provider
from vitals_api.config import Settings


def provider_from_settings(config: Settings) -> BaseTextProvider:
    name = (config.ai_provider or "").strip().lower()
    if name == "gemini":
        return build_text_provider(
            name,
            api_key=config.gemini_api_key or None,
            base_url=config.gemini_base_url,
            models={"fast": config.gemini_model_fast, "advanced": config.gemini_model_advanced},
            timeout_s=config.ai_timeout_seconds,
        )
    if name == "ollama":
        return build_text_provider(name, api_url=config.ollama_url, timeout_s=config.ai_timeout_seconds)
    return build_text_provider(name)
