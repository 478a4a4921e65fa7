from __future__ import annotations

import logging
from typing import Any

from vitals.ai.gate import run_contract
from vitals.ai.prompts import TASK_SUGGESTION_SYSTEM_PROMPT, build_task_suggestion_prompt
from vitals.ai.providers.base import BaseTextProvider, CompletionConfig, TextCompletionError
from vitals.schema import TaskSuggestion

logger = logging.getLogger(__name__)


def suggest_tasks_with_meta(
    provider: BaseTextProvider,
    project_name: str,
    description: str,
    existing_titles: list[str] | None = None,
    *,
    timeout_s: float | None = None,
) -> tuple[list[TaskSuggestion], dict[str, Any]]:
    """New task ideas plus gate metadata.

    A failed call yields an empty list; ``gate["fallback_applied"]`` tells a
    genuine "nothing to suggest" apart from an unavailable service.
    """
    existing = [str(title) for title in (existing_titles or []) if str(title).strip()]
    prompt = build_task_suggestion_prompt(project_name, description, existing)
    config = CompletionConfig(
        model="advanced",
        temperature=0.5,
        max_tokens=2048,
        system_prompt=TASK_SUGGESTION_SYSTEM_PROMPT,
        timeout_s=timeout_s,
    )

    raw = ""
    upstream_error = ""
    try:
        raw = provider.complete(prompt, config)
    except TextCompletionError as exc:
        upstream_error = exc.code
        logger.warning("task suggestions provider=%s failed code=%s message=%s", provider.name, exc.code, exc.message)
    except Exception:
        upstream_error = "UNEXPECTED_ERROR"
        logger.exception("task suggestions provider=%s raised unexpectedly", provider.name)

    items, gate = run_contract("task_suggestions", raw, upstream_error=upstream_error)
    gate["provider"] = provider.name

    taken = {title.strip().lower() for title in existing}
    suggestions: list[TaskSuggestion] = []
    for item in items:
        suggestion = TaskSuggestion.model_validate(item)
        key = suggestion.title.strip().lower()
        if key in taken:
            continue
        taken.add(key)
        suggestions.append(suggestion)
    return suggestions, gate


def suggest_tasks(
    provider: BaseTextProvider,
    project_name: str,
    description: str,
    existing_titles: list[str] | None = None,
    *,
    timeout_s: float | None = None,
) -> list[TaskSuggestion]:
    suggestions, _ = suggest_tasks_with_meta(
        provider,
        project_name,
        description,
        existing_titles,
        timeout_s=timeout_s,
    )
    return suggestions
