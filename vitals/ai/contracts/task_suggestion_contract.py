from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from vitals.schema import TaskSuggestion


def validate_task_suggestions(items: list[Any]) -> tuple[list[dict[str, Any]], list[str]]:
    """Keep every well-formed suggestion; report why the others were dropped."""
    accepted: list[dict[str, Any]] = []
    errors: list[str] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            errors.append(f"item {index}: not an object")
            continue
        try:
            suggestion = TaskSuggestion.model_validate(item)
        except ValidationError as exc:
            errors.extend(f"item {index}: {err.get('msg', 'validation error')}" for err in exc.errors())
            continue
        accepted.append(suggestion.model_dump(by_alias=True))
    if items and not accepted:
        raise ValueError("; ".join(errors[:5]) or "no valid suggestions")
    return accepted, errors


def fallback_task_suggestions(context: dict[str, Any]) -> list[dict[str, Any]]:
    return []
