from __future__ import annotations

import logging

from vitals.ai.prompts import build_status_summary_prompt
from vitals.ai.providers.base import BaseTextProvider, CompletionConfig, TextCompletionError
from vitals.schema import ProjectSnapshot

logger = logging.getLogger(__name__)


def _status_inputs(snapshot: ProjectSnapshot) -> tuple[list[str], list[str], list[str]]:
    finished = sorted(
        (task for task in snapshot.tasks if task.is_completed and task.completed_at is not None),
        key=lambda task: task.completed_at,
        reverse=True,
    )
    recently_completed = [task.title for task in finished[:3]]
    in_progress = [task.title for task in snapshot.tasks if task.status == "in_progress"][:3]
    upcoming = sorted(
        (item for item in snapshot.milestones if item.completed_at is None),
        key=lambda item: item.due_date,
    )
    upcoming_milestones = [f"{item.title} (due {item.due_date.date().isoformat()})" for item in upcoming[:2]]
    return recently_completed, in_progress, upcoming_milestones


def fallback_status_summary(snapshot: ProjectSnapshot) -> str:
    recently_completed, in_progress, _ = _status_inputs(snapshot)
    progress = snapshot.project.progress
    parts = [f"Project is at {int(progress) if float(progress).is_integer() else progress}% completion."]
    if recently_completed:
        parts.append(f"Recently completed: {', '.join(recently_completed)}.")
    if in_progress:
        parts.append(f"Currently working on: {', '.join(in_progress)}.")
    return " ".join(parts)


def generate_status_summary(
    provider: BaseTextProvider,
    snapshot: ProjectSnapshot,
    *,
    timeout_s: float | None = None,
) -> str:
    recently_completed, in_progress, upcoming_milestones = _status_inputs(snapshot)
    prompt = build_status_summary_prompt(snapshot, recently_completed, in_progress, upcoming_milestones)
    config = CompletionConfig(model="fast", temperature=0.4, max_tokens=256, timeout_s=timeout_s)
    try:
        text = provider.complete(prompt, config).strip()
    except TextCompletionError as exc:
        logger.warning("status summary provider=%s failed code=%s", provider.name, exc.code)
        return fallback_status_summary(snapshot)
    except Exception:
        logger.exception("status summary provider=%s raised unexpectedly", provider.name)
        return fallback_status_summary(snapshot)
    return text or fallback_status_summary(snapshot)
