from __future__ import annotations

import math
from datetime import datetime, timedelta

from vitals.schema import COMPLETED_SENTINEL, Task

_SECONDS_PER_WEEK = 7 * 24 * 60 * 60


def calculate_velocity(tasks: list[Task]) -> float:
    """Completed tasks per week, measured between the first and last completion."""
    finished = sorted(task.completed_at for task in tasks if task.is_completed and task.completed_at is not None)
    if len(finished) < 2:
        return 0.0

    weeks_between = max(1.0, (finished[-1] - finished[0]).total_seconds() / _SECONDS_PER_WEEK)
    return math.floor((len(finished) / weeks_between) * 10 + 0.5) / 10


def predict_completion_date(tasks: list[Task], velocity: float, now: datetime) -> str | None:
    if not tasks:
        return None
    remaining = sum(1 for task in tasks if not task.is_completed)
    if remaining == 0:
        return COMPLETED_SENTINEL
    if velocity <= 0:
        return None

    weeks_to_complete = remaining / velocity
    completion = now + timedelta(days=math.ceil(weeks_to_complete * 7))
    return completion.date().isoformat()
