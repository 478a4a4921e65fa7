"""Raw health metrics derived from a project snapshot.

Every function here is pure: the caller passes the evaluation instant in and
nothing reads the wall clock.
"""

from __future__ import annotations

import math
from datetime import datetime

from vitals.health.scoring import clamp_score, round_half_up
from vitals.schema import (
    BudgetMetrics,
    HealthAnalysis,
    Milestone,
    MilestoneMetrics,
    Project,
    Task,
    TaskMetrics,
    TimelineMetrics,
)

_SECONDS_PER_DAY = 24 * 60 * 60

NO_TASKS_SCORE = 50
OVERDUE_TASK_PENALTY = 10
LOW_COMPLETION_PENALTY = 20
HIGH_COMPLETION_BONUS = 10
MILESTONE_LAG_PENALTY = 20


def _ceil_days(later: datetime, earlier: datetime) -> int:
    return math.ceil((later - earlier).total_seconds() / _SECONDS_PER_DAY)


def time_progress_percent(project: Project, now: datetime) -> float | None:
    """Share of the scheduled window already elapsed, capped at 100."""
    if project.start_date is None or project.due_date is None:
        return None
    total_duration = _ceil_days(project.due_date, project.start_date)
    days_elapsed = _ceil_days(now, project.start_date)
    if not total_duration or not days_elapsed:
        return None
    return min(100.0, (days_elapsed / total_duration) * 100)


def overdue_tasks(tasks: list[Task], now: datetime) -> list[Task]:
    return [task for task in tasks if task.is_overdue(now)]


def _timeline_metrics(
    project: Project,
    now: datetime,
    completion_rate: float,
    time_progress: float | None,
) -> TimelineMetrics:
    if project.due_date is None:
        return TimelineMetrics(score=100, issues=[], days_until_due=None, is_overdue=False)

    days_until_due = _ceil_days(project.due_date, now)
    is_overdue = project.due_date < now
    score = 100.0
    issues: list[str] = []

    if is_overdue:
        days_overdue = abs(days_until_due)
        score = max(0, 30 - days_overdue * 2)
        issues.append(f"Project is {days_overdue} days overdue")
    elif days_until_due <= 3 and project.progress < 90:
        score = 40
        issues.append("Less than 3 days until deadline with low completion")
    elif days_until_due <= 7 and project.progress < 70:
        score = 55
        issues.append("Less than a week until deadline, progress behind schedule")
    elif time_progress and completion_rate < time_progress - 20:
        score = 65
        issues.append("Task completion lagging behind timeline")

    return TimelineMetrics(
        score=round_half_up(clamp_score(score)),
        issues=issues,
        days_until_due=days_until_due,
        is_overdue=is_overdue,
    )


def _task_metrics(tasks: list[Task], now: datetime, days_until_due: int | None) -> tuple[TaskMetrics, float]:
    total = len(tasks)
    completed = sum(1 for task in tasks if task.is_completed)
    overdue = len(overdue_tasks(tasks, now))

    if total == 0:
        return (
            TaskMetrics(
                score=NO_TASKS_SCORE,
                issues=["No tasks defined for this project"],
                completion_rate=0,
                total=0,
                completed=0,
                overdue=0,
            ),
            0.0,
        )

    completion_rate = (completed / total) * 100
    score = 100.0
    issues: list[str] = []
    if overdue > 0:
        score -= overdue * OVERDUE_TASK_PENALTY
        issues.append(f"{overdue} task{'s' if overdue > 1 else ''} overdue")
    if days_until_due is not None and days_until_due <= 14 and completion_rate < 50:
        score -= LOW_COMPLETION_PENALTY
        issues.append("Less than half of tasks completed with deadline approaching")
    if completion_rate >= 80:
        score = min(100.0, score + HIGH_COMPLETION_BONUS)

    metrics = TaskMetrics(
        score=round_half_up(clamp_score(score)),
        issues=issues,
        completion_rate=round_half_up(completion_rate),
        total=total,
        completed=completed,
        overdue=overdue,
    )
    return metrics, completion_rate


def _milestone_metrics(milestones: list[Milestone], now: datetime, time_progress: float | None) -> MilestoneMetrics:
    total = len(milestones)
    completed = sum(1 for item in milestones if item.completed_at is not None)
    overdue = sum(1 for item in milestones if item.is_overdue(now))

    score = 100.0
    if total > 0:
        if overdue > 0:
            score = max(0.0, 100 - (overdue / total) * 50)
        milestone_rate = (completed / total) * 100
        if time_progress and milestone_rate < time_progress - 30:
            score = max(0.0, score - MILESTONE_LAG_PENALTY)

    return MilestoneMetrics(
        score=round_half_up(clamp_score(score)),
        total=total,
        completed=completed,
        overdue=overdue,
    )


def _budget_metrics(project: Project) -> BudgetMetrics:
    utilization = (project.spent / project.budget) * 100 if project.budget > 0 else 0
    return BudgetMetrics(
        score=100,
        issues=[],
        utilization=round_half_up(utilization),
        remaining=project.budget - project.spent,
    )


def calculate_metrics(
    project: Project,
    tasks: list[Task],
    milestones: list[Milestone],
    now: datetime,
) -> HealthAnalysis:
    time_progress = time_progress_percent(project, now)
    days_until_due = _ceil_days(project.due_date, now) if project.due_date is not None else None

    task_metrics, completion_rate = _task_metrics(tasks, now, days_until_due)
    return HealthAnalysis(
        timeline=_timeline_metrics(project, now, completion_rate, time_progress),
        budget=_budget_metrics(project),
        tasks=task_metrics,
        milestones=_milestone_metrics(milestones, now, time_progress),
    )
