from __future__ import annotations

import math

from vitals.schema import HealthAnalysis, HealthStatus

WEIGHTS = {"timeline": 0.40, "tasks": 0.45, "milestones": 0.15, "budget": 0.0}

CRITICAL_BELOW = 40
HEALTHY_FROM = 70


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def status_for_score(score: int) -> HealthStatus:
    if score < CRITICAL_BELOW:
        return "critical"
    if score < HEALTHY_FROM:
        return "at_risk"
    return "healthy"


def calculate_overall_score(analysis: HealthAnalysis) -> tuple[int, HealthStatus]:
    # budget is computed upstream but carries no weight yet
    weighted = (
        clamp_score(analysis.timeline.score) * WEIGHTS["timeline"]
        + clamp_score(analysis.tasks.score) * WEIGHTS["tasks"]
        + clamp_score(analysis.milestones.score) * WEIGHTS["milestones"]
        + clamp_score(analysis.budget.score) * WEIGHTS["budget"]
    )
    score = max(0, min(100, round_half_up(weighted)))
    return score, status_for_score(score)
