from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from vitals.schema import HealthAnalysis

SUMMARY_BY_STATUS = {
    "critical": "This project requires immediate attention due to significant timeline and task completion issues.",
    "at_risk": "This project has some areas of concern that should be addressed to stay on track.",
    "healthy": "This project is progressing well and is on track for completion.",
}

MAX_ITEMS = 12


class RecommendationContract(BaseModel):
    model_config = {"extra": "ignore", "populate_by_name": True}

    summary: str = Field(min_length=1, max_length=1200)
    recommendations: list[str] = Field(min_length=1)
    next_actions: list[str] = Field(alias="nextActions", min_length=1)

    @field_validator("summary", mode="before")
    @classmethod
    def _strip_summary(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("recommendations", "next_actions", mode="after")
    @classmethod
    def _drop_blank(cls, items: list[str]) -> list[str]:
        cleaned = [item.strip() for item in items if item and item.strip()]
        if not cleaned:
            raise ValueError("list must contain at least one non-blank entry")
        return cleaned[:MAX_ITEMS]


def fallback_recommendation_contract(context: dict[str, Any]) -> dict[str, Any]:
    analysis: HealthAnalysis = context["analysis"]
    status = str(context.get("status") or "healthy")
    recommendations: list[str] = []
    next_actions: list[str] = []

    if analysis.timeline.is_overdue:
        recommendations.append("Review and update the project deadline with stakeholders")
        next_actions.append("Schedule a meeting to discuss timeline adjustments")

    if analysis.tasks.overdue > 0:
        recommendations.append(f"Address the {analysis.tasks.overdue} overdue task(s) immediately")
        next_actions.append("Prioritize and reassign overdue tasks")

    days_left = analysis.timeline.days_until_due
    if analysis.tasks.completion_rate < 50 and days_left and days_left < 14:
        recommendations.append("Consider reducing scope or extending deadline - current pace may not meet deadline")

    if analysis.tasks.total == 0:
        recommendations.append("Break down the project into specific tasks to better track progress")
        next_actions.append("Create at least 5-10 tasks for the project")

    if analysis.milestones.overdue > 0:
        recommendations.append("Review overdue milestones and update their deadlines if needed")

    if not recommendations:
        recommendations.append("Continue with current pace - project is on track")
        recommendations.append("Consider documenting lessons learned for future projects")

    if not next_actions:
        next_actions.append("Review upcoming tasks and ensure they are properly assigned")
        next_actions.append("Update project progress if there are recent completions")

    return RecommendationContract(
        summary=SUMMARY_BY_STATUS.get(status, SUMMARY_BY_STATUS["healthy"]),
        recommendations=recommendations,
        next_actions=next_actions,
    ).model_dump(by_alias=True)
