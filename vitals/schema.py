from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

HealthStatus = Literal["healthy", "at_risk", "critical"]
TaskStatus = Literal["todo", "in_progress", "review", "completed"]
Priority = Literal["low", "medium", "high"]
PRIORITIES = ("low", "medium", "high")
MonitoringFrequency = Literal["daily", "weekly", "monthly"]

COMPLETED_SENTINEL = "Completed"


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    dt = value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_iso(value: datetime | None) -> str:
    if value is None:
        return ""
    return as_utc(value).isoformat().replace("+00:00", "Z")


class _Snapshot(BaseModel):
    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("*", mode="after")
    @classmethod
    def _normalize_datetimes(cls, value):
        if isinstance(value, datetime):
            return as_utc(value)
        return value


class Project(_Snapshot):
    id: str | None = None
    client_id: str | None = None
    name: str = "Untitled project"
    description: str | None = None
    status: str = "in_progress"
    progress: float = Field(default=0, ge=0, le=100)
    budget: float = 0
    spent: float = 0
    start_date: datetime | None = None
    due_date: datetime | None = None


class Task(_Snapshot):
    id: str | None = None
    title: str = ""
    description: str | None = None
    status: TaskStatus = "todo"
    priority: str = "medium"
    due_date: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    def is_overdue(self, now: datetime) -> bool:
        if self.is_completed or self.due_date is None:
            return False
        return self.due_date < now


class Milestone(_Snapshot):
    id: str | None = None
    title: str = ""
    description: str | None = None
    due_date: datetime
    completed_at: datetime | None = None
    payment_amount: float | None = None

    def is_overdue(self, now: datetime) -> bool:
        if self.completed_at is not None:
            return False
        return self.due_date < now


class ProjectSnapshot(BaseModel):
    model_config = {"extra": "ignore"}

    project: Project
    tasks: list[Task] = Field(default_factory=list)
    milestones: list[Milestone] = Field(default_factory=list)


class TimelineMetrics(BaseModel):
    score: int
    issues: list[str] = Field(default_factory=list)
    days_until_due: int | None = None
    is_overdue: bool = False


class BudgetMetrics(BaseModel):
    score: int
    issues: list[str] = Field(default_factory=list)
    utilization: int
    remaining: float


class TaskMetrics(BaseModel):
    score: int
    issues: list[str] = Field(default_factory=list)
    completion_rate: int
    total: int
    completed: int
    overdue: int


class MilestoneMetrics(BaseModel):
    score: int
    total: int
    completed: int
    overdue: int


class HealthAnalysis(BaseModel):
    timeline: TimelineMetrics
    budget: BudgetMetrics
    tasks: TaskMetrics
    milestones: MilestoneMetrics


class HealthReport(BaseModel):
    model_config = {"populate_by_name": True}

    score: int = Field(ge=0, le=100)
    status: HealthStatus
    summary: str
    analysis: HealthAnalysis
    recommendations: list[str]
    next_actions: list[str] = Field(alias="nextActions")
    predicted_completion: str | None = Field(default=None, alias="predictedCompletion")
    velocity: float | None = None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class TaskSuggestion(BaseModel):
    model_config = {"populate_by_name": True}

    title: str = Field(min_length=1, max_length=240)
    description: str = ""
    priority: Priority = "medium"
    estimated_duration: str | None = Field(default=None, alias="estimatedDuration")

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value):
        # unknown priorities fall back to medium
        key = str(value or "").strip().lower()
        return key if key in PRIORITIES else "medium"


class AlertDecision(BaseModel):
    model_config = {"populate_by_name": True}

    should_alert: bool = Field(alias="shouldAlert")
    reason: str | None = None
