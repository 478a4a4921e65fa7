from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Callable

from vitals.ai.providers.base import BaseTextProvider
from vitals.ai.recommender import generate_recommendations
from vitals.ai.status_summary import generate_status_summary
from vitals.ai.suggestions import suggest_tasks_with_meta
from vitals.health.alerts import should_alert_client
from vitals.health.metrics import calculate_metrics
from vitals.health.scoring import calculate_overall_score
from vitals.health.velocity import calculate_velocity, predict_completion_date
from vitals.schema import (
    AlertDecision,
    HealthAnalysis,
    HealthReport,
    HealthStatus,
    ProjectSnapshot,
    TaskSuggestion,
    as_utc,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class HealthAnalyzer:
    def __init__(
        self,
        provider: BaseTextProvider,
        *,
        clock: Clock | None = None,
        timeout_s: float | None = None,
    ) -> None:
        self.provider = provider
        self.clock = clock or _utc_now
        self.timeout_s = timeout_s
        self.last_gate: dict[str, Any] = {}

    def _now(self, now: datetime | None) -> datetime:
        return as_utc(now) if now is not None else as_utc(self.clock())

    def analyze(self, snapshot: ProjectSnapshot, now: datetime | None = None) -> HealthReport:
        at = self._now(now)
        analysis = calculate_metrics(snapshot.project, snapshot.tasks, snapshot.milestones, at)
        score, status = calculate_overall_score(analysis)
        velocity = calculate_velocity(snapshot.tasks)
        predicted = predict_completion_date(snapshot.tasks, velocity, at)

        contract, gate = generate_recommendations(
            self.provider,
            snapshot,
            analysis,
            score,
            status,
            at,
            timeout_s=self.timeout_s,
        )
        self.last_gate = gate
        logger.info(
            "health project=%s score=%s status=%s velocity=%s fallback=%s",
            snapshot.project.id or snapshot.project.name,
            score,
            status,
            velocity,
            gate["fallback_applied"],
        )
        return HealthReport(
            score=score,
            status=status,
            summary=contract["summary"],
            analysis=analysis,
            recommendations=list(contract["recommendations"]),
            next_actions=list(contract["nextActions"]),
            predicted_completion=predicted,
            velocity=velocity if velocity > 0 else None,
        )

    def suggest_tasks_with_meta(
        self,
        project_name: str,
        description: str,
        existing_titles: list[str] | None = None,
    ) -> tuple[list[TaskSuggestion], dict[str, Any]]:
        return suggest_tasks_with_meta(
            self.provider,
            project_name,
            description,
            existing_titles,
            timeout_s=self.timeout_s,
        )

    def suggest_tasks(
        self,
        project_name: str,
        description: str,
        existing_titles: list[str] | None = None,
    ) -> list[TaskSuggestion]:
        suggestions, _ = self.suggest_tasks_with_meta(project_name, description, existing_titles)
        return suggestions

    def status_summary(self, snapshot: ProjectSnapshot) -> str:
        return generate_status_summary(self.provider, snapshot, timeout_s=self.timeout_s)

    @staticmethod
    def decide_alert(
        previous_status: HealthStatus | None,
        current_status: HealthStatus,
        analysis: HealthAnalysis,
    ) -> AlertDecision:
        return should_alert_client(previous_status, current_status, analysis)
