from __future__ import annotations

from vitals.schema import AlertDecision, HealthAnalysis, HealthStatus

REASON_IMPROVED = "Project health has improved and is now on track"
REASON_MILESTONES_DONE = "All project milestones have been completed"
REASON_NEARLY_COMPLETE = "Project is nearly complete (90%+ tasks done)"


def should_alert_client(
    previous_status: HealthStatus | None,
    current_status: HealthStatus,
    analysis: HealthAnalysis,
) -> AlertDecision:
    """Decide whether a stakeholder should hear about this check.

    Rules are evaluated in order and the first match wins. An unknown previous
    status never counts as an improvement.
    """
    if previous_status is not None and previous_status != "healthy" and current_status == "healthy":
        return AlertDecision(should_alert=True, reason=REASON_IMPROVED)

    milestones = analysis.milestones
    if milestones.total > 0 and milestones.completed == milestones.total:
        return AlertDecision(should_alert=True, reason=REASON_MILESTONES_DONE)

    if 90 <= analysis.tasks.completion_rate < 100:
        return AlertDecision(should_alert=True, reason=REASON_NEARLY_COMPLETE)

    return AlertDecision(should_alert=False)


def should_alert_owner(score: int, alert_threshold: int) -> bool:
    return score < alert_threshold
