from vitals.health.alerts import should_alert_client, should_alert_owner
from vitals.health.analyzer import HealthAnalyzer
from vitals.health.metrics import calculate_metrics
from vitals.health.scoring import calculate_overall_score, status_for_score
from vitals.health.velocity import calculate_velocity, predict_completion_date

__all__ = [
    "HealthAnalyzer",
    "calculate_metrics",
    "calculate_overall_score",
    "calculate_velocity",
    "predict_completion_date",
    "should_alert_client",
    "should_alert_owner",
    "status_for_score",
]
