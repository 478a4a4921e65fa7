from __future__ import annotations

import calendar
from datetime import datetime, timedelta
from typing import Any

from vitals.schema import HealthReport, HealthStatus, MonitoringFrequency, as_utc, to_iso
from vitals.store.schema import HealthReportRow, MonitoringSettingRow

DEFAULT_FREQUENCY: MonitoringFrequency = "weekly"
DEFAULT_ALERT_THRESHOLD = 60
CHECK_HOUR_UTC = 9
HISTORY_LIMIT = 10


def _add_month(value: datetime) -> datetime:
    year = value.year + (1 if value.month == 12 else 0)
    month = 1 if value.month == 12 else value.month + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def compute_next_check_at(frequency: str, now: datetime) -> datetime:
    base = as_utc(now)
    if frequency == "daily":
        nxt = base + timedelta(days=1)
    elif frequency == "monthly":
        nxt = _add_month(base)
    else:
        nxt = base + timedelta(days=7)
    return nxt.replace(hour=CHECK_HOUR_UTC, minute=0, second=0, microsecond=0)


def serialize_report_row(row: HealthReportRow) -> dict[str, Any]:
    return {
        "id": row.id,
        "project_id": row.project_id,
        "health_score": int(row.health_score),
        "status": row.status,
        "summary": row.summary,
        "analysis": dict(row.analysis or {}),
        "recommendations": list(row.recommendations or []),
        "nextActions": list(row.next_actions or []),
        "predictedCompletion": row.predicted_completion,
        "velocity": row.velocity,
        "created_at": to_iso(row.created_at),
    }


def serialize_settings_row(row: MonitoringSettingRow) -> dict[str, Any]:
    return {
        "project_id": row.project_id,
        "monitoring_enabled": bool(row.monitoring_enabled),
        "frequency": row.frequency,
        "alert_threshold": int(row.alert_threshold),
        "next_check_at": to_iso(row.next_check_at) or None,
        "last_check_at": to_iso(row.last_check_at) or None,
        "created_at": to_iso(row.created_at),
        "updated_at": to_iso(row.updated_at),
    }


def save_report(session, *, project_id: str, report: HealthReport, now: datetime) -> HealthReportRow:
    row = HealthReportRow(
        project_id=project_id,
        health_score=report.score,
        status=report.status,
        summary=report.summary,
        analysis=report.analysis.model_dump(),
        recommendations=list(report.recommendations),
        next_actions=list(report.next_actions),
        predicted_completion=report.predicted_completion,
        velocity=report.velocity,
        created_at=as_utc(now),
    )
    session.add(row)
    session.flush()
    return row


def latest_report(session, project_id: str) -> HealthReportRow | None:
    return (
        session.query(HealthReportRow)
        .filter(HealthReportRow.project_id == project_id)
        .order_by(HealthReportRow.created_at.desc(), HealthReportRow.id.desc())
        .first()
    )


def latest_status(session, project_id: str) -> HealthStatus | None:
    row = latest_report(session, project_id)
    return row.status if row is not None else None


def report_history(session, project_id: str, *, limit: int = HISTORY_LIMIT) -> list[dict[str, Any]]:
    rows = (
        session.query(HealthReportRow)
        .filter(HealthReportRow.project_id == project_id)
        .order_by(HealthReportRow.created_at.desc(), HealthReportRow.id.desc())
        .limit(max(1, int(limit)))
        .all()
    )
    return [
        {"health_score": int(row.health_score), "status": row.status, "created_at": to_iso(row.created_at)}
        for row in rows
    ]


def get_settings(session, project_id: str) -> MonitoringSettingRow | None:
    return session.query(MonitoringSettingRow).filter(MonitoringSettingRow.project_id == project_id).one_or_none()


def get_or_create_settings(
    session,
    project_id: str,
    *,
    now: datetime,
    alert_threshold: int = DEFAULT_ALERT_THRESHOLD,
) -> MonitoringSettingRow:
    row = get_settings(session, project_id)
    if row is not None:
        return row
    at = as_utc(now)
    row = MonitoringSettingRow(
        project_id=project_id,
        monitoring_enabled=True,
        frequency=DEFAULT_FREQUENCY,
        alert_threshold=alert_threshold,
        next_check_at=compute_next_check_at(DEFAULT_FREQUENCY, at),
        created_at=at,
        updated_at=at,
    )
    session.add(row)
    session.flush()
    return row


def update_settings(
    session,
    project_id: str,
    *,
    now: datetime,
    monitoring_enabled: bool | None = None,
    frequency: MonitoringFrequency | None = None,
    alert_threshold: int | None = None,
) -> MonitoringSettingRow:
    at = as_utc(now)
    row = get_or_create_settings(session, project_id, now=at)
    if monitoring_enabled is not None:
        row.monitoring_enabled = bool(monitoring_enabled)
    if frequency is not None:
        row.frequency = frequency
    if alert_threshold is not None:
        row.alert_threshold = int(alert_threshold)
    row.next_check_at = compute_next_check_at(row.frequency, at) if row.monitoring_enabled else None
    row.updated_at = at
    session.flush()
    return row


def due_settings(session, now: datetime) -> list[MonitoringSettingRow]:
    at = as_utc(now)
    rows = (
        session.query(MonitoringSettingRow)
        .filter(
            MonitoringSettingRow.monitoring_enabled.is_(True),
            MonitoringSettingRow.next_check_at.isnot(None),
        )
        .order_by(MonitoringSettingRow.next_check_at.asc())
        .all()
    )
    # sqlite hands back naive datetimes, so compare after normalizing
    return [row for row in rows if as_utc(row.next_check_at) <= at]


def mark_checked(session, row: MonitoringSettingRow, *, now: datetime, reschedule: bool = True) -> None:
    at = as_utc(now)
    row.last_check_at = at
    if reschedule:
        row.next_check_at = compute_next_check_at(row.frequency, at)
    row.updated_at = at
    session.flush()
