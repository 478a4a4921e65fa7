from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel, Field

from vitals.health.alerts import should_alert_client
from vitals.health.analyzer import HealthAnalyzer
from vitals.schema import MonitoringFrequency, ProjectSnapshot
from vitals.store import (
    create_session_factory,
    get_or_create_settings,
    get_settings,
    latest_report,
    latest_status,
    mark_checked,
    report_history,
    save_report,
    serialize_report_row,
    serialize_settings_row,
    update_settings,
)
from vitals_api.config import settings
from vitals_api.monitoring_service import ProjectMonitorService
from vitals_api.providers import provider_from_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])
_SessionLocal = create_session_factory(settings.db_url)
_analyzer = HealthAnalyzer(provider_from_settings(settings), timeout_s=settings.ai_timeout_seconds)
_monitor = ProjectMonitorService(
    session_factory=lambda: _SessionLocal(),
    analyzer=_analyzer,
    snapshot_loader=lambda project_id: None,
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class MonitoringUpdateRequest(BaseModel):
    model_config = {"populate_by_name": True}

    monitoring_enabled: bool | None = Field(default=None, alias="monitoringEnabled")
    frequency: MonitoringFrequency | None = None
    alert_threshold: int | None = Field(default=None, alias="alertThreshold", ge=0, le=100)


class SuggestTasksRequest(BaseModel):
    model_config = {"populate_by_name": True}

    project_name: str = Field(alias="projectName", min_length=1)
    description: str = ""
    existing_titles: list[str] = Field(default_factory=list, alias="existingTitles")


class MonitoringRunRequest(BaseModel):
    snapshots: dict[str, ProjectSnapshot] = Field(default_factory=dict)


def _with_project_id(project_id: str, snapshot: ProjectSnapshot) -> ProjectSnapshot:
    if snapshot.project.id and snapshot.project.id != project_id:
        raise HTTPException(
            status_code=400,
            detail={"code": "PROJECT_ID_MISMATCH", "message": "snapshot belongs to another project"},
        )
    snapshot.project.id = project_id
    return snapshot


@router.get("/health")
async def liveness() -> dict[str, str]:
    return {"status": "ok", "timestamp": _utc_now().isoformat()}


@router.post("/projects/{project_id}/health/analyze")
def analyze_project_health(project_id: str, snapshot: ProjectSnapshot) -> dict[str, Any]:
    snapshot = _with_project_id(project_id, snapshot)
    if not _monitor.try_claim(project_id):
        raise HTTPException(
            status_code=409,
            detail={"code": "ANALYSIS_IN_FLIGHT", "message": "a health check is already running for this project"},
        )
    db = _SessionLocal()
    try:
        now = _utc_now()
        previous_status = latest_status(db, project_id)
        report = _analyzer.analyze(snapshot, now=now)
        row = save_report(db, project_id=project_id, report=report, now=now)
        setting = get_settings(db, project_id)
        if setting is not None:
            mark_checked(db, setting, now=now, reschedule=False)
        db.commit()
        alert = should_alert_client(previous_status, report.status, report.analysis)
        return {
            "success": True,
            "report": report.to_payload(),
            "reportId": row.id,
            "alert": alert.model_dump(by_alias=True),
            "previousStatus": previous_status,
        }
    except Exception:
        db.rollback()
        logger.exception("health analysis failed project=%s", project_id)
        raise
    finally:
        db.close()
        _monitor.release(project_id)


@router.get("/projects/{project_id}/health")
def get_project_health(project_id: str) -> dict[str, Any]:
    db = _SessionLocal()
    try:
        row = latest_report(db, project_id)
        setting = get_settings(db, project_id)
        if row is None:
            return {
                "report": None,
                "message": "No health report available",
                "settings": serialize_settings_row(setting) if setting is not None else None,
                "history": [],
            }
        return {
            "report": serialize_report_row(row),
            "settings": serialize_settings_row(setting) if setting is not None else None,
            "history": report_history(db, project_id),
        }
    finally:
        db.close()


@router.get("/projects/{project_id}/monitoring")
def get_monitoring_settings(project_id: str) -> dict[str, Any]:
    db = _SessionLocal()
    try:
        row = get_or_create_settings(
            db,
            project_id,
            now=_utc_now(),
            alert_threshold=settings.default_alert_threshold,
        )
        db.commit()
        return {"settings": serialize_settings_row(row)}
    finally:
        db.close()


@router.patch("/projects/{project_id}/monitoring")
def patch_monitoring_settings(project_id: str, req: MonitoringUpdateRequest) -> dict[str, Any]:
    db = _SessionLocal()
    try:
        row = update_settings(
            db,
            project_id,
            now=_utc_now(),
            monitoring_enabled=req.monitoring_enabled,
            frequency=req.frequency,
            alert_threshold=req.alert_threshold,
        )
        db.commit()
        return {"settings": serialize_settings_row(row)}
    finally:
        db.close()


@router.post("/projects/{project_id}/suggest-tasks")
def suggest_project_tasks(project_id: str, req: SuggestTasksRequest) -> dict[str, Any]:
    suggestions, gate = _analyzer.suggest_tasks_with_meta(req.project_name, req.description, req.existing_titles)
    return {
        "projectId": project_id,
        "suggestions": [item.model_dump(by_alias=True) for item in suggestions],
        "meta": {
            "fallback_applied": bool(gate.get("fallback_applied", False)),
            "reason": gate.get("reason", ""),
            "provider": gate.get("provider", ""),
        },
    }


@router.post("/projects/{project_id}/status-summary")
def project_status_summary(project_id: str, snapshot: ProjectSnapshot) -> dict[str, str]:
    snapshot = _with_project_id(project_id, snapshot)
    return {"summary": _analyzer.status_summary(snapshot)}


@router.post("/monitoring/run")
def run_monitoring(req: MonitoringRunRequest, authorization: str | None = Header(default=None)) -> dict[str, Any]:
    secret = settings.cron_secret
    if not secret or authorization != f"Bearer {secret}":
        raise HTTPException(status_code=401, detail={"code": "UNAUTHORIZED", "message": "invalid cron secret"})
    return _monitor.run_due_checks(snapshot_loader=req.snapshots.get)
