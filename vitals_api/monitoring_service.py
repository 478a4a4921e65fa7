from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from threading import Lock
from typing import Any, Callable, Protocol

from vitals.health.alerts import should_alert_client, should_alert_owner
from vitals.health.analyzer import HealthAnalyzer
from vitals.schema import HealthReport, ProjectSnapshot, as_utc, to_iso
from vitals.store import due_settings, latest_status, mark_checked, save_report

logger = logging.getLogger(__name__)

SKIPPED_PROJECT_STATUSES = {"completed", "cancelled"}

SnapshotLoader = Callable[[str], ProjectSnapshot | None]


class Notifier(Protocol):
    def notify(self, *, kind: str, project_id: str, message: str, metadata: dict[str, Any]) -> None: ...


class LoggingNotifier:
    def notify(self, *, kind: str, project_id: str, message: str, metadata: dict[str, Any]) -> None:
        logger.info("notify kind=%s project=%s message=%s", kind, project_id, message)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class CheckOutcome:
    project_id: str
    project_name: str
    score: int = 0
    status: str = "error"
    success: bool = False
    report_id: int | None = None
    error: str = ""
    alerts: tuple[str, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "projectId": self.project_id,
            "projectName": self.project_name,
            "score": self.score,
            "status": self.status,
            "success": self.success,
            "reportId": self.report_id,
            "alerts": list(self.alerts),
        }
        if self.error:
            out["error"] = self.error
        return out


class ProjectMonitorService:
    """Runs scheduled health checks for every project whose check is due.

    Checks for one project never overlap: a second caller finds the project
    busy and skips it.
    """

    def __init__(
        self,
        *,
        session_factory,
        analyzer: HealthAnalyzer,
        snapshot_loader: SnapshotLoader,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.analyzer = analyzer
        self.snapshot_loader = snapshot_loader
        self.notifier = notifier or LoggingNotifier()
        self.clock = clock or _utc_now
        self._in_flight: set[str] = set()
        self._guard = Lock()

    def try_claim(self, project_id: str) -> bool:
        """Mark ``project_id`` as being checked; False when a check is already running."""
        with self._guard:
            if project_id in self._in_flight:
                return False
            self._in_flight.add(project_id)
            return True

    def release(self, project_id: str) -> None:
        with self._guard:
            self._in_flight.discard(project_id)

    def _notify_owner(self, snapshot: ProjectSnapshot, report: HealthReport, threshold: int) -> str | None:
        if not should_alert_owner(report.score, threshold):
            return None
        project = snapshot.project
        self.notifier.notify(
            kind="health_alert",
            project_id=str(project.id),
            message=f'"{project.name}" health score dropped to {report.score}. Status: {report.status}',
            metadata={
                "project_id": project.id,
                "score": report.score,
                "status": report.status,
                "threshold": threshold,
            },
        )
        return "health_alert"

    def _notify_client(self, snapshot: ProjectSnapshot, report: HealthReport, previous_status) -> str | None:
        project = snapshot.project
        decision = should_alert_client(previous_status, report.status, report.analysis)
        if not decision.should_alert or not project.client_id:
            return None
        self.notifier.notify(
            kind="project_update",
            project_id=str(project.id),
            message=f"{project.name}: {decision.reason}",
            metadata={"project_id": project.id, "project_name": project.name, "client_id": project.client_id},
        )
        return "project_update"

    def check_project(
        self,
        session,
        setting,
        now: datetime,
        snapshot_loader: SnapshotLoader | None = None,
    ) -> CheckOutcome | None:
        project_id = setting.project_id
        snapshot = (snapshot_loader or self.snapshot_loader)(project_id)
        if snapshot is None or snapshot.project.status in SKIPPED_PROJECT_STATUSES:
            return None
        if snapshot.project.id is None:
            snapshot.project.id = project_id

        previous_status = latest_status(session, project_id)
        report = self.analyzer.analyze(snapshot, now=now)
        row = save_report(session, project_id=project_id, report=report, now=now)
        mark_checked(session, setting, now=now)

        alerts = [
            kind
            for kind in (
                self._notify_owner(snapshot, report, int(setting.alert_threshold)),
                self._notify_client(snapshot, report, previous_status),
            )
            if kind
        ]
        return CheckOutcome(
            project_id=project_id,
            project_name=snapshot.project.name,
            score=report.score,
            status=report.status,
            success=True,
            report_id=row.id,
            alerts=tuple(alerts),
        )

    def run_due_checks(
        self,
        now: datetime | None = None,
        *,
        snapshot_loader: SnapshotLoader | None = None,
    ) -> dict[str, Any]:
        at = as_utc(now) if now is not None else as_utc(self.clock())
        results: list[dict[str, Any]] = []
        skipped: list[dict[str, str]] = []

        session = self.session_factory()
        try:
            for setting in due_settings(session, at):
                project_id = setting.project_id
                if not self.try_claim(project_id):
                    skipped.append({"projectId": project_id, "reason": "in_flight"})
                    continue
                try:
                    outcome = self.check_project(session, setting, at, snapshot_loader)
                    if outcome is None:
                        skipped.append({"projectId": project_id, "reason": "not_monitored"})
                        session.rollback()
                        continue
                    session.commit()
                    results.append(outcome.as_dict())
                except Exception as exc:
                    session.rollback()
                    logger.exception("monitoring project=%s failed", project_id)
                    results.append(
                        CheckOutcome(project_id=project_id, project_name="", error=str(exc) or type(exc).__name__).as_dict()
                    )
                finally:
                    self.release(project_id)
        finally:
            session.close()

        return {
            "success": True,
            "checked": len(results),
            "results": results,
            "skipped": skipped,
            "timestamp": to_iso(at),
        }
