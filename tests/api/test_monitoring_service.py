from __future__ import annotations

from datetime import UTC, datetime, timedelta

from vitals.ai.providers import build_text_provider
from vitals.health.analyzer import HealthAnalyzer
from vitals.schema import Milestone, Project, ProjectSnapshot, Task
from vitals.store import create_session_factory, get_or_create_settings, get_settings, latest_report, update_settings
from vitals_api.monitoring_service import ProjectMonitorService

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


class _RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    def notify(self, *, kind, project_id, message, metadata):
        self.sent.append({"kind": kind, "project_id": project_id, "message": message, "metadata": metadata})


def _service(tmp_path, snapshots: dict, *, notifier=None):
    session_factory = create_session_factory(f"sqlite:///{tmp_path / 'monitoring.db'}")
    service = ProjectMonitorService(
        session_factory=session_factory,
        analyzer=HealthAnalyzer(build_text_provider("offline")),
        snapshot_loader=snapshots.get,
        notifier=notifier or _RecordingNotifier(),
        clock=lambda: NOW,
    )
    return service, session_factory


def _schedule(session_factory, *project_ids: str, threshold: int = 60) -> None:
    db = session_factory()
    for project_id in project_ids:
        get_or_create_settings(db, project_id, now=NOW - timedelta(days=10), alert_threshold=threshold)
    db.commit()
    db.close()


def _milestones_done(project_id: str, client_id: str | None) -> ProjectSnapshot:
    return ProjectSnapshot(
        project=Project(id=project_id, client_id=client_id, name="Shop", progress=95),
        tasks=[Task(title="Launch", status="completed", completed_at=NOW - timedelta(days=1))],
        milestones=[
            Milestone(title="Beta", due_date=NOW - timedelta(days=5), completed_at=NOW - timedelta(days=6)),
        ],
    )


def _struggling(project_id: str) -> ProjectSnapshot:
    return ProjectSnapshot(
        project=Project(id=project_id, name="Portal", progress=10, due_date=NOW - timedelta(days=20)),
        tasks=[Task(title=f"Auth {i}", status="todo", due_date=NOW - timedelta(days=15)) for i in range(4)],
    )


def test_owner_alert_below_threshold(tmp_path):
    notifier = _RecordingNotifier()
    service, session_factory = _service(tmp_path, {"p1": _struggling("p1")}, notifier=notifier)
    _schedule(session_factory, "p1")

    out = service.run_due_checks()

    assert out["checked"] == 1
    result = out["results"][0]
    assert result["success"] is True
    assert result["status"] == "critical"
    assert notifier.sent[0]["kind"] == "health_alert"
    assert notifier.sent[0]["message"] == f'"Portal" health score dropped to {result["score"]}. Status: critical'
    assert notifier.sent[0]["metadata"]["threshold"] == 60


def test_client_notified_only_when_project_has_client(tmp_path):
    notifier = _RecordingNotifier()
    snapshots = {"with": _milestones_done("with", "c1"), "without": _milestones_done("without", None)}
    service, session_factory = _service(tmp_path, snapshots, notifier=notifier)
    _schedule(session_factory, "with", "without")

    out = service.run_due_checks()

    assert out["checked"] == 2
    assert [item["kind"] for item in notifier.sent] == ["project_update"]
    assert notifier.sent[0]["project_id"] == "with"
    assert notifier.sent[0]["message"] == "Shop: All project milestones have been completed"
    assert notifier.sent[0]["metadata"]["client_id"] == "c1"


def test_checks_are_rescheduled(tmp_path):
    service, session_factory = _service(tmp_path, {"p1": _milestones_done("p1", None)})
    _schedule(session_factory, "p1")

    service.run_due_checks()

    db = session_factory()
    try:
        setting = get_settings(db, "p1")
        assert setting.last_check_at is not None
        assert setting.next_check_at.replace(tzinfo=UTC) == datetime(2026, 3, 17, 9, 0, tzinfo=UTC)
        assert latest_report(db, "p1") is not None
    finally:
        db.close()
    assert service.run_due_checks()["checked"] == 0


def test_disabled_and_finished_projects_are_not_checked(tmp_path):
    finished = _milestones_done("done", None)
    finished.project.status = "cancelled"
    service, session_factory = _service(tmp_path, {"off": _struggling("off"), "done": finished})
    _schedule(session_factory, "off", "done")
    db = session_factory()
    update_settings(db, "off", now=NOW, monitoring_enabled=False)
    db.commit()
    db.close()

    out = service.run_due_checks()

    assert out["checked"] == 0
    assert out["skipped"] == [{"projectId": "done", "reason": "not_monitored"}]


def test_busy_project_is_skipped(tmp_path):
    service, session_factory = _service(tmp_path, {"p1": _struggling("p1"), "p2": _struggling("p2")})
    _schedule(session_factory, "p1", "p2")

    assert service.try_claim("p1") is True
    try:
        out = service.run_due_checks()
    finally:
        service.release("p1")

    assert [item["projectId"] for item in out["results"]] == ["p2"]
    assert out["skipped"] == [{"projectId": "p1", "reason": "in_flight"}]


def test_one_failure_does_not_stop_the_run(tmp_path):
    def loader(project_id):
        if project_id == "broken":
            raise RuntimeError("snapshot store unavailable")
        return _struggling(project_id)

    service, session_factory = _service(tmp_path, {})
    _schedule(session_factory, "broken", "fine")

    out = service.run_due_checks(snapshot_loader=loader)

    by_id = {item["projectId"]: item for item in out["results"]}
    assert by_id["broken"]["success"] is False
    assert by_id["broken"]["error"] == "snapshot store unavailable"
    assert by_id["fine"]["success"] is True
    assert out["checked"] == 2

    db = session_factory()
    try:
        assert get_settings(db, "broken").last_check_at is None
    finally:
        db.close()


def test_claims_are_dropped_after_each_check(tmp_path):
    service, session_factory = _service(tmp_path, {"p1": _struggling("p1"), "p2": _struggling("p2")})
    _schedule(session_factory, "p1", "p2", "p3")

    service.run_due_checks()

    assert service._in_flight == set()
    assert service.try_claim("p1") is True
    assert service.try_claim("p1") is False
    service.release("p1")
    assert service._in_flight == set()
