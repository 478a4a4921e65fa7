from vitals.store.reports import (
    compute_next_check_at,
    due_settings,
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
from vitals.store.schema import HealthReportRow, MonitoringSettingRow, create_session_factory

__all__ = [
    "HealthReportRow",
    "MonitoringSettingRow",
    "compute_next_check_at",
    "create_session_factory",
    "due_settings",
    "get_or_create_settings",
    "get_settings",
    "latest_report",
    "latest_status",
    "mark_checked",
    "report_history",
    "save_report",
    "serialize_report_row",
    "serialize_settings_row",
    "update_settings",
]
