from __future__ import annotations

from pathlib import Path

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.sql import func

Base = declarative_base()


class HealthReportRow(Base):
    __tablename__ = "project_health_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String(64), nullable=False, index=True)
    health_score = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False)
    summary = Column(Text, nullable=False, default="")
    analysis = Column(JSON, nullable=False, default=dict)
    recommendations = Column(JSON, nullable=False, default=list)
    next_actions = Column(JSON, nullable=False, default=list)
    predicted_completion = Column(String(32), nullable=True)
    velocity = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    __table_args__ = (
        CheckConstraint("health_score >= 0 AND health_score <= 100", name="ck_health_score_range"),
        CheckConstraint("status IN ('healthy', 'at_risk', 'critical')", name="ck_health_status"),
    )


class MonitoringSettingRow(Base):
    __tablename__ = "project_monitoring_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String(64), nullable=False, unique=True, index=True)
    monitoring_enabled = Column(Boolean, nullable=False, default=True)
    frequency = Column(String(16), nullable=False, default="weekly")
    alert_threshold = Column(Integer, nullable=False, default=60)
    next_check_at = Column(DateTime(timezone=True), nullable=True, index=True)
    last_check_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("frequency IN ('daily', 'weekly', 'monthly')", name="ck_monitoring_frequency"),
    )


def _normalize_db_url(db_url: str) -> str:
    raw = str(db_url or "").strip()
    if not raw:
        return "sqlite:///vitals.db"
    if "://" in raw:
        return raw
    if raw.startswith("/"):
        return f"sqlite:///{raw}"
    return f"sqlite:///{Path(raw).resolve()}"


def create_store_engine(db_url: str = "sqlite:///vitals.db"):
    normalized = _normalize_db_url(db_url)
    connect_args = {"check_same_thread": False} if normalized.startswith("sqlite:") else {}
    return create_engine(normalized, connect_args=connect_args)


def create_session_factory(db_url: str = "sqlite:///vitals.db"):
    engine = create_store_engine(db_url)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
