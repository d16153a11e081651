"""
Attendance Settings model — singleton table for the deployment's attendance rules.

Only one row should ever exist. Admins edit the timezone and shift defaults
through the settings API; ``last_automated_run_date`` is written only by the
reconciliation job's claim step and doubles as its once-per-day lock.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String

from app.db.base import Base

# Weekdays: 0=Sun, 1=Mon, ..., 6=Sat
FALLBACK_WORKING_DAYS = [1, 2, 3, 4, 5]


def default_shift_defaults() -> dict[str, list[int]]:
    return {
        "Morning": list(FALLBACK_WORKING_DAYS),
        "Evening": list(FALLBACK_WORKING_DAYS),
    }


class AttendanceSettings(Base):
    __tablename__ = "attendance_settings"

    id: int = Column(Integer, primary_key=True, default=1)  # type: ignore[assignment]
    timezone: str = Column(String(64), nullable=False, default="Asia/Karachi")  # type: ignore[assignment]
    shift_defaults: dict[str, list[int]] = Column(  # type: ignore[assignment]
        JSON,
        nullable=False,
        default=default_shift_defaults,
    )
    last_automated_run_date: str | None = Column(String(10), nullable=True)  # type: ignore[assignment]  # YYYY-MM-DD
    last_completed_run_date: str | None = Column(String(10), nullable=True)  # type: ignore[assignment]  # YYYY-MM-DD
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
