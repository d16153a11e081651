"""
Attendance ledger — one record per user per calendar day (advisory).

``created_at`` is pinned to the attendance day: live check-ins use the
check-in instant, backfilled Absent / Holiday records use the start of the
reconciled day. Always stored in UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, Float, ForeignKey, Index,
                        Integer, String)
from sqlalchemy.orm import relationship

from app.db.base import Base

PRESENT = "Present"
ABSENT = "Absent"
HOLIDAY = "Holiday"
LEAVE = "Leave"
ATTENDANCE_STATUSES = (PRESENT, ABSENT, HOLIDAY, LEAVE)


class AttendanceRecord(Base):
    __tablename__ = "attendance"
    __table_args__ = (Index("ix_attendance_user_created", "user_id", "created_at"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    shift: str = Column(String(20), nullable=False, default="Morning")  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    check_in_time: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    check_out_time: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    hours_worked: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    is_late: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    is_early_leave: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    user = relationship("User")
