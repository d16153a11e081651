"""
Calendar entries — holidays, forced working days, events and meetings.

Only ``Holiday`` and ``Working Day`` entries change anyone's attendance
obligation; the other types are informational.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (Boolean, Column, Date, DateTime, ForeignKey, Index,
                        Integer, String)

from app.db.base import Base

HOLIDAY = "Holiday"
WORKING_DAY = "Working Day"
CALENDAR_TYPES = (HOLIDAY, "Event", "Meeting", WORKING_DAY, "Other")
CALENDAR_STATUSES = ("Upcoming", "Completed", "Cancelled")


class CalendarEntry(Base):
    __tablename__ = "calendar_entries"
    __table_args__ = (Index("ix_calendar_type_range", "type", "start_date", "end_date"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    title: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    description: str | None = Column(String(1000), nullable=True)  # type: ignore[assignment]
    type: str = Column(String(20), nullable=False, default="Event")  # type: ignore[assignment]
    # Inclusive range of calendar days
    start_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    end_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    is_full_day: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="Upcoming")  # type: ignore[assignment]
    location: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    created_by: int | None = Column(Integer, ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    deleted_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date
