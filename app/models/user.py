"""
User model — authentication, role-based access control and the attendance
profile (shift, personal working days, cumulative counters).
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String

from app.db.base import Base

SHIFTS = ("Morning", "Evening")


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    full_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="member",
        server_default="member",
    )  # admin | manager | member | readonly
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]

    shift: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]  # Morning | Evening
    # Weekdays 0=Sun .. 6=Sat; null or empty means "use the shift default"
    working_days: list[int] | None = Column(JSON, nullable=True, default=None)  # type: ignore[assignment]
    present_count: int = Column(Integer, nullable=False, default=0, server_default="0")  # type: ignore[assignment]
    absent_count: int = Column(Integer, nullable=False, default=0, server_default="0")  # type: ignore[assignment]

    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    deleted_at: datetime | None = Column(DateTime(timezone=True), nullable=True, index=True)  # type: ignore[assignment]
