"""
Attendance ledger — existence checks and appends keyed by attendance day.

A "day" is a calendar day in the deployment timezone. Its bounds are
computed locally (DST-aware via zoneinfo) and converted to UTC, which is
how every timestamp in the ledger is stored.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance import ATTENDANCE_STATUSES, AttendanceRecord


def ensure_utc(dt: datetime) -> datetime:
    """Normalise a potentially-naive timestamp (SQLite returns naive) to UTC-aware."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def day_bounds(day: date, zone: ZoneInfo) -> tuple[datetime, datetime]:
    """Return ``(start, end)`` of ``day`` in ``zone`` as inclusive UTC instants."""
    start = datetime.combine(day, time.min, tzinfo=zone).astimezone(timezone.utc)
    next_start = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone).astimezone(timezone.utc)
    return start, next_start - timedelta(microseconds=1)


async def find_for_day(
    db: AsyncSession,
    user_id: int,
    day_start: datetime,
    day_end: datetime,
) -> AttendanceRecord | None:
    result = await db.execute(
        select(AttendanceRecord)
        .where(
            AttendanceRecord.user_id == user_id,
            AttendanceRecord.created_at >= ensure_utc(day_start),
            AttendanceRecord.created_at <= ensure_utc(day_end),
        )
        .order_by(AttendanceRecord.created_at)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def exists_for(
    db: AsyncSession,
    user_id: int,
    day_start: datetime,
    day_end: datetime,
) -> bool:
    return await find_for_day(db, user_id, day_start, day_end) is not None


async def create(db: AsyncSession, record: AttendanceRecord) -> AttendanceRecord:
    """Stage ``record`` in the session; the caller owns the commit."""
    if record.status not in ATTENDANCE_STATUSES:
        raise ValueError(f"Unknown attendance status {record.status!r}")
    record.created_at = ensure_utc(record.created_at or datetime.now(timezone.utc))
    db.add(record)
    await db.flush()
    return record


async def history_for(db: AsyncSession, user_id: int, limit: int = 31) -> list[AttendanceRecord]:
    result = await db.execute(
        select(AttendanceRecord)
        .where(AttendanceRecord.user_id == user_id)
        .order_by(AttendanceRecord.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
