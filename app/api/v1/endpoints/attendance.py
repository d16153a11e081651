"""
Live attendance — check-in, check-out and personal history.

"Today" is the current calendar day in the deployment timezone. A check-in
creates the day's record, so the nightly reconciliation job leaves that user
alone for the day.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_active_user, get_db
from app.models.attendance import PRESENT, AttendanceRecord
from app.models.calendar import HOLIDAY
from app.models.user import User
from app.schemas.attendance import AttendanceRecordRead
from app.services import attendance_ledger, calendar_store, user_directory
from app.services.settings_store import deployment_zone, get_or_create_settings

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)


async def _today_bounds(db: AsyncSession) -> tuple[date, datetime, datetime]:
    row = await get_or_create_settings(db)
    zone = deployment_zone(row)
    today = datetime.now(timezone.utc).astimezone(zone).date()
    start, end = attendance_ledger.day_bounds(today, zone)
    return today, start, end


@router.post("/checkin", response_model=AttendanceRecordRead, status_code=201)
async def check_in(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> AttendanceRecord:
    """Open today's attendance record for the current user.

    Locks the user row (with_for_update) so a double submit cannot create two
    records for the same day.
    """
    today, day_start, day_end = await _today_bounds(db)

    holidays = await calendar_store.find_overlapping(db, (HOLIDAY,), today, today)
    if holidays:
        raise HTTPException(
            status_code=400,
            detail=f"Check-in is closed today: {holidays[0].title}",
        )

    await db.execute(select(User).where(User.id == current_user.id).with_for_update())
    if await attendance_ledger.exists_for(db, current_user.id, day_start, day_end):
        raise HTTPException(status_code=400, detail="Already checked in today")

    now = datetime.now(timezone.utc)
    record = await attendance_ledger.create(
        db,
        AttendanceRecord(
            user_id=current_user.id,
            shift=current_user.shift or "Morning",
            status=PRESENT,
            check_in_time=now,
            created_at=now,
        ),
    )
    await user_directory.increment_present_counter(db, current_user.id)
    await db.commit()
    await db.refresh(record)
    logger.info("User %d checked in at %s", current_user.id, now.isoformat())
    return record


@router.post("/checkout", response_model=AttendanceRecordRead)
async def check_out(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> AttendanceRecord:
    """Close today's record and compute hours worked."""
    _today, day_start, day_end = await _today_bounds(db)

    record = await attendance_ledger.find_for_day(db, current_user.id, day_start, day_end)
    if record is None or record.status != PRESENT or record.check_in_time is None:
        raise HTTPException(status_code=400, detail="No check-in found for today")
    if record.check_out_time is not None:
        raise HTTPException(status_code=400, detail="Already checked out today")

    now = datetime.now(timezone.utc)
    worked = now - attendance_ledger.ensure_utc(record.check_in_time)
    record.check_out_time = now
    record.hours_worked = round(max(worked.total_seconds(), 0.0) / 3600, 2)
    await db.commit()
    await db.refresh(record)
    logger.info("User %d checked out (%.2f h)", current_user.id, record.hours_worked)
    return record


@router.get("/history", response_model=list[AttendanceRecordRead])
async def attendance_history(
    limit: int = Query(default=31, ge=1, le=366),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[AttendanceRecord]:
    """The current user's records, newest first."""
    return await attendance_ledger.history_for(db, current_user.id, limit=limit)
