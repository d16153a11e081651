"""
Calendar endpoints — holidays, forced working days and informational events.

Reads are open to any authenticated user; writes require admin. Deletes are
soft so the reconciliation job (which filters on ``deleted_at``) stops
honouring the entry without losing it.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_active_user, get_db, require_admin
from app.models.calendar import CALENDAR_TYPES, CalendarEntry
from app.models.user import User
from app.schemas.attendance import DeleteResponse
from app.schemas.calendar import (CalendarEntryCreate, CalendarEntryRead,
                                  CalendarEntryUpdate)

router = APIRouter(prefix="/calendar", tags=["calendar"])
logger = logging.getLogger(__name__)


async def _get_live_entry(db: AsyncSession, entry_id: int) -> CalendarEntry:
    result = await db.execute(
        select(CalendarEntry).where(
            CalendarEntry.id == entry_id, CalendarEntry.deleted_at.is_(None)
        )
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return entry


@router.get("", response_model=list[CalendarEntryRead])
async def list_entries(
    start: date | None = None,
    end: date | None = None,
    type: str | None = Query(default=None, description="Entry type or 'all'"),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[CalendarEntry]:
    """Live entries overlapping ``[start, end]``, ordered by start date."""
    query = select(CalendarEntry).where(CalendarEntry.deleted_at.is_(None))
    if start is not None:
        query = query.where(CalendarEntry.end_date >= start)
    if end is not None:
        query = query.where(CalendarEntry.start_date <= end)
    if type and type != "all":
        if type not in CALENDAR_TYPES:
            raise HTTPException(status_code=400, detail=f"Unknown calendar type '{type}'")
        query = query.where(CalendarEntry.type == type)
    result = await db.execute(query.order_by(CalendarEntry.start_date, CalendarEntry.id))
    return list(result.scalars().all())


@router.post("", response_model=CalendarEntryRead, status_code=201)
async def create_entry(
    body: CalendarEntryCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> CalendarEntry:
    entry = CalendarEntry(**body.model_dump(), created_by=admin.id)
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    logger.info(
        "Created %s entry %d (%s .. %s)", entry.type, entry.id, entry.start_date, entry.end_date
    )
    return entry


@router.put("/{entry_id}", response_model=CalendarEntryRead)
async def update_entry(
    entry_id: int,
    body: CalendarEntryUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> CalendarEntry:
    entry = await _get_live_entry(db, entry_id)
    changes = body.model_dump(exclude_unset=True)

    start_date = changes.get("start_date", entry.start_date)
    end_date = changes.get("end_date", entry.end_date)
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="End date cannot be before start date")

    for field, value in changes.items():
        setattr(entry, field, value)
    await db.commit()
    await db.refresh(entry)
    logger.info("Updated calendar entry %d: %s", entry_id, sorted(changes))
    return entry


@router.delete("/{entry_id}", response_model=DeleteResponse)
async def delete_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    entry = await _get_live_entry(db, entry_id)
    entry.deleted_at = datetime.now(timezone.utc)
    await db.commit()
    logger.info("Soft-deleted calendar entry %d", entry_id)
    return DeleteResponse(success=True, message="Entry deleted successfully")
