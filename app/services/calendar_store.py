"""
Calendar override store — live (not soft-deleted) entries by type and range.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.calendar import CalendarEntry


async def find_overlapping(
    db: AsyncSession,
    types: Iterable[str],
    range_start: date,
    range_end: date,
) -> list[CalendarEntry]:
    """Live entries of the given types whose inclusive range intersects ``[range_start, range_end]``."""
    result = await db.execute(
        select(CalendarEntry)
        .where(
            CalendarEntry.deleted_at.is_(None),
            CalendarEntry.type.in_(list(types)),
            CalendarEntry.start_date <= range_end,
            CalendarEntry.end_date >= range_start,
        )
        .order_by(CalendarEntry.start_date, CalendarEntry.id)
    )
    return list(result.scalars().all())
