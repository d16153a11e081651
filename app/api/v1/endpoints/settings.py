"""
Settings endpoints — deployment timezone and per-shift default working days.

Singleton pattern: only one row in attendance_settings. GET retrieves it,
creating it with defaults on first access; PUT updates it. The job's run
markers are returned but can only be changed by the job itself.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, require_admin
from app.models.attendance_settings import AttendanceSettings
from app.models.user import User
from app.schemas.attendance import AttendanceSettingsRead, AttendanceSettingsUpdate
from app.services.settings_store import get_or_create_settings

router = APIRouter(tags=["settings"])
logger = logging.getLogger(__name__)


@router.get("/settings", response_model=AttendanceSettingsRead)
async def get_settings(
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> AttendanceSettings:
    """Get current attendance settings."""
    return await get_or_create_settings(db)


@router.put("/settings", response_model=AttendanceSettingsRead)
async def update_settings(
    body: AttendanceSettingsUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> AttendanceSettings:
    """Update the deployment timezone and/or shift default working days."""
    row = await get_or_create_settings(db)

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "shift_defaults" in changes:
        # Reassign a merged copy so the JSON column registers the change
        changes["shift_defaults"] = {**(row.shift_defaults or {}), **changes["shift_defaults"]}
    for field, value in changes.items():
        setattr(row, field, value)

    await db.commit()
    await db.refresh(row)
    logger.info("Attendance settings updated: %s", changes)
    return row
