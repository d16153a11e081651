"""
Settings store — the singleton attendance settings row.

Besides the admin-editable timezone and shift defaults, the row carries the
reconciliation job's claim marker. ``try_claim`` is the only writer of that
marker and relies on a single conditional UPDATE being atomic at the
database, which is what makes concurrent cron / manual / cold-start
invocations safe.
"""

from __future__ import annotations

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings as app_settings
from app.core.exceptions import ConfigurationError
from app.models.attendance_settings import (AttendanceSettings,
                                            default_shift_defaults)

logger = logging.getLogger(__name__)

SETTINGS_ID = 1


async def _fetch(db: AsyncSession) -> AttendanceSettings | None:
    result = await db.execute(
        select(AttendanceSettings)
        .where(AttendanceSettings.id == SETTINGS_ID)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_or_create_settings(db: AsyncSession) -> AttendanceSettings:
    """Fetch the singleton settings row, creating it with defaults if absent."""
    try:
        row = await _fetch(db)
        if row is not None:
            return row

        row = AttendanceSettings(
            id=SETTINGS_ID,
            timezone=app_settings.DEFAULT_TIMEZONE,
            shift_defaults=default_shift_defaults(),
        )
        db.add(row)
        try:
            await db.commit()
        except IntegrityError:
            # Another worker created it first
            await db.rollback()
            row = await _fetch(db)
            if row is None:
                raise ConfigurationError("Attendance settings row vanished after concurrent create")
            return row
        await db.refresh(row)
        logger.info("Created default attendance settings (timezone %s)", row.timezone)
        return row
    except SQLAlchemyError as exc:
        raise ConfigurationError(f"Attendance settings unavailable: {exc}") from exc


def deployment_zone(row: AttendanceSettings) -> ZoneInfo:
    """Return the row's IANA timezone, raising ``ConfigurationError`` if unknown."""
    name = (row.timezone or "").strip()
    if not name:
        raise ConfigurationError("Attendance settings have no timezone")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone {name!r}") from exc


async def try_claim(
    db: AsyncSession,
    settings_id: int,
    target_date: str,
) -> AttendanceSettings | None:
    """Atomically set the claim marker to ``target_date``.

    Succeeds only if the marker currently holds a different value (or none).
    Returns the updated row, or ``None`` when the date was already claimed.
    The claim is committed before returning so that concurrent invocations
    observe it immediately.
    """
    result = await db.execute(
        update(AttendanceSettings)
        .where(
            AttendanceSettings.id == settings_id,
            or_(
                AttendanceSettings.last_automated_run_date.is_(None),
                AttendanceSettings.last_automated_run_date != target_date,
            ),
        )
        .values(last_automated_run_date=target_date)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    if result.rowcount != 1:
        return None
    return await _fetch(db)


async def mark_completed(db: AsyncSession, settings_id: int, target_date: str) -> None:
    """Record that a claimed run finished every user."""
    await db.execute(
        update(AttendanceSettings)
        .where(AttendanceSettings.id == settings_id)
        .values(last_completed_run_date=target_date)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
