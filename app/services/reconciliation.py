"""
Attendance reconciliation — backfills yesterday's Absent / Holiday records.

Runs shortly after local midnight and reconciles the day that just ended.
A live run first claims the target date on the settings row; a second live
run for the same date (cron retry, manual trigger, serverless re-entry)
finds the claim taken and returns ``skipped`` without touching anything.
Dry runs never claim and never write.

Users are processed one at a time. Any error aborts the rest of the run and
propagates to the caller; the claim stays in place, so the date is not
retried automatically (``last_completed_run_date`` is left behind, which
``GET /jobs/attendance/status`` reports as ``incomplete``).
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import TargetDateError
from app.models.attendance import ABSENT
from app.models.attendance import HOLIDAY as HOLIDAY_STATUS
from app.models.attendance import AttendanceRecord
from app.models.calendar import HOLIDAY, WORKING_DAY
from app.schemas.jobs import ReconciliationResult
from app.services import attendance_ledger, calendar_store, user_directory
from app.services.settings_store import (deployment_zone,
                                         get_or_create_settings,
                                         mark_completed, try_claim)
from app.services.working_days import Obligation, resolve_obligation

logger = logging.getLogger(__name__)

DEFAULT_RECORD_SHIFT = "Morning"


def compute_target_date(zone: ZoneInfo, now: datetime | None = None) -> date:
    """The calendar day before ``now`` in ``zone``."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(zone).date() - timedelta(days=1)


async def run_reconciliation(
    db: AsyncSession,
    *,
    target_date: date | None = None,
    dry_run: bool = False,
    now: datetime | None = None,
) -> ReconciliationResult:
    """Reconcile one day of attendance for every active user.

    ``target_date`` defaults to yesterday in the deployment timezone and may
    not be later than that; ``now`` anchors "yesterday" (wall clock if omitted).
    """
    prefix = "[DRY RUN] " if dry_run else ""
    logger.info("%sRunning attendance reconciliation job", prefix)
    try:
        settings_row = await get_or_create_settings(db)
        zone = deployment_zone(settings_row)
        latest = compute_target_date(zone, now)
        if target_date is None:
            target_date = latest
        elif target_date > latest:
            raise TargetDateError(
                f"Cannot reconcile {target_date.isoformat()}: the day has not ended in {zone.key}"
            )
        target_str = target_date.isoformat()

        if not dry_run:
            claimed = await try_claim(db, settings_row.id, target_str)
            if claimed is None:
                logger.warning(
                    "Attendance reconciliation already ran for %s, skipping", target_str
                )
                return ReconciliationResult(
                    skipped=True,
                    target_date=target_date,
                    message="Job already executed for this date.",
                )
            settings_row = claimed

        logger.info("%sReconciling attendance for %s (%s)", prefix, target_str, zone.key)
        day_start, day_end = attendance_ledger.day_bounds(target_date, zone)

        overrides = await calendar_store.find_overlapping(
            db, (HOLIDAY, WORKING_DAY), target_date, target_date
        )
        holidays = [e for e in overrides if e.type == HOLIDAY]
        forced_working = [e for e in overrides if e.type == WORKING_DAY]
        users = await user_directory.find_active(db)

        result = ReconciliationResult(dry_run=dry_run, target_date=target_date)
        for user in users:
            result.parsed_users += 1

            if await attendance_ledger.exists_for(db, user.id, day_start, day_end):
                result.already_recorded += 1
                continue

            resolution = resolve_obligation(
                target_date,
                user,
                holidays=holidays,
                forced_working_days=forced_working,
                shift_defaults=settings_row.shift_defaults,
            )
            if resolution.obligation is Obligation.NON_WORKING:
                continue
            status = HOLIDAY_STATUS if resolution.obligation is Obligation.HOLIDAY else ABSENT

            if dry_run:
                logger.info(
                    "[DRY RUN] Would mark user %d as %s for %s (%s)",
                    user.id, status, target_str, resolution.reason,
                )
            else:
                await attendance_ledger.create(
                    db,
                    AttendanceRecord(
                        user_id=user.id,
                        shift=user.shift or DEFAULT_RECORD_SHIFT,
                        status=status,
                        check_in_time=None,
                        check_out_time=None,
                        hours_worked=0.0,
                        is_late=False,
                        is_early_leave=False,
                        created_at=day_start,
                    ),
                )
                if status == ABSENT:
                    await user_directory.increment_absent_counter(db, user.id)
                await db.commit()
                logger.info(
                    "Marked user %d as %s for %s (%s)",
                    user.id, status, target_str, resolution.reason,
                )

            if status == ABSENT:
                result.marked_absent += 1
            else:
                result.marked_holiday += 1

        if not dry_run:
            await mark_completed(db, settings_row.id, target_str)

        verb = "Would have marked" if dry_run else "Marked"
        result.message = (
            f"{prefix}Processed {result.parsed_users} users. {verb} "
            f"{result.marked_absent} absent and {result.marked_holiday} on holiday."
        )
        logger.info("Attendance reconciliation completed for %s. %s", target_str, result.message)
        return result

    except TargetDateError as exc:
        logger.warning("Attendance reconciliation refused: %s", exc)
        raise
    except Exception:
        logger.exception("Error in attendance reconciliation job")
        raise
