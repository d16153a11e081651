"""
Reconciliation job triggers.

- ``POST /jobs/attendance/run``: admin manual trigger, optionally a dry run
  or an explicit target date.
- ``GET /jobs/attendance/status``: claim / completion markers.
- ``GET /cron/attendance``: entry point for an external scheduler
  (serverless cron), authorised with ``Authorization: Bearer <CRON_SECRET>``.

All live triggers share the job's once-per-date claim, so a manual run and
the nightly cron for the same date never both write.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, require_admin
from app.core.config import settings
from app.core.security import verify_cron_secret
from app.models.user import User
from app.schemas.jobs import (CronResponse, ReconciliationResult,
                              ReconciliationStatus)
from app.services.reconciliation import run_reconciliation
from app.services.settings_store import get_or_create_settings

router = APIRouter(tags=["jobs"])
logger = logging.getLogger(__name__)


@router.post("/jobs/attendance/run", response_model=ReconciliationResult)
async def trigger_reconciliation(
    dry_run: bool = False,
    target_date: date | None = None,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ReconciliationResult:
    """Run the attendance reconciliation now.

    ``target_date`` defaults to yesterday and must be a day that has ended
    in the deployment timezone (400 otherwise).
    """
    logger.info(
        "Manual attendance reconciliation by user %d (dry_run=%s, target=%s)",
        admin.id, dry_run, target_date,
    )
    return await run_reconciliation(db, target_date=target_date, dry_run=dry_run)


@router.get("/jobs/attendance/status", response_model=ReconciliationStatus)
async def reconciliation_status(
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ReconciliationStatus:
    row = await get_or_create_settings(db)
    return ReconciliationStatus(
        timezone=row.timezone,
        last_automated_run_date=row.last_automated_run_date,
        last_completed_run_date=row.last_completed_run_date,
        incomplete=row.last_automated_run_date is not None
        and row.last_automated_run_date != row.last_completed_run_date,
    )


@router.get("/cron/attendance", response_model=CronResponse)
async def cron_reconciliation(
    dry_run: bool = False,
    authorization: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> CronResponse | JSONResponse:
    if not settings.CRON_SECRET:
        raise HTTPException(status_code=503, detail="Cron endpoint is not configured")
    if not verify_cron_secret(authorization):
        raise HTTPException(status_code=401, detail="Unauthorized")

    logger.info("Starting attendance cron job%s", " (DRY RUN)" if dry_run else "")
    try:
        result = await run_reconciliation(db, dry_run=dry_run)
    except Exception as exc:
        logger.error("Cron job error: %s", exc)
        body = CronResponse(success=False, message="Cron job failed", error=str(exc))
        return JSONResponse(status_code=500, content=body.model_dump(mode="json"))

    return CronResponse(
        success=True,
        message="Attendance job completed successfully",
        data=result,
    )
