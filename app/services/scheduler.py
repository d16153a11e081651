"""
In-process daily trigger for the reconciliation job.

Sleeps until the configured wall-clock time in ``SCHEDULER_TIMEZONE``, runs
the job in a fresh session and goes back to sleep. Failures are logged and
the loop carries on to the next day; the job's own claim keeps a restart or
an overlapping external cron from processing the same date twice.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from contextlib import suppress
from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.schemas.jobs import ReconciliationResult
from app.services.reconciliation import run_reconciliation

logger = logging.getLogger(__name__)


def parse_run_time(value: str) -> time:
    hour, minute = value.split(":")
    return time(hour=int(hour), minute=int(minute))


def next_run_at(now: datetime, run_time: time, zone: ZoneInfo) -> datetime:
    """First instant strictly after ``now`` whose wall clock in ``zone`` reads ``run_time``."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local_now = now.astimezone(zone)
    candidate = datetime.combine(local_now.date(), run_time, tzinfo=zone)
    if candidate <= local_now:
        candidate = datetime.combine(local_now.date() + timedelta(days=1), run_time, tzinfo=zone)
    return candidate


async def run_scheduled_reconciliation(
    session_factory: async_sessionmaker[AsyncSession],
) -> ReconciliationResult | None:
    """Run one live reconciliation; returns ``None`` if it failed."""
    async with session_factory() as db:
        try:
            return await run_reconciliation(db)
        except Exception:
            logger.error("Scheduled attendance reconciliation failed", exc_info=True)
            return None


async def reconciliation_worker_loop(
    stop_event: asyncio.Event,
    session_factory: async_sessionmaker[AsyncSession],
    *,
    clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
) -> None:
    zone = ZoneInfo(settings.SCHEDULER_TIMEZONE)
    run_time = parse_run_time(settings.SCHEDULER_RUN_TIME)
    fire_at: datetime | None = None
    while not stop_event.is_set():
        now = clock()
        # Never earlier than the previous fire time
        fire_at = next_run_at(now if fire_at is None else max(now, fire_at), run_time, zone)
        delay = max(0.0, (fire_at - now).total_seconds())
        logger.info("Next attendance reconciliation at %s", fire_at.isoformat())
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            result = await run_scheduled_reconciliation(session_factory)
            if result is not None:
                logger.info("Scheduled attendance reconciliation: %s", result.model_dump(mode="json"))


def start_scheduler(app: FastAPI, session_factory: async_sessionmaker[AsyncSession]) -> None:
    if getattr(app.state, "reconciliation_task", None) is not None:
        return
    stop_event = asyncio.Event()
    app.state.reconciliation_stop_event = stop_event
    app.state.reconciliation_task = asyncio.create_task(
        reconciliation_worker_loop(stop_event, session_factory)
    )
    logger.info(
        "Attendance scheduler initialised (%s %s daily)",
        settings.SCHEDULER_RUN_TIME,
        settings.SCHEDULER_TIMEZONE,
    )


async def stop_scheduler(app: FastAPI) -> None:
    stop_event: asyncio.Event | None = getattr(app.state, "reconciliation_stop_event", None)
    task: asyncio.Task[None] | None = getattr(app.state, "reconciliation_task", None)
    if stop_event is not None:
        stop_event.set()
    if task is not None:
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
    app.state.reconciliation_stop_event = None
    app.state.reconciliation_task = None
