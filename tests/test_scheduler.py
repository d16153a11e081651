"""Tests for the daily reconciliation trigger."""

import asyncio
from datetime import datetime, time, timedelta, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import select

from app.models.attendance import AttendanceRecord
from app.services import scheduler
from app.services.scheduler import (next_run_at, parse_run_time,
                                    reconciliation_worker_loop,
                                    run_scheduled_reconciliation)

KARACHI = ZoneInfo("Asia/Karachi")


def test_parse_run_time():
    assert parse_run_time("00:30") == time(0, 30)
    assert parse_run_time("23:05") == time(23, 5)


def test_next_run_later_today():
    now = datetime(2026, 10, 12, 18, 0, tzinfo=timezone.utc)  # 23:00 Karachi
    fire_at = next_run_at(now, time(23, 30), KARACHI)
    assert fire_at == datetime(2026, 10, 12, 23, 30, tzinfo=KARACHI)


def test_next_run_rolls_to_tomorrow_once_passed():
    now = datetime(2026, 10, 12, 19, 30, tzinfo=timezone.utc)  # exactly 00:30 Karachi on the 13th
    fire_at = next_run_at(now, time(0, 30), KARACHI)
    assert fire_at == datetime(2026, 10, 14, 0, 30, tzinfo=KARACHI)


def test_next_run_uses_local_wall_clock_across_dst():
    berlin = ZoneInfo("Europe/Berlin")
    # Sat 24 Oct 2026 12:00 CEST; clocks go back on the 25th
    now = datetime(2026, 10, 24, 10, 0, tzinfo=timezone.utc)
    fire_at = next_run_at(now, time(0, 30), berlin)
    assert fire_at.astimezone(timezone.utc) == datetime(2026, 10, 24, 22, 30, tzinfo=timezone.utc)
    after_switch = next_run_at(fire_at, time(0, 30), berlin)
    assert after_switch.astimezone(timezone.utc) == datetime(2026, 10, 25, 23, 30, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_scheduled_run_writes_and_claims(session_factory, make_user):
    user = await make_user("cron@example.com")

    result = await run_scheduled_reconciliation(session_factory)

    assert result is not None
    assert result.skipped is False
    async with session_factory() as db:
        records = (await db.execute(select(AttendanceRecord))).scalars().all()
    # Depends on today's weekday, but never more than one record per user
    assert len(records) <= 1
    assert all(r.user_id == user.id for r in records)

    again = await run_scheduled_reconciliation(session_factory)
    assert again is not None
    assert again.skipped is True


@pytest.mark.asyncio
async def test_scheduled_run_failure_is_logged_not_raised(session_factory, caplog):
    async def _boom(_db):
        raise RuntimeError("storage down")

    with patch.object(scheduler, "run_reconciliation", _boom):
        result = await run_scheduled_reconciliation(session_factory)

    assert result is None
    assert "Scheduled attendance reconciliation failed" in caplog.text


@pytest.mark.asyncio
async def test_worker_loop_fires_then_stops(session_factory):
    stop_event = asyncio.Event()
    calls = []

    async def _fake_run(factory):
        calls.append(factory)
        stop_event.set()
        return None

    # Clock sits just before 00:30 Karachi
    fire_at = datetime(2026, 10, 12, 19, 30, tzinfo=timezone.utc)

    def clock():
        return fire_at - timedelta(milliseconds=5)

    with patch.object(scheduler, "run_scheduled_reconciliation", _fake_run), \
            patch.object(scheduler.settings, "SCHEDULER_TIMEZONE", "Asia/Karachi"), \
            patch.object(scheduler.settings, "SCHEDULER_RUN_TIME", "00:30"):
        await asyncio.wait_for(
            reconciliation_worker_loop(stop_event, session_factory, clock=clock), timeout=5
        )

    assert calls == [session_factory]


@pytest.mark.asyncio
async def test_worker_loop_exits_when_stopped_before_firing(session_factory):
    stop_event = asyncio.Event()
    stop_event.set()

    with patch.object(scheduler, "run_scheduled_reconciliation") as job:
        await asyncio.wait_for(reconciliation_worker_loop(stop_event, session_factory), timeout=5)

    job.assert_not_called()


@pytest.mark.asyncio
async def test_worker_loop_does_not_refire_after_early_wake(session_factory):
    stop_event = asyncio.Event()
    calls = []

    async def _fake_run(factory):
        calls.append(factory)
        return None

    # Wall clock stays just short of 00:30 Karachi even after the run
    fire_at = datetime(2026, 10, 12, 19, 30, tzinfo=timezone.utc)

    def clock():
        return fire_at - timedelta(milliseconds=5)

    with patch.object(scheduler, "run_scheduled_reconciliation", _fake_run), \
            patch.object(scheduler.settings, "SCHEDULER_TIMEZONE", "Asia/Karachi"), \
            patch.object(scheduler.settings, "SCHEDULER_RUN_TIME", "00:30"):
        task = asyncio.create_task(
            reconciliation_worker_loop(stop_event, session_factory, clock=clock)
        )
        for _ in range(100):
            if calls:
                break
            await asyncio.sleep(0.01)
        await asyncio.sleep(0.2)
        stop_event.set()
        await asyncio.wait_for(task, timeout=5)

    assert len(calls) == 1
