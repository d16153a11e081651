"""Tests for live check-in / check-out and history."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.user import User


def _today_karachi() -> str:
    return datetime.now(ZoneInfo("Asia/Karachi")).date().isoformat()


@pytest.fixture
async def me(make_user):
    # Matches the id of the overridden current user
    return await make_user("test@example.com", shift="Evening")


@pytest.mark.asyncio
async def test_check_in_creates_present_record(async_client: AsyncClient, db_session, me):
    resp = await async_client.post("/api/v1/attendance/checkin")
    assert resp.status_code == 201
    data = resp.json()
    assert data["user_id"] == me.id
    assert data["status"] == "Present"
    assert data["check_in_time"] is not None
    assert data["check_out_time"] is None

    row = (
        await db_session.execute(
            select(User).where(User.id == me.id).execution_options(populate_existing=True)
        )
    ).scalar_one()
    assert row.present_count == 1


@pytest.mark.asyncio
async def test_double_check_in_rejected(async_client: AsyncClient, me):
    await async_client.post("/api/v1/attendance/checkin")
    resp = await async_client.post("/api/v1/attendance/checkin")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Already checked in today"


@pytest.mark.asyncio
async def test_check_in_closed_on_holiday(async_client: AsyncClient, me):
    today = _today_karachi()
    await async_client.post("/api/v1/calendar", json={
        "title": "Independence Day", "type": "Holiday",
        "start_date": today, "end_date": today,
    })

    resp = await async_client.post("/api/v1/attendance/checkin")
    assert resp.status_code == 400
    assert "Independence Day" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_check_out_records_hours(async_client: AsyncClient, me):
    await async_client.post("/api/v1/attendance/checkin")

    resp = await async_client.post("/api/v1/attendance/checkout")
    assert resp.status_code == 200
    data = resp.json()
    assert data["check_out_time"] is not None
    assert data["hours_worked"] >= 0

    again = await async_client.post("/api/v1/attendance/checkout")
    assert again.status_code == 400
    assert again.json()["detail"] == "Already checked out today"


@pytest.mark.asyncio
async def test_check_out_without_check_in(async_client: AsyncClient, me):
    resp = await async_client.post("/api/v1/attendance/checkout")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "No check-in found for today"


@pytest.mark.asyncio
async def test_history_lists_own_records(async_client: AsyncClient, me):
    assert (await async_client.get("/api/v1/attendance/history")).json() == []

    await async_client.post("/api/v1/attendance/checkin")
    history = await async_client.get("/api/v1/attendance/history")
    assert history.status_code == 200
    assert [r["status"] for r in history.json()] == ["Present"]

    bad = await async_client.get("/api/v1/attendance/history", params={"limit": 0})
    assert bad.status_code == 422
