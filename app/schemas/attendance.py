"""Pydantic schemas for attendance records and attendance settings."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, field_validator


# ── Attendance ──────────────────────────────────────────────────────
class AttendanceRecordRead(BaseModel):
    id: int
    user_id: int
    shift: str
    status: str
    check_in_time: datetime | None
    check_out_time: datetime | None
    hours_worked: float
    is_late: bool
    is_early_leave: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


# ── Attendance Settings ────────────────────────────────────────────
class AttendanceSettingsRead(BaseModel):
    timezone: str
    shift_defaults: dict[str, list[int]]
    last_automated_run_date: str | None
    last_completed_run_date: str | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class AttendanceSettingsUpdate(BaseModel):
    timezone: str | None = None
    shift_defaults: dict[str, list[int]] | None = None

    @field_validator("timezone")
    @classmethod
    def _timezone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown IANA timezone: {v!r}")
        return v

    @field_validator("shift_defaults")
    @classmethod
    def _shift_defaults(cls, v: dict[str, list[int]] | None) -> dict[str, list[int]] | None:
        if v is None:
            return v
        for shift, days in v.items():
            if any(d < 0 or d > 6 for d in days):
                raise ValueError(
                    f"Working days for {shift} must be between 0 (Sunday) and 6 (Saturday)"
                )
        return {shift: sorted(set(days)) for shift, days in v.items()}


# ── Health ─────────────────────────────────────────────────────────
class HealthResponse(BaseModel):
    db: bool


# ── Generic ────────────────────────────────────────────────────────
class LogoutResponse(BaseModel):
    message: str


class DeleteResponse(BaseModel):
    success: bool
    message: str
