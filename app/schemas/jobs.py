"""Pydantic schemas for the attendance reconciliation job."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class ReconciliationResult(BaseModel):
    success: bool = True
    dry_run: bool = False
    skipped: bool = False
    target_date: date | None = None
    parsed_users: int = 0
    marked_absent: int = 0
    marked_holiday: int = 0
    already_recorded: int = 0
    message: str | None = None


class ReconciliationStatus(BaseModel):
    timezone: str
    last_automated_run_date: str | None
    last_completed_run_date: str | None
    # Claimed but never finished (crash or error mid-run)
    incomplete: bool


class CronResponse(BaseModel):
    success: bool
    message: str
    data: ReconciliationResult | None = None
    error: str | None = None
