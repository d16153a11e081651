"""Pydantic schemas for calendar entries."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, field_validator, model_validator

from app.models.calendar import CALENDAR_STATUSES, CALENDAR_TYPES

_NON_NULLABLE = ("title", "type", "start_date", "end_date", "is_full_day", "status")


class CalendarEntryCreate(BaseModel):
    title: str
    description: str | None = None
    type: str = "Event"
    start_date: date
    end_date: date
    is_full_day: bool = True
    status: str = "Upcoming"
    location: str | None = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("type")
    @classmethod
    def _type(cls, v: str) -> str:
        if v not in CALENDAR_TYPES:
            raise ValueError(f"Type must be one of: {', '.join(CALENDAR_TYPES)}")
        return v

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        if v not in CALENDAR_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(CALENDAR_STATUSES)}")
        return v

    @model_validator(mode="after")
    def _range(self) -> CalendarEntryCreate:
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class CalendarEntryUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    type: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    is_full_day: bool | None = None
    status: str | None = None
    location: str | None = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Title is required")
        return v

    @field_validator("type")
    @classmethod
    def _type(cls, v: str | None) -> str | None:
        if v is not None and v not in CALENDAR_TYPES:
            raise ValueError(f"Type must be one of: {', '.join(CALENDAR_TYPES)}")
        return v

    @field_validator("status")
    @classmethod
    def _status(cls, v: str | None) -> str | None:
        if v is not None and v not in CALENDAR_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(CALENDAR_STATUSES)}")
        return v

    @model_validator(mode="after")
    def _no_null_required(self) -> CalendarEntryUpdate:
        # Only description and location may be cleared
        for field in _NON_NULLABLE:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class CalendarEntryRead(BaseModel):
    id: int
    title: str
    description: str | None
    type: str
    start_date: date
    end_date: date
    is_full_day: bool
    status: str
    location: str | None
    created_by: int | None
    created_at: datetime | None

    model_config = {"from_attributes": True}
