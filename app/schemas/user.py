"""Pydantic schemas for the user directory."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator

from app.models.user import SHIFTS

_VALID_ROLES = {"admin", "manager", "member", "readonly"}


def _check_working_days(v: list[int] | None) -> list[int] | None:
    if v is None:
        return None
    if any(d < 0 or d > 6 for d in v):
        raise ValueError("Working days must be between 0 (Sunday) and 6 (Saturday)")
    return sorted(set(v))


def _check_shift(v: str | None) -> str | None:
    if v is not None and v not in SHIFTS:
        raise ValueError(f"Shift must be one of: {', '.join(SHIFTS)}")
    return v


class UserCreate(BaseModel):
    email: str
    password: str
    full_name: str | None = None
    role: str = "member"
    shift: str | None = None
    working_days: list[int] | None = None

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str) -> str:
        if v not in _VALID_ROLES:
            raise ValueError(f"Role must be one of: {_VALID_ROLES}")
        return v

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v

    @field_validator("shift")
    @classmethod
    def _validate_shift(cls, v: str | None) -> str | None:
        return _check_shift(v)

    @field_validator("working_days")
    @classmethod
    def _validate_working_days(cls, v: list[int] | None) -> list[int] | None:
        return _check_working_days(v)


class UserRead(BaseModel):
    id: int
    email: str
    full_name: str | None
    role: str
    is_active: bool
    shift: str | None
    working_days: list[int] | None
    present_count: int
    absent_count: int
    created_at: datetime | None

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    full_name: str | None = None
    role: str | None = None
    is_active: bool | None = None
    password: str | None = None
    shift: str | None = None
    working_days: list[int] | None = None

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str | None) -> str | None:
        if v is not None and v not in _VALID_ROLES:
            raise ValueError(f"Role must be one of: {_VALID_ROLES}")
        return v

    @field_validator("shift")
    @classmethod
    def _validate_shift(cls, v: str | None) -> str | None:
        return _check_shift(v)

    @field_validator("working_days")
    @classmethod
    def _validate_working_days(cls, v: list[int] | None) -> list[int] | None:
        return _check_working_days(v)
