"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (attendance, auth, calendar, health, jobs,
                                  settings, users)

api_router = APIRouter()

# Auth (login, refresh, logout, me)
api_router.include_router(auth.router)

# User directory
api_router.include_router(users.router)

# Calendar overrides, attendance settings
api_router.include_router(calendar.router)
api_router.include_router(settings.router)

# Live check-in / check-out
api_router.include_router(attendance.router)

# Reconciliation triggers (manual + cron)
api_router.include_router(jobs.router)

api_router.include_router(health.router)
