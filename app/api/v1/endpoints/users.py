"""
User directory CRUD.

- GET operations require any authenticated user.
- POST / PUT / DELETE operations require admin role.
- DELETE is a soft delete: the user drops out of the directory (and out of
  attendance reconciliation) but their attendance history is kept.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_active_user, get_db, require_admin
from app.core.security import get_password_hash
from app.models.user import User
from app.schemas.attendance import DeleteResponse
from app.schemas.user import UserCreate, UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


async def _get_live_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(
        select(User).where(User.id == user_id, User.deleted_at.is_(None))
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("", response_model=list[UserRead])
async def list_users(
    skip: int = 0,
    limit: int = Query(default=50, le=500),
    search: str | None = None,
    shift: str | None = None,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[User]:
    query = (
        select(User)
        .where(User.deleted_at.is_(None))
        .order_by(User.full_name, User.id)
        .offset(skip)
        .limit(limit)
    )
    if search:
        # Escape SQL LIKE metacharacters to prevent wildcard injection
        safe_search = search.replace("%", r"\%").replace("_", r"\_")
        query = query.where(User.full_name.ilike(f"%{safe_search}%", escape="\\"))
    if shift:
        query = query.where(User.shift == shift)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> User:
    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email already registered")

    data = body.model_dump(exclude={"password"})
    user = User(**data, hashed_password=get_password_hash(body.password))
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Created user %d (%s, shift %s)", user.id, user.email, user.shift)
    return user


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> User:
    return await _get_live_user(db, user_id)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> User:
    user = await _get_live_user(db, user_id)

    changes = body.model_dump(exclude_unset=True)
    password = changes.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)
    for field, value in changes.items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    logger.info("Updated user %d: %s", user_id, sorted(changes))
    return user


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> DeleteResponse:
    """Soft-delete a user. Attendance history is preserved."""
    user = await _get_live_user(db, user_id)
    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    user.deleted_at = datetime.now(timezone.utc)
    await db.commit()
    logger.info("Soft-deleted user %d (%s)", user_id, user.email)
    return DeleteResponse(success=True, message=f"User '{user.email}' deleted")
