"""
User directory — the active users the reconciliation job iterates over.
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User


async def find_active(db: AsyncSession) -> list[User]:
    """Every user that has not been soft-deleted, in id order."""
    result = await db.execute(
        select(User).where(User.deleted_at.is_(None)).order_by(User.id)
    )
    return list(result.scalars().all())


async def increment_absent_counter(db: AsyncSession, user_id: int) -> None:
    # Server-side increment; no read-modify-write in Python
    await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(absent_count=User.absent_count + 1)
        .execution_options(synchronize_session=False)
    )


async def increment_present_counter(db: AsyncSession, user_id: int) -> None:
    await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(present_count=User.present_count + 1)
        .execution_options(synchronize_session=False)
    )
