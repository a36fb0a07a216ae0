"""Notification repository."""

from __future__ import annotations

from typing import List

from sqlalchemy import func, update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.notifications import Notification
from .base import SqlRepository


class NotificationRepository(SqlRepository[Notification]):
    """Repository for in-app notifications."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Notification)

    async def for_user(self, user_id: str, limit: int = 50) -> List[Notification]:
        stmt = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def unread_count(self, user_id: str) -> int:
        stmt = select(func.count()).where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of ``user_id`` as read; returns how many changed."""
        stmt = (
            sa_update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(result.rowcount or 0)
