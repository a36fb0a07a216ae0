"""
User repository.

Data access for user accounts: lookup by email, filtered listing for the
administration screens and role-based recipient lists for notifications.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.adjustments import BudgetAdjustment
from ..entities.budgets import Budget, BudgetSubLeader
from ..entities.invoices import Invoice
from ..entities.notifications import Notification
from ..entities.requirements import HistoryLog, Requirement
from ..entities.users import User
from .base import QueryBuilder, SqlRepository


class UserRepository(SqlRepository[User]):
    """Repository for user accounts."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup by login email."""
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def search(
        self,
        role: Optional[str] = None,
        area_id: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[User]:
        """List users matching the given filters, ordered by name.

        Args:
            role: Exact role
            area_id: Area the user belongs to
            is_active: Account state
            search: Case-insensitive fragment of the name or email
        """
        stmt = QueryBuilder.apply_filters(
            select(User), User, {"role": role, "area_id": area_id, "is_active": is_active}
        )
        if search:
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))
        result = await self.session.execute(stmt.order_by(User.name))
        return list(result.scalars().all())

    async def list_by_roles(self, roles: Iterable[str], active_only: bool = True) -> List[User]:
        """Users holding any of ``roles``."""
        stmt = select(User).where(User.role.in_(list(roles)))
        if active_only:
            stmt = stmt.where(User.is_active == True)  # noqa: E712
        result = await self.session.execute(stmt.order_by(User.name))
        return list(result.scalars().all())

    async def list_active(self) -> List[User]:
        stmt = select(User).where(User.is_active == True).order_by(User.name)  # noqa: E712
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_all(self) -> List[User]:
        result = await self.session.execute(select(User).order_by(User.name))
        return list(result.scalars().all())

    async def existing_ids(self, user_ids: Iterable[str]) -> List[str]:
        ids = list(user_ids)
        if not ids:
            return []
        result = await self.session.execute(select(User.id).where(User.id.in_(ids)))
        return list(result.scalars().all())

    async def count_references(self, user_id: str) -> int:
        """Records that would be orphaned by deleting the user (requirements, budgets, ...)."""
        columns = (
            Requirement.created_by_id,
            HistoryLog.user_id,
            Budget.manager_id,
            Budget.created_by_id,
            BudgetAdjustment.requested_by_id,
            Invoice.created_by_id,
        )
        total = 0
        for column in columns:
            result = await self.session.execute(select(func.count()).where(column == user_id))
            total += int(result.scalar_one())
        return total

    async def delete_account(self, user: User) -> None:
        """Delete a user with their notifications and sub-leader links."""
        await self.session.execute(sa_delete(Notification).where(Notification.user_id == user.id))
        await self.session.execute(sa_delete(BudgetSubLeader).where(BudgetSubLeader.user_id == user.id))
        await self.session.delete(user)
        await self.session.flush()
