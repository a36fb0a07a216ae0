"""
Budget repository.

Besides CRUD this covers the role-scoped listings (a plain user only sees the
budgets they manage or co-lead), sub-leader membership and the per-year code
sequence.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.adjustments import AdjustmentSource, BudgetAdjustment
from ..entities.budgets import Budget, BudgetSubLeader
from ..entities.requirements import Requirement
from .base import QueryBuilder, SqlRepository


class BudgetRepository(SqlRepository[Budget]):
    """Repository for budgets and their sub-leaders."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Budget)

    def _visible_to(self, stmt, user_id: str):
        """Restrict ``stmt`` to budgets ``user_id`` manages or co-leads."""
        sub_led = select(BudgetSubLeader.budget_id).where(BudgetSubLeader.user_id == user_id)
        return stmt.where(or_(Budget.manager_id == user_id, Budget.id.in_(sub_led)))

    async def search(
        self,
        year: Optional[int] = None,
        project_id: Optional[str] = None,
        area_id: Optional[str] = None,
        status: Optional[str] = None,
        visible_to_user_id: Optional[str] = None,
    ) -> List[Budget]:
        """List budgets, newest first.

        Args:
            year: Budget year
            project_id: Owning project
            area_id: Owning area
            status: Approval status
            visible_to_user_id: When set, only budgets this user manages or
                is a sub-leader of
        """
        stmt = QueryBuilder.apply_filters(
            select(Budget),
            Budget,
            {"year": year, "project_id": project_id, "area_id": area_id, "status": status},
        )
        if visible_to_user_id:
            stmt = self._visible_to(stmt, visible_to_user_id)
        result = await self.session.execute(stmt.order_by(Budget.created_at.desc()))
        return list(result.scalars().all())

    async def list_pending(self, manager_id: Optional[str] = None) -> List[Budget]:
        stmt = select(Budget).where(Budget.status == "PENDING")
        if manager_id:
            stmt = stmt.where(Budget.manager_id == manager_id)
        result = await self.session.execute(stmt.order_by(Budget.created_at.desc()))
        return list(result.scalars().all())

    async def get_by_code(self, code: str) -> Optional[Budget]:
        result = await self.session.execute(select(Budget).where(Budget.code == code))
        return result.scalars().first()

    async def codes_like(self, prefix: str) -> List[str]:
        result = await self.session.execute(select(Budget.code).where(Budget.code.like(f"{prefix}%")))
        return list(result.scalars().all())

    async def count_for_year(self, year: int) -> int:
        return await self.count({"year": year})

    async def distinct_years(self) -> List[int]:
        result = await self.session.execute(select(Budget.year).distinct().order_by(Budget.year.desc()))
        return list(result.scalars().all())

    async def get_many(self, budget_ids: Iterable[str]) -> List[Budget]:
        ids = list(budget_ids)
        if not ids:
            return []
        result = await self.session.execute(select(Budget).where(Budget.id.in_(ids)))
        return list(result.scalars().all())

    # ----- sub-leaders -----

    async def sub_leader_ids(self, budget_id: str) -> List[str]:
        stmt = select(BudgetSubLeader.user_id).where(BudgetSubLeader.budget_id == budget_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def is_sub_leader(self, budget_id: str, user_id: str) -> bool:
        link = await self.session.get(BudgetSubLeader, (budget_id, user_id))
        return link is not None

    async def replace_sub_leaders(self, budget_id: str, user_ids: Iterable[str]) -> None:
        await self.session.execute(sa_delete(BudgetSubLeader).where(BudgetSubLeader.budget_id == budget_id))
        for user_id in dict.fromkeys(user_ids):
            self.session.add(BudgetSubLeader(budget_id=budget_id, user_id=user_id))
        await self.session.flush()

    # ----- usage -----

    async def count_requirements(self, budget_id: str) -> int:
        stmt = select(func.count()).where(Requirement.budget_id == budget_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def recent_requirements(self, budget_id: str, limit: int = 20) -> List[Requirement]:
        stmt = (
            select(Requirement)
            .where(Requirement.budget_id == budget_id)
            .order_by(Requirement.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def adjustments_for(self, budget_id: str) -> List[BudgetAdjustment]:
        stmt = (
            select(BudgetAdjustment)
            .where(BudgetAdjustment.budget_id == budget_id)
            .order_by(BudgetAdjustment.requested_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_with_links(self, budget: Budget) -> None:
        """Delete a budget together with its sub-leader links and adjustments."""
        adjustment_ids = select(BudgetAdjustment.id).where(BudgetAdjustment.budget_id == budget.id)
        await self.session.execute(
            sa_delete(AdjustmentSource).where(
                or_(AdjustmentSource.budget_id == budget.id, AdjustmentSource.adjustment_id.in_(adjustment_ids))
            )
        )
        await self.session.execute(sa_delete(BudgetAdjustment).where(BudgetAdjustment.budget_id == budget.id))
        await self.session.execute(sa_delete(BudgetSubLeader).where(BudgetSubLeader.budget_id == budget.id))
        await self.session.delete(budget)
        await self.session.flush()
