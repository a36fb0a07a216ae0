"""Budget adjustment repository."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.adjustments import AdjustmentSource, BudgetAdjustment
from .base import QueryBuilder, SqlRepository


class AdjustmentRepository(SqlRepository[BudgetAdjustment]):
    """Repository for budget adjustments and their transfer sources."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, BudgetAdjustment)

    async def search(
        self,
        status: Optional[str] = None,
        year: Optional[int] = None,
        requested_by_id: Optional[str] = None,
        oldest_first: bool = False,
    ) -> List[BudgetAdjustment]:
        """List adjustments, newest first unless ``oldest_first``.

        ``year`` matches the year the adjustment was requested in.
        """
        stmt = QueryBuilder.apply_filters(
            select(BudgetAdjustment), BudgetAdjustment, {"status": status, "requested_by_id": requested_by_id}
        )
        if year is not None:
            stmt = stmt.where(BudgetAdjustment.code.like(f"ADJ-{year}-%"))
        order = BudgetAdjustment.requested_at.asc() if oldest_first else BudgetAdjustment.requested_at.desc()
        result = await self.session.execute(stmt.order_by(order))
        return list(result.scalars().all())

    async def next_sequence(self, year: int) -> int:
        """Sequence number for the next ``ADJ-<year>-<NNNN>`` code."""
        result = await self.session.execute(
            select(BudgetAdjustment.code).where(BudgetAdjustment.code.like(f"ADJ-{year}-%"))
        )
        numbers = [int(code.rsplit("-", 1)[1]) for code in result.scalars().all() if code.rsplit("-", 1)[1].isdigit()]
        return max(numbers, default=0) + 1

    async def add_source(self, adjustment_id: str, budget_id: str, amount: float) -> AdjustmentSource:
        source = AdjustmentSource(adjustment_id=adjustment_id, budget_id=budget_id, amount=amount)
        self.session.add(source)
        await self.session.flush()
        return source

    async def sources(self, adjustment_id: str) -> List[AdjustmentSource]:
        stmt = select(AdjustmentSource).where(AdjustmentSource.adjustment_id == adjustment_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
