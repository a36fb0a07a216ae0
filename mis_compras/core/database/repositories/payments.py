"""Payment repository."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.payments import Payment
from .base import SqlRepository


class PaymentRepository(SqlRepository[Payment]):
    """Repository for requirement payments."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Payment)

    async def for_requirement(self, requirement_id: str) -> List[Payment]:
        stmt = select(Payment).where(Payment.requirement_id == requirement_id).order_by(Payment.payment_number)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_requirement(self, requirement_id: str) -> int:
        return await self.count({"requirement_id": requirement_id})

    async def total_paid(self, requirement_id: str, exclude_payment_id: Optional[str] = None) -> float:
        """Sum of payments on a requirement, optionally leaving one payment out."""
        stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.requirement_id == requirement_id)
        if exclude_payment_id:
            stmt = stmt.where(Payment.id != exclude_payment_id)
        result = await self.session.execute(stmt)
        return float(result.scalar_one())

    async def next_number(self, requirement_id: str) -> int:
        stmt = select(func.max(Payment.payment_number)).where(Payment.requirement_id == requirement_id)
        result = await self.session.execute(stmt)
        return (result.scalar_one() or 0) + 1
