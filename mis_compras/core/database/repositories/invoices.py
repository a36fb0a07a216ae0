"""Invoice repository."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.invoices import Invoice
from ..entities.requirements import Requirement
from .base import QueryBuilder, SqlRepository


class InvoiceRepository(SqlRepository[Invoice]):
    """Repository for supplier invoices."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Invoice)

    async def search(
        self,
        status: Optional[str] = None,
        supplier_id: Optional[str] = None,
        visible_to_user_id: Optional[str] = None,
    ) -> List[Invoice]:
        """List invoices, newest first.

        Args:
            status: Invoice status
            supplier_id: Issuing supplier
            visible_to_user_id: When set, only invoices this user uploaded or
                that are linked to one of their requirements
        """
        stmt = QueryBuilder.apply_filters(select(Invoice), Invoice, {"status": status, "supplier_id": supplier_id})
        if visible_to_user_id:
            own_requirements = select(Requirement.id).where(Requirement.created_by_id == visible_to_user_id)
            stmt = stmt.where(
                or_(Invoice.created_by_id == visible_to_user_id, Invoice.requirement_id.in_(own_requirements))
            )
        result = await self.session.execute(stmt.order_by(Invoice.created_at.desc()))
        return list(result.scalars().all())
