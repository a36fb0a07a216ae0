"""
Requirement repository.

Requirements own three child collections (attachments, history log and
payments) plus the notifications that point at them; deleting a requirement
removes all of them in the same flush.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, or_, update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.invoices import Invoice
from ..entities.notifications import Notification
from ..entities.payments import Payment
from ..entities.requirements import Attachment, HistoryLog, Requirement
from .base import QueryBuilder, SqlRepository


class RequirementRepository(SqlRepository[Requirement]):
    """Repository for requirements, their attachments and history log."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Requirement)

    async def search(
        self,
        created_by_id: Optional[str] = None,
        year: Optional[int] = None,
        include_asientos: bool = True,
        asientos_only: bool = False,
        status: Optional[str] = None,
        area_id: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[Requirement], int]:
        """Filter requirements, newest first.

        Args:
            created_by_id: Only requirements raised by this user
            year: Requirement year
            include_asientos: Include pre-approved entries
            asientos_only: Only pre-approved entries
            status: Approval status
            area_id: Requesting area
            search: Case-insensitive fragment of the title or description
            limit: Page size
            offset: Rows to skip

        Returns:
            The requested page and the total number of matching rows
        """
        stmt = QueryBuilder.apply_filters(
            select(Requirement),
            Requirement,
            {"created_by_id": created_by_id, "year": year, "status": status, "area_id": area_id},
        )
        if asientos_only:
            stmt = stmt.where(Requirement.is_asiento == True)  # noqa: E712
        elif not include_asientos:
            stmt = stmt.where(Requirement.is_asiento == False)  # noqa: E712
        if search:
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(
                or_(func.lower(Requirement.title).like(pattern), func.lower(Requirement.description).like(pattern))
            )

        total = int((await self.session.execute(QueryBuilder.count_of(stmt))).scalar_one())
        stmt = QueryBuilder.apply_pagination(stmt.order_by(Requirement.created_at.desc()), limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    # ----- attachments -----

    async def add_attachment(self, requirement_id: str, file_name: str, file_url: str) -> Attachment:
        attachment = Attachment(requirement_id=requirement_id, file_name=file_name, file_url=file_url)
        self.session.add(attachment)
        await self.session.flush()
        return attachment

    async def attachments(self, requirement_id: str) -> List[Attachment]:
        stmt = select(Attachment).where(Attachment.requirement_id == requirement_id).order_by(Attachment.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # ----- history -----

    async def add_log(self, requirement_id: str, action: str, user_id: str, details: Optional[str] = None) -> HistoryLog:
        log = HistoryLog(requirement_id=requirement_id, action=action, user_id=user_id, details=details)
        self.session.add(log)
        await self.session.flush()
        return log

    async def logs(self, requirement_id: str) -> List[HistoryLog]:
        stmt = select(HistoryLog).where(HistoryLog.requirement_id == requirement_id).order_by(HistoryLog.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # ----- deletion -----

    async def delete_cascade(self, requirement: Requirement) -> None:
        """Delete a requirement with its logs, attachments, payments and notifications.

        Invoices are kept and merely unlinked.
        """
        requirement_id = requirement.id
        await self.session.execute(sa_delete(HistoryLog).where(HistoryLog.requirement_id == requirement_id))
        await self.session.execute(sa_delete(Attachment).where(Attachment.requirement_id == requirement_id))
        await self.session.execute(sa_delete(Payment).where(Payment.requirement_id == requirement_id))
        await self.session.execute(sa_delete(Notification).where(Notification.requirement_id == requirement_id))
        await self.session.execute(
            sa_update(Invoice).where(Invoice.requirement_id == requirement_id).values(requirement_id=None)
        )
        await self.session.delete(requirement)
        await self.session.flush()
