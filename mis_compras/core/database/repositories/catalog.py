"""
Catalog repositories.

Areas, projects, categories, suppliers and the system configuration row,
plus the usage counts the administration screens need before deleting.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.budgets import Budget
from ..entities.catalog import Area, Category, Project, Supplier, SystemConfig
from ..entities.invoices import Invoice
from ..entities.requirements import Requirement
from ..entities.users import User
from .base import SqlRepository


async def _count(session: AsyncSession, column, value) -> int:
    stmt = select(func.count()).where(column == value)
    result = await session.execute(stmt)
    return int(result.scalar_one())


class AreaRepository(SqlRepository[Area]):
    """Repository for areas."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Area)

    async def get_by_name(self, name: str) -> Optional[Area]:
        stmt = select(Area).where(func.lower(Area.name) == name.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_ordered(self) -> List[Area]:
        result = await self.session.execute(select(Area).order_by(Area.name))
        return list(result.scalars().all())

    async def count_users(self, area_id: str) -> int:
        return await _count(self.session, User.area_id, area_id)


class ProjectRepository(SqlRepository[Project]):
    """Repository for projects."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Project)

    async def get_by_name(self, name: str) -> Optional[Project]:
        stmt = select(Project).where(func.lower(Project.name) == name.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_code(self, code: str) -> Optional[Project]:
        result = await self.session.execute(select(Project).where(Project.code == code))
        return result.scalars().first()

    async def list_ordered(self) -> List[Project]:
        result = await self.session.execute(select(Project).order_by(Project.name))
        return list(result.scalars().all())

    async def count_requirements(self, project_id: str) -> int:
        return await _count(self.session, Requirement.project_id, project_id)

    async def count_budgets(self, project_id: str) -> int:
        return await _count(self.session, Budget.project_id, project_id)


class CategoryRepository(SqlRepository[Category]):
    """Repository for budget categories."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Category)

    async def get_by_code(self, code: str) -> Optional[Category]:
        result = await self.session.execute(select(Category).where(Category.code == code))
        return result.scalars().first()

    async def list_ordered(self) -> List[Category]:
        result = await self.session.execute(select(Category).order_by(Category.code))
        return list(result.scalars().all())

    async def count_budgets(self, category_id: str) -> int:
        return await _count(self.session, Budget.category_id, category_id)


class SupplierRepository(SqlRepository[Supplier]):
    """Repository for suppliers."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Supplier)

    async def get_by_tax_id(self, tax_id: str) -> Optional[Supplier]:
        result = await self.session.execute(select(Supplier).where(Supplier.tax_id == tax_id))
        return result.scalars().first()

    async def list_ordered(self, active_only: bool = False) -> List[Supplier]:
        stmt = select(Supplier)
        if active_only:
            stmt = stmt.where(Supplier.is_active == True)  # noqa: E712
        result = await self.session.execute(stmt.order_by(Supplier.name))
        return list(result.scalars().all())

    async def count_requirements(self, supplier_id: str) -> int:
        return await _count(self.session, Requirement.supplier_id, supplier_id)

    async def count_invoices(self, supplier_id: str) -> int:
        return await _count(self.session, Invoice.supplier_id, supplier_id)


class SystemConfigRepository(SqlRepository[SystemConfig]):
    """Repository for the single system configuration row."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SystemConfig)

    async def get_or_create(self, default_year: int) -> SystemConfig:
        """Return row 1, staging a default row on first access."""
        config = await self.get_by_id(1)
        if config is None:
            config = await self.create(SystemConfig(id=1, active_year=default_year))
        return config
