"""
Budget entity models.

A budget is a yearly allocation for a project and area. ``available`` is the
balance left after requirements draw from it; ``version`` increases whenever
the amount changes.
"""

from datetime import date, datetime
from typing import Optional

from sqlmodel import Field

from mis_compras.core.models.domain.enums import BudgetStatus

from ..base import Base, new_id, utc_now


class BudgetBase(Base):
    """Base fields for budgets."""

    code: str = Field(max_length=64, unique=True, index=True, description="BUD-<year>-<NNN>")
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    amount: float = Field(default=0, description="Allocated amount")
    available: float = Field(default=0, description="Amount not yet committed")
    year: int = Field(index=True)
    expiration_date: Optional[date] = Field(default=None)
    status: str = Field(default=BudgetStatus.pending.value, max_length=32, index=True)
    is_blocked: bool = Field(default=False)
    version: int = Field(default=1)

    project_id: str = Field(foreign_key="projects.id", max_length=64, index=True)
    area_id: str = Field(foreign_key="areas.id", max_length=64, index=True)
    category_id: Optional[str] = Field(default=None, foreign_key="categories.id", max_length=64)
    manager_id: Optional[str] = Field(default=None, foreign_key="users.id", max_length=64, index=True)


class Budget(BudgetBase, table=True):
    """Persistent budget.

    Table: budgets
    """

    __tablename__ = "budgets"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    created_by_id: Optional[str] = Field(default=None, foreign_key="users.id", max_length=64)
    approved_by_id: Optional[str] = Field(default=None, foreign_key="users.id", max_length=64)
    approved_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Budget(code={self.code}, amount={self.amount}, available={self.available}, status={self.status})"


class BudgetSubLeader(Base, table=True):
    """Users who share visibility of a budget with its manager.

    Table: budget_sub_leaders
    """

    __tablename__ = "budget_sub_leaders"
    __table_args__ = ({"extend_existing": True},)

    budget_id: str = Field(foreign_key="budgets.id", primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", primary_key=True, max_length=64)
