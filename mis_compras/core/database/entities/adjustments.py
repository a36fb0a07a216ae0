"""
Budget adjustment entity models.

An adjustment either increases a budget with new money or transfers money
into it from one or more source budgets. Nothing moves until a director
approves it.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from mis_compras.core.models.domain.enums import AdjustmentStatus

from ..base import Base, new_id, utc_now


class BudgetAdjustment(Base, table=True):
    """Requested change to a budget's amount.

    Table: budget_adjustments
    """

    __tablename__ = "budget_adjustments"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    code: str = Field(max_length=32, unique=True, index=True, description="ADJ-<year>-<NNNN>")
    type: str = Field(max_length=16, description="INCREASE or TRANSFER")
    budget_id: str = Field(foreign_key="budgets.id", max_length=64, index=True, description="Target budget")
    requested_amount: float
    reason: str = Field(max_length=2000)
    status: str = Field(default=AdjustmentStatus.pending.value, max_length=16, index=True)

    requested_by_id: str = Field(foreign_key="users.id", max_length=64, index=True)
    requested_at: datetime = Field(default_factory=utc_now)
    reviewed_by_id: Optional[str] = Field(default=None, foreign_key="users.id", max_length=64)
    reviewed_at: Optional[datetime] = Field(default=None)
    review_comment: Optional[str] = Field(default=None, max_length=2000)

    def __repr__(self) -> str:
        return f"BudgetAdjustment(code={self.code}, type={self.type}, status={self.status})"


class AdjustmentSource(Base, table=True):
    """Budget a transfer takes money from.

    Table: adjustment_sources
    """

    __tablename__ = "adjustment_sources"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    adjustment_id: str = Field(foreign_key="budget_adjustments.id", max_length=64, index=True)
    budget_id: str = Field(foreign_key="budgets.id", max_length=64, index=True)
    amount: float
