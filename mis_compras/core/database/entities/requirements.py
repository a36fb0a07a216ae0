"""
Requirement entity models.

A requirement is a purchase request. Besides the approval ``status`` it
carries a ``procurement_status`` tracking the purchase itself, and an
append-only history log.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Text
from sqlmodel import Field

from mis_compras.core.models.domain.enums import ProcurementStatus, RequirementCategory, RequirementStatus

from ..base import Base, new_id, utc_now


class RequirementBase(Base):
    """Base fields for requirements."""

    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, sa_type=Text)
    quantity: str = Field(default="1", max_length=64, description="Free-form quantity, e.g. '3 unidades'")
    total_amount: float = Field(default=0, description="Estimated amount")
    actual_amount: Optional[float] = Field(default=None, description="Amount actually committed")
    req_category: str = Field(default=RequirementCategory.compra.value, max_length=32)
    year: int = Field(index=True)

    project_id: Optional[str] = Field(default=None, foreign_key="projects.id", max_length=64, index=True)
    area_id: Optional[str] = Field(default=None, foreign_key="areas.id", max_length=64, index=True)
    budget_id: Optional[str] = Field(default=None, foreign_key="budgets.id", max_length=64, index=True)
    supplier_id: Optional[str] = Field(default=None, foreign_key="suppliers.id", max_length=64, index=True)
    manual_supplier_name: Optional[str] = Field(default=None, max_length=255)


class Requirement(RequirementBase, table=True):
    """Persistent purchase requirement.

    Table: requirements
    """

    __tablename__ = "requirements"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    status: str = Field(default=RequirementStatus.pending_approval.value, max_length=32, index=True)
    procurement_status: str = Field(default=ProcurementStatus.pendiente.value, max_length=32)
    is_asiento: bool = Field(default=False, index=True, description="Pre-approved accounting entry")
    has_multiple_payments: bool = Field(default=False)

    purchase_order_number: Optional[str] = Field(default=None, max_length=64)
    invoice_number: Optional[str] = Field(default=None, max_length=64)
    delivery_date: Optional[date] = Field(default=None)
    received_at_satisfaction: Optional[bool] = Field(default=None)
    satisfaction_comments: Optional[str] = Field(default=None, sa_type=Text)
    observations: Optional[str] = Field(default=None, sa_type=Text)

    created_by_id: str = Field(foreign_key="users.id", max_length=64, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def payable_amount(self) -> float:
        """Amount payments are checked against: the committed amount when set, else the estimate."""
        if self.actual_amount:
            return float(self.actual_amount)
        return float(self.total_amount or 0)

    def __repr__(self) -> str:
        return f"Requirement(id={self.id}, title={self.title!r}, status={self.status})"


class Attachment(Base, table=True):
    """File attached to a requirement.

    Table: attachments
    """

    __tablename__ = "attachments"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    requirement_id: str = Field(foreign_key="requirements.id", max_length=64, index=True)
    file_name: str = Field(max_length=255)
    file_url: str = Field(max_length=1000)
    created_at: datetime = Field(default_factory=utc_now)


class HistoryLog(Base, table=True):
    """Append-only audit entry of something that happened to a requirement.

    Table: history_logs
    """

    __tablename__ = "history_logs"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    requirement_id: str = Field(foreign_key="requirements.id", max_length=64, index=True)
    action: str = Field(max_length=64)
    details: Optional[str] = Field(default=None, sa_type=Text)
    user_id: str = Field(foreign_key="users.id", max_length=64)
    created_at: datetime = Field(default_factory=utc_now, index=True)
