"""Invoice entity model."""

from datetime import date, datetime
from typing import Optional

from sqlmodel import Field

from mis_compras.core.models.domain.enums import InvoiceStatus

from ..base import Base, new_id, utc_now


class Invoice(Base, table=True):
    """Supplier invoice, matched against an approved requirement before payment.

    Table: invoices
    """

    __tablename__ = "invoices"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    invoice_number: str = Field(max_length=64, index=True)
    supplier_id: str = Field(foreign_key="suppliers.id", max_length=64, index=True)
    amount: float
    issue_date: date
    due_date: Optional[date] = Field(default=None)
    status: str = Field(default=InvoiceStatus.received.value, max_length=16, index=True)
    file_url: str = Field(max_length=1000)

    requirement_id: Optional[str] = Field(default=None, foreign_key="requirements.id", max_length=64, index=True)
    amount_variance: Optional[float] = Field(default=None, description="Invoice amount minus requirement amount")
    amount_matched: Optional[bool] = Field(default=None)
    paid_at: Optional[date] = Field(default=None)
    transaction_number: Optional[str] = Field(default=None, max_length=64)

    created_by_id: str = Field(foreign_key="users.id", max_length=64, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Invoice(number={self.invoice_number}, amount={self.amount}, status={self.status})"
