"""Payment entity model."""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Text
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Payment(Base, table=True):
    """Payment registered against a requirement.

    ``payment_number`` is sequential per requirement, starting at 1.

    Table: payments
    """

    __tablename__ = "payments"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    requirement_id: str = Field(foreign_key="requirements.id", max_length=64, index=True)
    payment_number: int
    amount: float
    invoice_number: Optional[str] = Field(default=None, max_length=64)
    payment_date: date
    observations: Optional[str] = Field(default=None, sa_type=Text)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Payment(requirement={self.requirement_id}, number={self.payment_number}, amount={self.amount})"
