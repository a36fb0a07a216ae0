"""Payment I/O models."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import PartialUpdate


class PaymentCreate(BaseModel):
    amount: float = Field(gt=0)
    payment_date: date
    invoice_number: Optional[str] = Field(default=None, max_length=64)
    observations: Optional[str] = None


class PaymentUpdate(PartialUpdate):
    nullable_fields = frozenset({"invoice_number", "observations"})

    amount: Optional[float] = Field(default=None, gt=0)
    payment_date: Optional[date] = None
    invoice_number: Optional[str] = Field(default=None, max_length=64)
    observations: Optional[str] = None


class PaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    requirement_id: str
    payment_number: int
    amount: float
    invoice_number: Optional[str] = None
    payment_date: date
    observations: Optional[str] = None
    created_at: datetime


class MultiplePaymentsToggle(BaseModel):
    has_multiple_payments: bool
