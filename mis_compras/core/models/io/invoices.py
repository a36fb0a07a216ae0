"""Invoice I/O models."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InvoiceVerify(BaseModel):
    """Link an invoice to the requirement (purchase order) it bills."""

    requirement_id: str = Field(min_length=1)


class InvoicePay(BaseModel):
    payment_date: date
    transaction_number: Optional[str] = Field(default=None, max_length=64)


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    invoice_number: str
    supplier_id: str
    amount: float
    issue_date: date
    due_date: Optional[date] = None
    status: str
    file_url: str
    requirement_id: Optional[str] = None
    amount_variance: Optional[float] = None
    amount_matched: Optional[bool] = None
    paid_at: Optional[date] = None
    transaction_number: Optional[str] = None
    created_by_id: str
    created_at: datetime


class InvoiceCreate(BaseModel):
    """Form fields sent along with the invoice PDF."""

    invoice_number: str = Field(min_length=1, max_length=64)
    supplier_id: str = Field(min_length=1)
    amount: float = Field(gt=0)
    issue_date: date
    due_date: Optional[date] = None
