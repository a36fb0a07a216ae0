"""
Requirement I/O models.

Requests for creating and editing requirements and asientos, changing their
workflow status, and the list/detail read models.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from mis_compras.core.models.domain.enums import RequirementCategory
from mis_compras.core.validation import MAX_TITLE_LENGTH, MIN_TITLE_LENGTH, is_valid_title

from .common import PartialUpdate
from .payments import PaymentRead


def _check_title(value: str) -> str:
    if not is_valid_title(value):
        raise ValueError(f"Title must be between {MIN_TITLE_LENGTH} and {MAX_TITLE_LENGTH} characters")
    return value.strip()


Title = Annotated[str, AfterValidator(_check_title)]


class AttachmentIn(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    file_url: str = Field(min_length=1, max_length=1000)


class AttachmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    file_name: str
    file_url: str
    created_at: datetime


class HistoryLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    action: str
    details: Optional[str] = None
    user_id: str
    created_at: datetime


class RequirementCreate(BaseModel):
    """Schema for raising a requirement."""

    title: Title
    description: Optional[str] = None
    quantity: str = Field(default="1", max_length=64)
    total_amount: float = Field(default=0, ge=0)
    req_category: RequirementCategory = RequirementCategory.compra
    project_id: Optional[str] = None
    area_id: Optional[str] = Field(default=None, description="Defaults to the requester's area")
    budget_id: Optional[str] = None
    supplier_id: Optional[str] = None
    manual_supplier_name: Optional[str] = Field(default=None, max_length=255)
    attachments: List[AttachmentIn] = Field(default_factory=list)


class AsientoCreate(RequirementCreate):
    """Pre-approved entry: the budget is charged immediately."""

    total_amount: float = Field(gt=0)
    budget_id: str = Field(min_length=1)


class RequirementUpdate(PartialUpdate):
    """Schema for the purchasing office editing a requirement."""

    nullable_fields = frozenset(
        {
            "description",
            "actual_amount",
            "project_id",
            "area_id",
            "budget_id",
            "supplier_id",
            "manual_supplier_name",
            "purchase_order_number",
            "invoice_number",
            "delivery_date",
            "received_at_satisfaction",
            "satisfaction_comments",
        }
    )

    title: Optional[Title] = None
    description: Optional[str] = None
    quantity: Optional[str] = Field(default=None, max_length=64)
    total_amount: Optional[float] = Field(default=None, ge=0)
    actual_amount: Optional[float] = Field(default=None, ge=0)
    req_category: Optional[RequirementCategory] = None
    project_id: Optional[str] = None
    area_id: Optional[str] = None
    budget_id: Optional[str] = None
    supplier_id: Optional[str] = None
    manual_supplier_name: Optional[str] = None
    purchase_order_number: Optional[str] = Field(default=None, max_length=64)
    invoice_number: Optional[str] = Field(default=None, max_length=64)
    delivery_date: Optional[date] = None
    received_at_satisfaction: Optional[bool] = None
    satisfaction_comments: Optional[str] = None
    has_multiple_payments: Optional[bool] = None


class RequirementStatusUpdate(BaseModel):
    """New workflow status. Values are checked against the transition table."""

    status: str
    procurement_status: Optional[str] = None
    comment: Optional[str] = Field(default=None, max_length=2000)


class ObservationsUpdate(BaseModel):
    observations: str = Field(max_length=5000)


class RequirementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    quantity: str
    total_amount: float
    actual_amount: Optional[float] = None
    status: str
    procurement_status: str
    req_category: str
    is_asiento: bool
    has_multiple_payments: bool
    year: int
    project_id: Optional[str] = None
    area_id: Optional[str] = None
    budget_id: Optional[str] = None
    supplier_id: Optional[str] = None
    manual_supplier_name: Optional[str] = None
    purchase_order_number: Optional[str] = None
    invoice_number: Optional[str] = None
    delivery_date: Optional[date] = None
    received_at_satisfaction: Optional[bool] = None
    satisfaction_comments: Optional[str] = None
    observations: Optional[str] = None
    created_by_id: str
    created_at: datetime
    updated_at: datetime


class RequirementDetail(RequirementRead):
    """Requirement with its attachments, history (newest first) and payments."""

    attachments: List[AttachmentRead] = Field(default_factory=list)
    logs: List[HistoryLogRead] = Field(default_factory=list)
    payments: List[PaymentRead] = Field(default_factory=list)
    allowed_transitions: List[str] = Field(default_factory=list)
