"""Budget adjustment I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from mis_compras.core.models.domain.enums import AdjustmentType


class AdjustmentSourceIn(BaseModel):
    budget_id: str = Field(min_length=1)
    amount: float = Field(gt=0)


class AdjustmentCreate(BaseModel):
    """Schema for requesting an adjustment.

    ``sources`` is required for TRANSFER and must add up to
    ``requested_amount``; it is ignored for INCREASE.
    """

    budget_id: str = Field(min_length=1, description="Target budget")
    type: AdjustmentType
    requested_amount: float = Field(gt=0)
    reason: str = Field(min_length=1, max_length=2000)
    sources: List[AdjustmentSourceIn] = Field(default_factory=list)


class AdjustmentReject(BaseModel):
    comment: Optional[str] = Field(default=None, max_length=2000)


class AdjustmentSourceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    budget_id: str
    amount: float


class AdjustmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    type: str
    budget_id: str
    requested_amount: float
    reason: str
    status: str
    requested_by_id: str
    requested_at: datetime
    reviewed_by_id: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_comment: Optional[str] = None
    sources: List[AdjustmentSourceRead] = Field(default_factory=list)
