"""
Budget I/O models.

The read model carries the derived execution figures (``execution_percent``
and ``health``) so clients never recompute them.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .adjustments import AdjustmentRead
from .common import PartialUpdate
from .requirements import RequirementRead


class BudgetCreate(BaseModel):
    """Schema for a director opening a budget."""

    title: str = Field(min_length=1, max_length=255)
    amount: float = Field(gt=0)
    project_id: str = Field(min_length=1)
    area_id: str = Field(min_length=1)
    year: Optional[int] = Field(default=None, ge=2000, le=2100, description="Defaults to the current year")
    code: Optional[str] = Field(default=None, max_length=64, description="Generated when omitted")
    description: Optional[str] = None
    category_id: Optional[str] = None
    manager_id: Optional[str] = None
    expiration_date: Optional[date] = None
    sub_leader_ids: List[str] = Field(default_factory=list)


class BudgetUpdate(PartialUpdate):
    """Schema for editing a budget. ``sub_leader_ids`` replaces the current list when given."""

    nullable_fields = frozenset({"description", "expiration_date", "category_id", "manager_id"})

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    amount: Optional[float] = Field(default=None, gt=0)
    expiration_date: Optional[date] = None
    project_id: Optional[str] = None
    area_id: Optional[str] = None
    category_id: Optional[str] = None
    manager_id: Optional[str] = None
    is_blocked: Optional[bool] = None
    sub_leader_ids: Optional[List[str]] = None


class BudgetApproval(BaseModel):
    approve: bool


class BudgetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    title: str
    description: Optional[str] = None
    amount: float
    available: float
    year: int
    expiration_date: Optional[date] = None
    status: str
    is_blocked: bool
    version: int
    project_id: str
    area_id: str
    category_id: Optional[str] = None
    manager_id: Optional[str] = None
    created_by_id: Optional[str] = None
    approved_by_id: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    execution_percent: int = 0
    health: str = "NORMAL"


class BudgetDetail(BudgetRead):
    """Budget with its sub-leaders, recent requirements and adjustment history."""

    sub_leader_ids: List[str] = Field(default_factory=list)
    requirements: List[RequirementRead] = Field(default_factory=list)
    adjustments: List[AdjustmentRead] = Field(default_factory=list)


class BudgetSummaryRead(BaseModel):
    total: float
    available: float
    spent: float
    execution_pct: int
    critical: int
    count: int


class ManagerOption(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: str
