"""
Repositories.

One repository per aggregate. All of them share the flush-only contract of
:class:`~.base.SqlRepository`: the calling service commits.
"""

from .adjustments import AdjustmentRepository
from .base import AsyncBaseRepository, QueryBuilder, SqlRepository
from .budgets import BudgetRepository
from .catalog import (
    AreaRepository,
    CategoryRepository,
    ProjectRepository,
    SupplierRepository,
    SystemConfigRepository,
)
from .invoices import InvoiceRepository
from .notifications import NotificationRepository
from .payments import PaymentRepository
from .requirements import RequirementRepository
from .users import UserRepository

__all__ = [
    "AdjustmentRepository",
    "AreaRepository",
    "AsyncBaseRepository",
    "BudgetRepository",
    "CategoryRepository",
    "InvoiceRepository",
    "NotificationRepository",
    "PaymentRepository",
    "ProjectRepository",
    "QueryBuilder",
    "RequirementRepository",
    "SqlRepository",
    "SupplierRepository",
    "SystemConfigRepository",
    "UserRepository",
]
