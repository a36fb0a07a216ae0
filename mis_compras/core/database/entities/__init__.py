"""
Database entities.

Importing this package registers every table on ``SQLModel.metadata``.
"""

from .adjustments import AdjustmentSource, BudgetAdjustment
from .budgets import Budget, BudgetSubLeader
from .catalog import Area, Category, Project, Supplier, SystemConfig
from .invoices import Invoice
from .notifications import Notification
from .payments import Payment
from .requirements import Attachment, HistoryLog, Requirement
from .users import User

__all__ = [
    "AdjustmentSource",
    "Area",
    "Attachment",
    "Budget",
    "BudgetAdjustment",
    "BudgetSubLeader",
    "Category",
    "HistoryLog",
    "Invoice",
    "Notification",
    "Payment",
    "Project",
    "Requirement",
    "Supplier",
    "SystemConfig",
    "User",
]
