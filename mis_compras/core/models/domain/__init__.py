from .enums import (
    AdjustmentStatus,
    AdjustmentType,
    BudgetHealth,
    BudgetStatus,
    HistoryAction,
    InvoiceStatus,
    NotificationType,
    ProcurementStatus,
    RequirementCategory,
    RequirementStatus,
    Role,
)

__all__ = [
    "AdjustmentStatus",
    "AdjustmentType",
    "BudgetHealth",
    "BudgetStatus",
    "HistoryAction",
    "InvoiceStatus",
    "NotificationType",
    "ProcurementStatus",
    "RequirementCategory",
    "RequirementStatus",
    "Role",
]
