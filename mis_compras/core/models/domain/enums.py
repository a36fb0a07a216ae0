"""Domain enums for procurement and budget models."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """
    Roles a user can hold.

    Roles drive every authorization decision in the API; there is no
    per-object ACL beyond ownership checks.
    """

    admin = "ADMIN"  # Manages users and catalogs.
    director = "DIRECTOR"  # Owns budgets and approves adjustments.
    leader = "LEADER"  # Approves requirements for an area.
    coordinator = "COORDINATOR"  # Resolves requirements sent to coordination.
    user = "USER"  # Raises requirements.
    auditor = "AUDITOR"  # Read access to invoices.
    developer = "DEVELOPER"


class RequirementStatus(str, Enum):
    """Approval workflow status of a requirement."""

    pending_approval = "PENDING_APPROVAL"
    pending_coordination = "PENDING_COORDINATION"
    approved = "APPROVED"
    rejected = "REJECTED"
    in_process = "IN_PROCESS"
    completed = "COMPLETED"


class ProcurementStatus(str, Enum):
    """Purchasing progress of a requirement, tracked by the purchasing office."""

    pendiente = "PENDIENTE"
    en_proceso = "EN_PROCESO"
    en_tramite = "EN_TRAMITE"  # Payment in progress.
    cotizado = "COTIZADO"
    enviado_proveedor = "ENVIADO_PROVEEDOR"
    recibido = "RECIBIDO"
    entregado = "ENTREGADO"
    finalizado = "FINALIZADO"  # Fully paid.


class RequirementCategory(str, Enum):
    """Kind of purchase a requirement represents."""

    compra = "COMPRA"
    servicio = "SERVICIO"
    contrato = "CONTRATO"


class BudgetStatus(str, Enum):
    """Approval status of a budget or a budget adjustment."""

    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"


AdjustmentStatus = BudgetStatus


class AdjustmentType(str, Enum):
    """How a budget adjustment changes the target budget."""

    increase = "INCREASE"  # New money added to the target.
    transfer = "TRANSFER"  # Money moved from one or more source budgets.


class BudgetHealth(str, Enum):
    """Execution band of a budget, derived from its executed percentage."""

    normal = "NORMAL"
    active = "ACTIVE"
    warning = "WARNING"
    exhausted = "EXHAUSTED"


class InvoiceStatus(str, Enum):
    """Lifecycle of a supplier invoice."""

    received = "RECEIVED"
    verified = "VERIFIED"  # 3-way match done against an approved requirement.
    approved = "APPROVED"
    paid = "PAID"


class NotificationType(str, Enum):
    """Severity of an in-app notification."""

    info = "INFO"
    success = "SUCCESS"
    warning = "WARNING"
    error = "ERROR"


class HistoryAction(str, Enum):
    """Actions recorded in a requirement's history log."""

    created = "CREATED"
    asiento_created = "ASIENTO_CREATED"
    status_updated = "STATUS_UPDATED"
    edited = "EDITED"
    observations_updated = "OBSERVATIONS_UPDATED"
    payment_registered = "PAYMENT_REGISTERED"
    payment_updated = "PAYMENT_UPDATED"
    payment_deleted = "PAYMENT_DELETED"
    invoice_linked = "INVOICE_LINKED"
