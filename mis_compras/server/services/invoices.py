"""
Invoice service and 3-way match.

Invoices arrive as PDFs (``RECEIVED``), are matched against an approved
requirement (``VERIFIED``), approved for payment (``APPROVED``) and finally
paid (``PAID``), which also records a payment on the linked requirement.
"""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path
from typing import List, Optional

from mis_compras.core.database import new_id
from mis_compras.core.database.entities import Invoice, User
from mis_compras.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from mis_compras.core.formatters import format_currency
from mis_compras.core.logging_config import get_logger
from mis_compras.core.models.domain.enums import HistoryAction, InvoiceStatus, RequirementStatus
from mis_compras.core.models.io.invoices import InvoiceCreate
from mis_compras.core.workflow import can_transition_invoice, round_money
from mis_compras.server.core.config import settings
from mis_compras.server.core.constant import INVOICE_VIEWER_ROLES

from .base import ServiceBase, has_role
from .payments import PaymentService
from .requirements import RequirementService

logger = get_logger(__name__)

PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


def is_pdf(file_name: Optional[str], content_type: Optional[str]) -> bool:
    if content_type in PDF_CONTENT_TYPES:
        return True
    return bool(file_name) and file_name.lower().endswith(".pdf")


def safe_file_name(file_name: str) -> str:
    """Keep only the base name, with whitespace and unusual characters replaced by ``_``."""
    name = Path(file_name).name
    return re.sub(r"[^A-Za-z0-9._-]+", "_", name) or "factura.pdf"


def amount_match(invoice_amount: float, expected: float, tolerance_pct: float) -> tuple[float, bool]:
    """Variance of an invoice against the amount it should bill.

    Returns:
        ``(variance, matched)`` where ``matched`` means the variance is within
        ``tolerance_pct`` percent of ``expected``
    """
    variance = round_money(invoice_amount - expected)
    if expected <= 0:
        return variance, variance == 0
    return variance, abs(variance) <= expected * tolerance_pct / 100 + 1e-9


class InvoiceService(ServiceBase):
    """Supplier invoices."""

    async def _get(self, invoice_id: str) -> Invoice:
        invoice = await self.repos.invoices.get_by_id(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    @staticmethod
    def _ensure_transition(invoice: Invoice, target: InvoiceStatus) -> None:
        if not can_transition_invoice(invoice.status, target):
            raise BusinessRuleError(f"Cannot change invoice status from {invoice.status} to {target.value}")

    # ----- queries -----

    async def list_invoices(
        self, user: User, status: Optional[str] = None, supplier_id: Optional[str] = None
    ) -> List[Invoice]:
        scope = None if has_role(user, INVOICE_VIEWER_ROLES) else user.id
        return await self.repos.invoices.search(status=status, supplier_id=supplier_id, visible_to_user_id=scope)

    async def get(self, user: User, invoice_id: str) -> Invoice:
        invoice = await self._get(invoice_id)
        if has_role(user, INVOICE_VIEWER_ROLES) or invoice.created_by_id == user.id:
            return invoice
        if invoice.requirement_id:
            requirement = await self.repos.requirements.get_by_id(invoice.requirement_id)
            if requirement is not None and requirement.created_by_id == user.id:
                return invoice
        raise PermissionDeniedError("You do not have access to this invoice")

    # ----- commands -----

    async def create(
        self,
        data: InvoiceCreate,
        file_name: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
        user: User,
    ) -> Invoice:
        """Store the uploaded PDF and register the invoice as received."""
        if not content:
            raise BusinessRuleError("Invoice PDF is required")
        if not is_pdf(file_name, content_type):
            raise BusinessRuleError("Invoice file must be a PDF")
        max_bytes = settings.procurement.max_upload_mb * 1024 * 1024
        if len(content) > max_bytes:
            raise BusinessRuleError(f"Invoice file exceeds {settings.procurement.max_upload_mb} MB")
        if await self.repos.suppliers.get_by_id(data.supplier_id) is None:
            raise NotFoundError("Supplier", data.supplier_id)

        invoice = Invoice(
            **data.model_dump(),
            file_url=self._store(file_name or "factura.pdf", content),
            created_by_id=user.id,
        )
        invoice.amount = round_money(invoice.amount)
        await self.repos.invoices.create(invoice)
        await self.commit()
        logger.info(f"Invoice {invoice.invoice_number} received from supplier {invoice.supplier_id}")
        return invoice

    async def verify(self, invoice_id: str, requirement_id: str, user: User) -> Invoice:
        """Link the invoice to an approved requirement and compare the amounts.

        Both the invoice and the requirement must be visible to ``user``.
        """
        invoice = await self.get(user, invoice_id)
        self._ensure_transition(invoice, InvoiceStatus.verified)

        requirement = await RequirementService(self.session, self.repos).get_visible(user, requirement_id)
        if requirement.status != RequirementStatus.approved.value:
            raise BusinessRuleError("Purchase Order is not approved")

        variance, matched = amount_match(
            invoice.amount, requirement.payable_amount, settings.procurement.amount_tolerance_pct
        )
        invoice.requirement_id = requirement.id
        invoice.amount_variance = variance
        invoice.amount_matched = matched
        invoice.status = InvoiceStatus.verified.value
        await self.repos.invoices.update(invoice)

        if not requirement.invoice_number:
            requirement.invoice_number = invoice.invoice_number
            await self.repos.requirements.update(requirement)
        await self.repos.requirements.add_log(
            requirement.id,
            HistoryAction.invoice_linked.value,
            user.id,
            f"Factura {invoice.invoice_number} por {format_currency(invoice.amount)} vinculada "
            f"(diferencia {format_currency(variance)})",
        )
        await self.commit()
        if not matched:
            logger.warning(f"Invoice {invoice.invoice_number} differs from requirement {requirement.id} by {variance}")
        return invoice

    async def approve(self, invoice_id: str) -> Invoice:
        invoice = await self._get(invoice_id)
        self._ensure_transition(invoice, InvoiceStatus.approved)
        invoice.status = InvoiceStatus.approved.value
        await self.repos.invoices.update(invoice)
        await self.commit()
        return invoice

    async def pay(
        self, invoice_id: str, payment_date: date, transaction_number: Optional[str], user: User
    ) -> Invoice:
        """Mark the invoice paid and record the payment on its requirement."""
        invoice = await self._get(invoice_id)
        self._ensure_transition(invoice, InvoiceStatus.paid)
        invoice.status = InvoiceStatus.paid.value
        invoice.paid_at = payment_date
        invoice.transaction_number = transaction_number
        await self.repos.invoices.update(invoice)

        if invoice.requirement_id:
            requirement = await self.repos.requirements.get_by_id(invoice.requirement_id)
            if requirement is None:
                raise NotFoundError("Requirement", invoice.requirement_id)
            await PaymentService(self.session, self.repos).register(
                requirement,
                invoice.amount,
                payment_date,
                user,
                invoice_number=invoice.invoice_number,
                observations=f"Pago generado desde Factura {invoice.invoice_number}. "
                f"Transacción: {transaction_number or 'N/A'}",
            )
        await self.commit()
        logger.info(f"Invoice {invoice.invoice_number} paid")
        return invoice

    # ----- helpers -----

    @staticmethod
    def _store(file_name: str, content: bytes) -> str:
        """Write the file under ``UPLOAD_DIR/invoices`` and return its relative path."""
        directory = Path(settings.procurement.upload_dir) / "invoices"
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{new_id()}_{safe_file_name(file_name)}"
        path.write_bytes(content)
        return path.as_posix()
