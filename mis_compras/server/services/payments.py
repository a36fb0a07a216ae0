"""
Payment service.

Payments are numbered per requirement. A requirement takes a single payment
unless it is flagged for multiple ones (at most ``MAX_PAYMENTS_PER_REQUIREMENT``),
and the running total may never exceed what the requirement is worth. The
procurement status follows the paid total: ``FINALIZADO`` once fully paid,
``EN_TRAMITE`` while money is still owed.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from mis_compras.core.database.entities import Payment, Requirement, User
from mis_compras.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from mis_compras.core.formatters import format_currency, format_date
from mis_compras.core.logging_config import get_logger
from mis_compras.core.models.domain.enums import HistoryAction, ProcurementStatus
from mis_compras.core.models.io.payments import PaymentCreate, PaymentUpdate
from mis_compras.core.workflow import round_money
from mis_compras.server.core.config import settings

from .base import ServiceBase, has_role
from .requirements import VIEWER_ROLES

logger = get_logger(__name__)

TOLERANCE = 0.01


class PaymentService(ServiceBase):
    """Payments registered against requirements."""

    async def _requirement(self, requirement_id: str) -> Requirement:
        requirement = await self.repos.requirements.get_by_id(requirement_id)
        if requirement is None:
            raise NotFoundError("Requirement", requirement_id)
        return requirement

    async def _payment(self, payment_id: str) -> Payment:
        payment = await self.repos.payments.get_by_id(payment_id)
        if payment is None:
            raise NotFoundError("Payment", payment_id)
        return payment

    # ----- queries -----

    async def list_for_requirement(self, requirement_id: str, user: User) -> List[Payment]:
        requirement = await self._requirement(requirement_id)
        if requirement.created_by_id != user.id and not has_role(user, VIEWER_ROLES):
            raise PermissionDeniedError("You do not have access to this requirement")
        return await self.repos.payments.for_requirement(requirement.id)

    # ----- commands -----

    async def register(
        self,
        requirement: Requirement,
        amount: float,
        payment_date: date,
        user: User,
        invoice_number: Optional[str] = None,
        observations: Optional[str] = None,
    ) -> Payment:
        """Stage a payment on ``requirement`` (the caller commits).

        Raises:
            BusinessRuleError: Single-payment requirement already paid, payment
                limit reached, or the total would exceed the requirement amount
        """
        count = await self.repos.payments.count_for_requirement(requirement.id)
        if count and not requirement.has_multiple_payments:
            raise BusinessRuleError("This requirement only accepts a single payment")
        limit = settings.procurement.max_payments
        if count >= limit:
            raise BusinessRuleError(f"A requirement accepts at most {limit} payments")

        amount = round_money(amount)
        paid = await self.repos.payments.total_paid(requirement.id)
        self._check_total(requirement, paid + amount)

        payment = Payment(
            requirement_id=requirement.id,
            payment_number=await self.repos.payments.next_number(requirement.id),
            amount=amount,
            payment_date=payment_date,
            invoice_number=invoice_number,
            observations=observations,
        )
        await self.repos.payments.create(payment)
        await self._sync_procurement_status(requirement, paid + amount)
        await self.repos.requirements.add_log(
            requirement.id,
            HistoryAction.payment_registered.value,
            user.id,
            f"Pago #{payment.payment_number} por {format_currency(amount)} el {format_date(payment_date)}",
        )
        return payment

    async def create(self, requirement_id: str, data: PaymentCreate, user: User) -> Payment:
        requirement = await self._requirement(requirement_id)
        payment = await self.register(
            requirement, data.amount, data.payment_date, user, data.invoice_number, data.observations
        )
        await self.commit()
        logger.info(f"Payment #{payment.payment_number} of {payment.amount} on requirement {requirement.id}")
        return payment

    async def update(self, payment_id: str, data: PaymentUpdate, user: User) -> Payment:
        payment = await self._payment(payment_id)
        requirement = await self._requirement(payment.requirement_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("amount") is not None:
            changes["amount"] = round_money(changes["amount"])
            others = await self.repos.payments.total_paid(requirement.id, exclude_payment_id=payment.id)
            self._check_total(requirement, others + changes["amount"])
        for key, value in changes.items():
            setattr(payment, key, value)
        await self.repos.payments.update(payment)

        await self._sync_procurement_status(requirement, await self.repos.payments.total_paid(requirement.id))
        await self.repos.requirements.add_log(
            requirement.id,
            HistoryAction.payment_updated.value,
            user.id,
            f"Pago #{payment.payment_number} actualizado: {format_currency(payment.amount)}",
        )
        await self.commit()
        return payment

    async def delete(self, payment_id: str, user: User) -> None:
        payment = await self._payment(payment_id)
        requirement = await self._requirement(payment.requirement_id)
        await self.repos.payments.delete(payment.id)

        remaining = await self.repos.payments.total_paid(requirement.id)
        await self._sync_procurement_status(requirement, remaining)
        await self.repos.requirements.add_log(
            requirement.id,
            HistoryAction.payment_deleted.value,
            user.id,
            f"Pago #{payment.payment_number} por {format_currency(payment.amount)} eliminado",
        )
        await self.commit()
        logger.info(f"Payment #{payment.payment_number} deleted from requirement {requirement.id}")

    async def toggle_multiple(self, requirement_id: str, enabled: bool) -> Requirement:
        requirement = await self._requirement(requirement_id)
        if not enabled and await self.repos.payments.count_for_requirement(requirement.id) > 1:
            raise BusinessRuleError("Requirement already has several payments")
        requirement.has_multiple_payments = enabled
        await self.repos.requirements.update(requirement)
        await self.commit()
        return requirement

    # ----- helpers -----

    @staticmethod
    def _check_total(requirement: Requirement, total: float) -> None:
        payable = requirement.payable_amount
        if payable > 0 and total > payable + TOLERANCE:
            raise BusinessRuleError(
                f"Payments total {format_currency(total)} exceeds the requirement amount {format_currency(payable)}"
            )

    async def _sync_procurement_status(self, requirement: Requirement, paid: float) -> None:
        payable = requirement.payable_amount
        if paid <= 0:
            return
        if payable > 0 and paid >= payable - TOLERANCE:
            requirement.procurement_status = ProcurementStatus.finalizado.value
        else:
            requirement.procurement_status = ProcurementStatus.en_tramite.value
        await self.repos.requirements.update(requirement)
