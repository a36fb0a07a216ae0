"""
Budget adjustment service.

Anyone may request an increase of a budget, or a transfer into it from other
budgets; directors approve or reject. Approval moves the money: every source
budget loses its share of ``amount`` and ``available``, the target gains the
requested amount, and each touched budget's ``version`` is bumped, all in a
single commit.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from mis_compras.core.database import utc_now
from mis_compras.core.database.entities import AdjustmentSource, Budget, BudgetAdjustment, User
from mis_compras.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from mis_compras.core.formatters import format_currency
from mis_compras.core.logging_config import get_logger
from mis_compras.core.models.domain.enums import AdjustmentStatus, AdjustmentType, NotificationType, Role
from mis_compras.core.models.io.adjustments import AdjustmentCreate, AdjustmentRead, AdjustmentSourceRead
from mis_compras.core.workflow import adjustment_code, round_money, safe_deduct, sources_match_requested
from mis_compras.server.core.constant import ADJUSTMENT_REVIEWER_ROLES

from .base import ServiceBase, current_year, has_role
from .documents import DocumentService, document_file_name
from .mail import Attachment
from .notifications import NotificationService

logger = get_logger(__name__)


def to_adjustment_read(adjustment: BudgetAdjustment, sources: Iterable[AdjustmentSource]) -> AdjustmentRead:
    read = AdjustmentRead.model_validate(adjustment)
    read.sources = [AdjustmentSourceRead.model_validate(source) for source in sources]
    return read


class AdjustmentService(ServiceBase):
    """Budget increases and transfers."""

    async def _read(self, adjustment: BudgetAdjustment) -> AdjustmentRead:
        return to_adjustment_read(adjustment, await self.repos.adjustments.sources(adjustment.id))

    async def _read_all(self, adjustments: Iterable[BudgetAdjustment]) -> List[AdjustmentRead]:
        return [await self._read(adjustment) for adjustment in adjustments]

    async def _get(self, adjustment_id: str) -> BudgetAdjustment:
        adjustment = await self.repos.adjustments.get_by_id(adjustment_id)
        if adjustment is None:
            raise NotFoundError("Adjustment", adjustment_id)
        return adjustment

    # ----- queries -----

    async def list_mine(self, user: User) -> List[AdjustmentRead]:
        return await self._read_all(await self.repos.adjustments.search(requested_by_id=user.id))

    async def list_all(self, status: Optional[str] = None, year: Optional[int] = None) -> List[AdjustmentRead]:
        return await self._read_all(await self.repos.adjustments.search(status=status, year=year))

    async def list_pending(self) -> List[AdjustmentRead]:
        """Pending adjustments, oldest first so the queue is worked in order."""
        pending = await self.repos.adjustments.search(status=AdjustmentStatus.pending.value, oldest_first=True)
        return await self._read_all(pending)

    async def get(self, user: User, adjustment_id: str) -> AdjustmentRead:
        adjustment = await self._get(adjustment_id)
        if adjustment.requested_by_id != user.id and not has_role(user, ADJUSTMENT_REVIEWER_ROLES):
            raise PermissionDeniedError("You do not have access to this adjustment")
        return await self._read(adjustment)

    # ----- commands -----

    async def request(self, data: AdjustmentCreate, user: User) -> AdjustmentRead:
        """Validate and store a new adjustment request, then notify the directors."""
        target = await self.repos.budgets.get_by_id(data.budget_id)
        if target is None:
            raise NotFoundError("Budget", data.budget_id)

        sources = data.sources if data.type == AdjustmentType.transfer else []
        if data.type == AdjustmentType.transfer:
            await self._validate_transfer(target, data)

        year = current_year()
        sequence = await self.repos.adjustments.next_sequence(year)
        adjustment = BudgetAdjustment(
            code=adjustment_code(year, sequence),
            type=data.type.value,
            budget_id=target.id,
            requested_amount=round_money(data.requested_amount),
            reason=data.reason.strip(),
            requested_by_id=user.id,
        )
        await self.repos.adjustments.create(adjustment)
        for source in sources:
            await self.repos.adjustments.add_source(adjustment.id, source.budget_id, round_money(source.amount))

        kind = "traslado" if data.type == AdjustmentType.transfer else "incremento"
        notifier = NotificationService(self.session, self.repos)
        await notifier.notify_roles(
            [Role.director],
            "Nueva solicitud de ajuste",
            f"{user.name} solicitó un {kind} de {format_currency(adjustment.requested_amount)} "
            f"para el presupuesto {target.code} ({adjustment.code}).",
            NotificationType.info,
            exclude_user_id=user.id,
            email=True,
        )
        await self.commit()
        await notifier.send_mail()
        logger.info(f"Adjustment {adjustment.code} requested by {user.email}")
        return await self._read(adjustment)

    async def approve(self, adjustment_id: str, director: User) -> AdjustmentRead:
        adjustment = await self._get(adjustment_id)
        self._ensure_pending(adjustment)

        target = await self.repos.budgets.get_by_id(adjustment.budget_id)
        if target is None:
            raise NotFoundError("Budget", adjustment.budget_id)

        sources = await self.repos.adjustments.sources(adjustment.id)
        source_budgets = {b.id: b for b in await self.repos.budgets.get_many(s.budget_id for s in sources)}
        # Every source is validated before any budget is mutated.
        for source in sources:
            budget = source_budgets.get(source.budget_id)
            if budget is None:
                raise NotFoundError("Budget", source.budget_id)
            if not safe_deduct(budget.available, source.amount).ok:
                raise BusinessRuleError(f"Budget {budget.code} no longer has enough available balance")

        for source in sources:
            budget = source_budgets[source.budget_id]
            budget.amount = round_money(budget.amount - source.amount)
            budget.available = round_money(budget.available - source.amount)
            budget.version += 1
            await self.repos.budgets.update(budget)

        target.amount = round_money(target.amount + adjustment.requested_amount)
        target.available = round_money(target.available + adjustment.requested_amount)
        target.version += 1
        await self.repos.budgets.update(target)

        self._close(adjustment, director, AdjustmentStatus.approved)
        await self.repos.adjustments.update(adjustment)
        notifier = NotificationService(self.session, self.repos)
        await notifier.notify(
            adjustment.requested_by_id,
            "Ajuste aprobado",
            f"Tu solicitud {adjustment.code} por {format_currency(adjustment.requested_amount)} fue aprobada.",
            NotificationType.success,
            email=True,
            attachments=await self._mail_document(notifier, adjustment),
        )
        await self.commit()
        await notifier.send_mail()
        logger.info(f"Adjustment {adjustment.code} approved by {director.email}")
        return to_adjustment_read(adjustment, sources)

    async def reject(self, adjustment_id: str, director: User, comment: Optional[str] = None) -> AdjustmentRead:
        adjustment = await self._get(adjustment_id)
        self._ensure_pending(adjustment)

        self._close(adjustment, director, AdjustmentStatus.rejected, comment)
        await self.repos.adjustments.update(adjustment)
        reason = f" Motivo: {comment}" if comment else ""
        notifier = NotificationService(self.session, self.repos)
        await notifier.notify(
            adjustment.requested_by_id,
            "Ajuste rechazado",
            f"Tu solicitud {adjustment.code} fue rechazada.{reason}",
            NotificationType.error,
            email=True,
            attachments=await self._mail_document(notifier, adjustment),
        )
        await self.commit()
        await notifier.send_mail()
        logger.info(f"Adjustment {adjustment.code} rejected by {director.email}")
        return await self._read(adjustment)

    # ----- helpers -----

    async def _mail_document(self, notifier: NotificationService, adjustment: BudgetAdjustment) -> List[Attachment]:
        """The adjustment PDF to attach to its e-mail, rendered only when mail is on."""
        if not notifier.mailer.enabled:
            return []
        content = await DocumentService(self.session, self.repos).render_adjustment(adjustment)
        return [(document_file_name(adjustment.code), content)]

    async def _validate_transfer(self, target: Budget, data: AdjustmentCreate) -> None:
        if not data.sources:
            raise BusinessRuleError("A transfer requires at least one source budget")
        if not sources_match_requested([s.amount for s in data.sources], data.requested_amount):
            raise BusinessRuleError("Source amounts must add up to the requested amount")

        seen = set()
        for source in data.sources:
            if source.budget_id == target.id:
                raise BusinessRuleError("A budget cannot transfer to itself")
            if source.budget_id in seen:
                raise BusinessRuleError("Each source budget may only appear once")
            seen.add(source.budget_id)

            budget = await self.repos.budgets.get_by_id(source.budget_id)
            if budget is None:
                raise NotFoundError("Budget", source.budget_id)
            if not safe_deduct(budget.available, source.amount).ok:
                raise BusinessRuleError(
                    f"Budget {budget.code} only has {format_currency(budget.available)} available"
                )

    @staticmethod
    def _ensure_pending(adjustment: BudgetAdjustment) -> None:
        if adjustment.status != AdjustmentStatus.pending.value:
            raise BusinessRuleError("Adjustment already processed")

    @staticmethod
    def _close(
        adjustment: BudgetAdjustment, reviewer: User, status: AdjustmentStatus, comment: Optional[str] = None
    ) -> None:
        adjustment.status = status.value
        adjustment.reviewed_by_id = reviewer.id
        adjustment.reviewed_at = utc_now()
        if comment:
            adjustment.review_comment = comment
