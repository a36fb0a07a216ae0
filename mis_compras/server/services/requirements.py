"""
Requirement service.

A requirement walks the approval table in :mod:`mis_compras.core.workflow`
while the purchasing office tracks its ``procurement_status``. Money is only
taken from a budget once it is committed: the ``actual_amount`` of a budgeted
requirement, or the total of an asiento, which is charged the moment it is
created. Every change is appended to the requirement's history log.
"""

from __future__ import annotations

from typing import List, Optional

from mis_compras.core.database.entities import Budget, Requirement, User
from mis_compras.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from mis_compras.core.formatters import format_currency
from mis_compras.core.logging_config import get_logger
from mis_compras.core.models.domain.enums import (
    BudgetStatus,
    HistoryAction,
    NotificationType,
    ProcurementStatus,
    RequirementStatus,
    Role,
)
from mis_compras.core.models.io.common import Page
from mis_compras.core.models.io.payments import PaymentRead
from mis_compras.core.models.io.requirements import (
    AsientoCreate,
    AttachmentRead,
    HistoryLogRead,
    ObservationsUpdate,
    RequirementCreate,
    RequirementDetail,
    RequirementRead,
    RequirementStatusUpdate,
    RequirementUpdate,
)
from mis_compras.core.workflow import (
    allowed_transitions,
    can_transition,
    is_budget_blocked,
    is_valid_procurement_status,
    is_valid_status,
    normalize_page_params,
    page_offset,
    round_money,
    safe_deduct,
    total_pages,
)

from .base import ServiceBase, has_role
from .notifications import NotificationService

logger = get_logger(__name__)

MANAGER_ROLES = (Role.admin, Role.director, Role.leader)
VIEWER_ROLES = (Role.admin, Role.director, Role.leader, Role.coordinator, Role.auditor)

STATUS_LABELS = {
    RequirementStatus.pending_approval.value: "pendiente de aprobación",
    RequirementStatus.pending_coordination.value: "pendiente de coordinación",
    RequirementStatus.approved.value: "aprobada",
    RequirementStatus.rejected.value: "rechazada",
    RequirementStatus.in_process.value: "en proceso",
    RequirementStatus.completed.value: "completada",
}


def committed_amount(requirement: Requirement) -> float:
    """Amount a requirement currently holds against its budget."""
    if requirement.actual_amount:
        return round_money(requirement.actual_amount)
    if requirement.is_asiento:
        return round_money(requirement.total_amount or 0)
    return 0.0


class RequirementService(ServiceBase):
    """Purchase requirements and asientos."""

    async def get_requirement(self, requirement_id: str) -> Requirement:
        requirement = await self.repos.requirements.get_by_id(requirement_id)
        if requirement is None:
            raise NotFoundError("Requirement", requirement_id)
        return requirement

    def can_view(self, user: User, requirement: Requirement) -> bool:
        return requirement.created_by_id == user.id or has_role(user, VIEWER_ROLES)

    async def get_visible(self, user: User, requirement_id: str) -> Requirement:
        requirement = await self.get_requirement(requirement_id)
        if not self.can_view(user, requirement):
            raise PermissionDeniedError("You do not have access to this requirement")
        return requirement

    # ----- queries -----

    async def list_requirements(
        self,
        user: Optional[User] = None,
        year: Optional[int] = None,
        include_asientos: bool = True,
        status: Optional[str] = None,
        area_id: Optional[str] = None,
        search: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Page[RequirementRead]:
        """One page of requirements of ``year`` (default: the active year).

        Args:
            user: When given, only requirements this user raised
        """
        page_num, limit_num = normalize_page_params(page, limit)
        items, total = await self.repos.requirements.search(
            created_by_id=user.id if user else None,
            year=year or await self.active_year(),
            include_asientos=include_asientos,
            status=status,
            area_id=area_id,
            search=search,
            limit=limit_num,
            offset=page_offset(page_num, limit_num),
        )
        return Page[RequirementRead](
            items=[RequirementRead.model_validate(r) for r in items],
            total=total,
            page=page_num,
            limit=limit_num,
            pages=total_pages(total, limit_num),
        )

    async def list_asientos(self, year: Optional[int] = None) -> List[Requirement]:
        items, _ = await self.repos.requirements.search(year=year or await self.active_year(), asientos_only=True)
        return items

    async def get_detail(self, user: User, requirement_id: str) -> RequirementDetail:
        requirement = await self.get_visible(user, requirement_id)
        detail = RequirementDetail(**RequirementRead.model_validate(requirement).model_dump())
        detail.attachments = [
            AttachmentRead.model_validate(a) for a in await self.repos.requirements.attachments(requirement.id)
        ]
        detail.logs = [HistoryLogRead.model_validate(log) for log in await self.repos.requirements.logs(requirement.id)]
        detail.payments = [
            PaymentRead.model_validate(p) for p in await self.repos.payments.for_requirement(requirement.id)
        ]
        detail.allowed_transitions = [s.value for s in allowed_transitions(requirement.status)]
        return detail

    # ----- commands -----

    async def create(self, data: RequirementCreate, user: User) -> Requirement:
        """Raise a requirement, pending approval, and tell the approvers."""
        await self._check_references(data.project_id, data.area_id, data.budget_id, data.supplier_id)
        requirement = Requirement(
            **data.model_dump(exclude={"attachments", "area_id", "req_category"}),
            req_category=data.req_category.value,
            area_id=data.area_id or user.area_id,
            year=await self.active_year(),
            created_by_id=user.id,
        )
        await self.repos.requirements.create(requirement)
        for attachment in data.attachments:
            await self.repos.requirements.add_attachment(requirement.id, attachment.file_name, attachment.file_url)
        await self.repos.requirements.add_log(
            requirement.id, HistoryAction.created.value, user.id, f"Solicitud creada: {requirement.title}"
        )

        await NotificationService(self.session, self.repos).notify_roles(
            MANAGER_ROLES,
            "Nueva Solicitud Pendiente",
            f"{user.name} creó la solicitud \"{requirement.title}\" por {format_currency(requirement.total_amount)}.",
            NotificationType.info,
            requirement_id=requirement.id,
            exclude_user_id=user.id,
        )
        await self.commit()
        logger.info(f"Requirement {requirement.id} created by {user.email}")
        return requirement

    async def create_asiento(self, data: AsientoCreate, user: User) -> Requirement:
        """Register a pre-approved entry and charge its budget right away."""
        await self._check_references(data.project_id, data.area_id, None, data.supplier_id)
        budget = await self._get_budget(data.budget_id)
        self._charge(budget, data.total_amount)

        requirement = Requirement(
            **data.model_dump(exclude={"attachments", "area_id", "req_category"}),
            req_category=data.req_category.value,
            area_id=data.area_id or user.area_id,
            year=await self.active_year(),
            status=RequirementStatus.approved.value,
            procurement_status=ProcurementStatus.en_tramite.value,
            is_asiento=True,
            created_by_id=user.id,
        )
        await self.repos.requirements.create(requirement)
        await self.repos.budgets.update(budget)
        for attachment in data.attachments:
            await self.repos.requirements.add_attachment(requirement.id, attachment.file_name, attachment.file_url)
        await self.repos.requirements.add_log(
            requirement.id,
            HistoryAction.asiento_created.value,
            user.id,
            f"Asiento por {format_currency(requirement.total_amount)} cargado al presupuesto {budget.code}",
        )
        await self.commit()
        logger.info(f"Asiento {requirement.id} charged {requirement.total_amount} to {budget.code}")
        return requirement

    async def update(self, requirement_id: str, data: RequirementUpdate, user: User) -> Requirement:
        """Edit a requirement; committed money follows the amount and the budget."""
        requirement = await self.get_requirement(requirement_id)
        changes = data.model_dump(exclude_unset=True)
        await self._check_references(
            changes.get("project_id"), changes.get("area_id"), None, changes.get("supplier_id")
        )
        if changes.get("req_category") is not None:
            changes["req_category"] = changes["req_category"].value

        old_budget_id = requirement.budget_id
        old_committed = committed_amount(requirement)
        for key, value in changes.items():
            setattr(requirement, key, value)
        await self._rebalance(old_budget_id, old_committed, requirement)

        await self.repos.requirements.update(requirement)
        await self.repos.requirements.add_log(
            requirement.id, HistoryAction.edited.value, user.id, f"Campos editados: {', '.join(sorted(changes))}"
        )
        await self.commit()
        return requirement

    async def update_status(self, requirement_id: str, data: RequirementStatusUpdate, user: User) -> Requirement:
        """Move a requirement along the status table and notify its creator."""
        requirement = await self.get_requirement(requirement_id)
        if not is_valid_status(data.status):
            raise BusinessRuleError(f"Invalid status: {data.status}")
        if data.procurement_status is not None and not is_valid_procurement_status(data.procurement_status):
            raise BusinessRuleError(f"Invalid procurement status: {data.procurement_status}")
        if user.role == Role.coordinator.value and requirement.status != RequirementStatus.pending_coordination.value:
            raise PermissionDeniedError("Coordinators can only resolve requirements pending coordination")

        previous = requirement.status
        if data.status != previous and not can_transition(previous, data.status):
            raise BusinessRuleError(f"Cannot change status from {previous} to {data.status}")

        requirement.status = data.status
        if data.procurement_status is not None:
            requirement.procurement_status = data.procurement_status
        await self.repos.requirements.update(requirement)

        details = f"{previous} -> {requirement.status}"
        if data.procurement_status is not None:
            details += f" (compras: {requirement.procurement_status})"
        if data.comment:
            details += f". {data.comment}"
        await self.repos.requirements.add_log(requirement.id, HistoryAction.status_updated.value, user.id, details)

        if requirement.created_by_id != user.id:
            rejected = requirement.status == RequirementStatus.rejected.value
            message = f"Tu solicitud \"{requirement.title}\" está {STATUS_LABELS[requirement.status]}."
            if data.comment:
                message += f" Comentario: {data.comment}"
            await NotificationService(self.session, self.repos).notify(
                requirement.created_by_id,
                "Solicitud actualizada",
                message,
                NotificationType.error if rejected else NotificationType.info,
                requirement_id=requirement.id,
            )
        await self.commit()
        logger.info(f"Requirement {requirement.id} {details} by {user.email}")
        return requirement

    async def update_observations(self, requirement_id: str, data: ObservationsUpdate, user: User) -> Requirement:
        requirement = await self.get_visible(user, requirement_id)
        requirement.observations = data.observations
        await self.repos.requirements.update(requirement)
        await self.repos.requirements.add_log(requirement.id, HistoryAction.observations_updated.value, user.id)
        await self.commit()
        return requirement

    async def delete(self, requirement_id: str, user: User) -> None:
        """Delete a requirement with its children, giving committed money back to the budget."""
        requirement = await self.get_requirement(requirement_id)
        refund = committed_amount(requirement)
        if requirement.budget_id and refund:
            budget = await self.repos.budgets.get_by_id(requirement.budget_id)
            if budget is not None:
                budget.available = round_money(budget.available + refund)
                await self.repos.budgets.update(budget)
        await self.repos.requirements.delete_cascade(requirement)
        await self.commit()
        logger.info(f"Requirement {requirement_id} deleted by {user.email}")

    # ----- helpers -----

    async def _rebalance(self, old_budget_id: Optional[str], old_committed: float, requirement: Requirement) -> None:
        new_committed = committed_amount(requirement)
        if old_budget_id == requirement.budget_id:
            if not old_budget_id or new_committed == old_committed:
                return
            budget = await self._get_budget(old_budget_id)
            delta = round_money(new_committed - old_committed)
            if delta > 0:
                self._charge(budget, delta)
            else:
                budget.available = round_money(budget.available - delta)
            await self.repos.budgets.update(budget)
            return

        if old_budget_id and old_committed:
            old_budget = await self.repos.budgets.get_by_id(old_budget_id)
            if old_budget is not None:
                old_budget.available = round_money(old_budget.available + old_committed)
                await self.repos.budgets.update(old_budget)
        if requirement.budget_id:
            new_budget = await self._get_budget(requirement.budget_id)
            if new_committed:
                self._charge(new_budget, new_committed)
                await self.repos.budgets.update(new_budget)

    @staticmethod
    def _charge(budget: Budget, amount: float) -> None:
        """Take ``amount`` from an approved, unblocked budget."""
        if budget.status != BudgetStatus.approved.value:
            raise BusinessRuleError(f"Budget {budget.code} is not approved")
        if is_budget_blocked(budget.is_blocked, budget.available):
            raise BusinessRuleError(f"Budget {budget.code} is blocked")
        result = safe_deduct(budget.available, amount)
        if not result.ok:
            raise BusinessRuleError(
                f"Insufficient budget: {budget.code} has {format_currency(budget.available)} available, "
                f"{format_currency(result.shortfall)} short"
            )
        budget.available = result.remaining

    async def _get_budget(self, budget_id: str) -> Budget:
        budget = await self.repos.budgets.get_by_id(budget_id)
        if budget is None:
            raise NotFoundError("Budget", budget_id)
        return budget

    async def _check_references(
        self,
        project_id: Optional[str],
        area_id: Optional[str],
        budget_id: Optional[str],
        supplier_id: Optional[str],
    ) -> None:
        if project_id and await self.repos.projects.get_by_id(project_id) is None:
            raise NotFoundError("Project", project_id)
        if area_id and await self.repos.areas.get_by_id(area_id) is None:
            raise NotFoundError("Area", area_id)
        if budget_id and await self.repos.budgets.get_by_id(budget_id) is None:
            raise NotFoundError("Budget", budget_id)
        if supplier_id and await self.repos.suppliers.get_by_id(supplier_id) is None:
            raise NotFoundError("Supplier", supplier_id)
