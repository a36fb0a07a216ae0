"""
Budget service.

Directors open budgets, the assigned manager approves or rejects them, and
the remaining balance (``available``) follows every change of the allocated
amount. Plain users only ever see approved budgets they manage or co-lead.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from mis_compras.core.database import utc_now
from mis_compras.core.database.entities import Budget, User
from mis_compras.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from mis_compras.core.formatters import format_currency
from mis_compras.core.logging_config import get_logger
from mis_compras.core.models.domain.enums import BudgetStatus, NotificationType, Role
from mis_compras.core.models.io.budgets import BudgetCreate, BudgetDetail, BudgetRead, BudgetUpdate
from mis_compras.core.models.io.requirements import RequirementRead
from mis_compras.core.workflow import (
    BudgetSummary,
    budget_code,
    budget_health,
    execution_percent,
    round_money,
    summarize_budgets,
    unique_code,
)

from .adjustments import to_adjustment_read
from .base import ServiceBase
from .notifications import NotificationService

logger = get_logger(__name__)


def to_budget_read(budget: Budget) -> BudgetRead:
    """Read model with the derived execution figures filled in."""
    read = BudgetRead.model_validate(budget)
    read.execution_percent = execution_percent(budget.amount, budget.available)
    read.health = budget_health(budget.available, budget.amount).value
    return read


class BudgetService(ServiceBase):
    """Budget lifecycle and visibility."""

    def _scope_for(self, user: User) -> Optional[str]:
        """User id to restrict listings to, or None when the role sees every budget."""
        return user.id if user.role == Role.user.value else None

    async def get_budget(self, budget_id: str) -> Budget:
        budget = await self.repos.budgets.get_by_id(budget_id)
        if budget is None:
            raise NotFoundError("Budget", budget_id)
        return budget

    async def can_view(self, user: User, budget: Budget) -> bool:
        if user.role != Role.user.value:
            return True
        return budget.manager_id == user.id or await self.repos.budgets.is_sub_leader(budget.id, user.id)

    # ----- queries -----

    async def list_budgets(
        self,
        user: User,
        year: Optional[int] = None,
        project_id: Optional[str] = None,
        area_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Budget]:
        """Budgets of ``year`` (default: the active year) visible to ``user``."""
        scope = self._scope_for(user)
        if scope:
            status = BudgetStatus.approved.value
        return await self.repos.budgets.search(
            year=year or await self.active_year(),
            project_id=project_id,
            area_id=area_id,
            status=status,
            visible_to_user_id=scope,
        )

    async def get_detail(self, user: User, budget_id: str) -> BudgetDetail:
        budget = await self.get_budget(budget_id)
        if not await self.can_view(user, budget):
            raise PermissionDeniedError("You do not have access to this budget")

        detail = BudgetDetail(**to_budget_read(budget).model_dump())
        detail.sub_leader_ids = await self.repos.budgets.sub_leader_ids(budget.id)
        detail.requirements = [
            RequirementRead.model_validate(r) for r in await self.repos.budgets.recent_requirements(budget.id)
        ]
        detail.adjustments = [
            to_adjustment_read(adjustment, await self.repos.adjustments.sources(adjustment.id))
            for adjustment in await self.repos.budgets.adjustments_for(budget.id)
        ]
        return detail

    async def list_pending(self, user: User) -> List[Budget]:
        """Budgets awaiting approval; leaders and users only see the ones assigned to them."""
        if user.role in (Role.leader.value, Role.user.value):
            return await self.repos.budgets.list_pending(manager_id=user.id)
        return await self.repos.budgets.list_pending()

    async def years(self) -> List[int]:
        years = await self.repos.budgets.distinct_years()
        return years or [await self.active_year()]

    async def manager_options(self) -> List[User]:
        """Active users; every user when no account is active."""
        return await self.repos.users.list_active() or await self.repos.users.list_all()

    async def summary(self, user: User, year: Optional[int] = None) -> BudgetSummary:
        return summarize_budgets(await self.list_budgets(user, year=year))

    # ----- commands -----

    async def create_budget(self, data: BudgetCreate, director: User) -> Budget:
        await self._check_references(data.project_id, data.area_id, data.category_id, data.manager_id)
        year = data.year or await self.active_year()
        code = await self._allocate_code(year, data.code)

        budget = Budget(
            **data.model_dump(exclude={"code", "year", "sub_leader_ids"}),
            code=code,
            year=year,
            available=round_money(data.amount),
            status=BudgetStatus.pending.value,
            created_by_id=director.id,
        )
        await self.repos.budgets.create(budget)
        if data.sub_leader_ids:
            await self._set_sub_leaders(budget.id, data.sub_leader_ids)

        notifier = NotificationService(self.session, self.repos)
        if budget.manager_id:
            await notifier.notify(
                budget.manager_id,
                "Nuevo presupuesto asignado",
                f"Se te asignó el presupuesto {budget.code} - {budget.title} por "
                f"{format_currency(budget.amount)}. Requiere tu aprobación.",
                NotificationType.info,
                email=True,
            )
        await self.commit()
        await notifier.send_mail()
        logger.info(f"Created budget {budget.code} for {budget.amount}")
        return budget

    async def update_budget(self, budget_id: str, data: BudgetUpdate) -> Budget:
        """Apply edits. A new amount shifts ``available`` by the same difference."""
        budget = await self.get_budget(budget_id)
        changes = data.model_dump(exclude_unset=True)
        sub_leader_ids = changes.pop("sub_leader_ids", None)

        await self._check_references(
            changes.get("project_id"), changes.get("area_id"), changes.get("category_id"), changes.get("manager_id")
        )

        new_amount = changes.pop("amount", None)
        if new_amount is not None:
            diff = round_money(new_amount - budget.amount)
            if budget.available + diff < 0:
                raise BusinessRuleError(
                    f"New amount is below the {format_currency(budget.amount - budget.available)} already committed"
                )
            budget.amount = round_money(new_amount)
            budget.available = round_money(budget.available + diff)

        for key, value in changes.items():
            setattr(budget, key, value)
        budget.version += 1
        await self.repos.budgets.update(budget)

        if sub_leader_ids is not None:
            await self._set_sub_leaders(budget.id, sub_leader_ids)
        await self.commit()
        return budget

    async def delete_budget(self, budget_id: str) -> None:
        budget = await self.get_budget(budget_id)
        requirements = await self.repos.budgets.count_requirements(budget.id)
        if requirements:
            raise BusinessRuleError(f"Cannot delete budget with {requirements} requirements")
        await self.repos.budgets.delete_with_links(budget)
        await self.commit()
        logger.info(f"Deleted budget {budget.code}")

    async def decide(self, budget_id: str, user: User, approve: bool) -> Budget:
        """Approve or reject a pending budget. Only its assigned manager may decide."""
        budget = await self.get_budget(budget_id)
        if budget.manager_id != user.id:
            raise PermissionDeniedError("Only the assigned manager can approve this budget")
        if budget.status != BudgetStatus.pending.value:
            raise BusinessRuleError("Budget already processed")

        budget.status = BudgetStatus.approved.value if approve else BudgetStatus.rejected.value
        budget.approved_by_id = user.id
        budget.approved_at = utc_now()
        await self.repos.budgets.update(budget)

        notifier = NotificationService(self.session, self.repos)
        if budget.created_by_id:
            verdict = "aprobado" if approve else "rechazado"
            await notifier.notify(
                budget.created_by_id,
                f"Presupuesto {verdict}",
                f"{user.name} ha {verdict} el presupuesto {budget.code} - {budget.title}.",
                NotificationType.success if approve else NotificationType.error,
                email=True,
            )
        await self.commit()
        await notifier.send_mail()
        logger.info(f"Budget {budget.code} {budget.status} by {user.email}")
        return budget

    # ----- helpers -----

    async def _check_references(
        self,
        project_id: Optional[str],
        area_id: Optional[str],
        category_id: Optional[str],
        manager_id: Optional[str],
    ) -> None:
        if project_id and await self.repos.projects.get_by_id(project_id) is None:
            raise NotFoundError("Project", project_id)
        if area_id and await self.repos.areas.get_by_id(area_id) is None:
            raise NotFoundError("Area", area_id)
        if category_id and await self.repos.categories.get_by_id(category_id) is None:
            raise NotFoundError("Category", category_id)
        if manager_id and await self.repos.users.get_by_id(manager_id) is None:
            raise NotFoundError("User", manager_id)

    async def _set_sub_leaders(self, budget_id: str, user_ids: Iterable[str]) -> None:
        ids = list(dict.fromkeys(user_ids))
        known = set(await self.repos.users.existing_ids(ids))
        missing = [user_id for user_id in ids if user_id not in known]
        if missing:
            raise NotFoundError("User", missing[0])
        await self.repos.budgets.replace_sub_leaders(budget_id, ids)

    async def _allocate_code(self, year: int, requested: Optional[str]) -> str:
        if requested:
            base = requested.strip().upper()
        else:
            base = budget_code(year, await self.repos.budgets.count_for_year(year) + 1)
        return unique_code(base, await self.repos.budgets.codes_like(base))
