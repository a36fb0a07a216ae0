"""
Business rules for the procurement workflow.

Pure functions only: the requirement and invoice status tables, budget
execution math, pagination math and document code generation. Nothing in this
module touches the database, so services call it before persisting anything.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from mis_compras.core.models.domain.enums import (
    BudgetHealth,
    InvoiceStatus,
    ProcurementStatus,
    RequirementStatus,
)

# =====================================================================
# Status tables
# =====================================================================

REQUIREMENT_TRANSITIONS: Dict[RequirementStatus, List[RequirementStatus]] = {
    RequirementStatus.pending_approval: [
        RequirementStatus.approved,
        RequirementStatus.rejected,
        RequirementStatus.pending_coordination,
    ],
    RequirementStatus.pending_coordination: [RequirementStatus.approved, RequirementStatus.rejected],
    RequirementStatus.approved: [RequirementStatus.in_process, RequirementStatus.completed],
    RequirementStatus.in_process: [RequirementStatus.completed],
    RequirementStatus.rejected: [],
    RequirementStatus.completed: [],
}

INVOICE_TRANSITIONS: Dict[InvoiceStatus, List[InvoiceStatus]] = {
    InvoiceStatus.received: [InvoiceStatus.verified],
    InvoiceStatus.verified: [InvoiceStatus.approved],
    InvoiceStatus.approved: [InvoiceStatus.paid],
    InvoiceStatus.paid: [],
}

REQUIREMENT_STATUSES = frozenset(s.value for s in RequirementStatus)
PROCUREMENT_STATUSES = frozenset(s.value for s in ProcurementStatus)


def is_valid_status(status: Optional[str]) -> bool:
    """Return True if ``status`` is a known requirement status."""
    return status in REQUIREMENT_STATUSES


def is_valid_procurement_status(status: Optional[str]) -> bool:
    """Return True if ``status`` is a known procurement status."""
    return status in PROCUREMENT_STATUSES


def allowed_transitions(current: Union[str, RequirementStatus]) -> List[RequirementStatus]:
    """List the statuses a requirement may move to from ``current``."""
    if not is_valid_status(current):
        return []
    return list(REQUIREMENT_TRANSITIONS[RequirementStatus(current)])


def can_transition(current: Union[str, RequirementStatus], target: Union[str, RequirementStatus]) -> bool:
    """Check the requirement status table.

    Args:
        current: Status the requirement is in now.
        target: Requested status.

    Returns:
        True when ``target`` is listed for ``current``; False for unknown
        statuses and for terminal states.
    """
    if not is_valid_status(target):
        return False
    return RequirementStatus(target) in allowed_transitions(current)


def can_transition_invoice(current: Union[str, InvoiceStatus], target: Union[str, InvoiceStatus]) -> bool:
    """Check the invoice status table (``RECEIVED -> VERIFIED -> APPROVED -> PAID``)."""
    try:
        return InvoiceStatus(target) in INVOICE_TRANSITIONS[InvoiceStatus(current)]
    except ValueError:
        return False


# =====================================================================
# Budget math
# =====================================================================

Number = Union[int, float]


def to_amount(value: Any) -> float:
    """Coerce a stored or submitted amount to a float, treating garbage as 0."""
    if value is None:
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return amount


def round_money(value: Number) -> float:
    return round(float(value), 2)


def calculate_available(amount: Any, spent: Any) -> float:
    """Remaining balance of a budget: ``amount - spent``."""
    return round_money(to_amount(amount) - to_amount(spent))


def execution_percent(amount: Any, available: Any) -> int:
    """Percentage of a budget already executed, rounded to an integer.

    A budget with no amount is reported as 0% executed.
    """
    total = to_amount(amount)
    if total == 0:
        return 0
    return round((total - to_amount(available)) / total * 100)


def budget_health(available: Any, amount: Any) -> BudgetHealth:
    """Classify a budget by executed percentage.

    ``EXHAUSTED`` at 100% or more (and for budgets with no amount),
    ``WARNING`` from 80%, ``ACTIVE`` from 50%, otherwise ``NORMAL``.
    """
    total = to_amount(amount)
    if total <= 0:
        return BudgetHealth.exhausted
    used = (total - to_amount(available)) / total * 100
    if used >= 100:
        return BudgetHealth.exhausted
    if used >= 80:
        return BudgetHealth.warning
    if used >= 50:
        return BudgetHealth.active
    return BudgetHealth.normal


def is_budget_blocked(is_blocked: bool, available: Any) -> bool:
    """A budget accepts no more spending when flagged or when nothing is left."""
    return bool(is_blocked) or to_amount(available) <= 0


def is_budget_critical(available: Any, amount: Any) -> bool:
    """Less than 10% of the budget remains."""
    total = to_amount(amount)
    if total <= 0:
        return False
    return to_amount(available) / total < 0.1


@dataclass(frozen=True)
class DeductionResult:
    """Outcome of :func:`safe_deduct`."""

    ok: bool
    remaining: float
    shortfall: float = 0.0


def safe_deduct(available: Any, amount: Any) -> DeductionResult:
    """Deduct ``amount`` from ``available`` without going negative.

    Returns:
        ``DeductionResult(ok=True, remaining=...)`` on success; otherwise
        ``ok=False`` with ``remaining`` unchanged and the missing ``shortfall``.
    """
    balance = to_amount(available)
    charge = to_amount(amount)
    if charge < 0:
        return DeductionResult(ok=False, remaining=round_money(balance))
    if charge > balance + 1e-9:
        return DeductionResult(ok=False, remaining=round_money(balance), shortfall=round_money(charge - balance))
    return DeductionResult(ok=True, remaining=round_money(balance - charge))


@dataclass(frozen=True)
class BudgetSummary:
    """Aggregate figures over a set of budgets."""

    total: float
    available: float
    spent: float
    execution_pct: int
    critical: int
    count: int


def summarize_budgets(budgets: Iterable[Any]) -> BudgetSummary:
    """Aggregate a collection of budgets.

    Each item only needs ``amount`` and ``available`` attributes (entities,
    read models or simple namespaces all work).
    """
    total = 0.0
    available = 0.0
    critical = 0
    count = 0
    for budget in budgets:
        amount = to_amount(getattr(budget, "amount", 0))
        left = to_amount(getattr(budget, "available", 0))
        total += amount
        available += left
        if is_budget_critical(left, amount):
            critical += 1
        count += 1
    return BudgetSummary(
        total=round_money(total),
        available=round_money(available),
        spent=round_money(total - available),
        execution_pct=execution_percent(total, available),
        critical=critical,
        count=count,
    )


def sources_match_requested(amounts: Iterable[Any], requested: Any, tolerance: float = 0.01) -> bool:
    """Transfer sources must add up to the requested amount (within ``tolerance``)."""
    return abs(sum(to_amount(a) for a in amounts) - to_amount(requested)) <= tolerance


# =====================================================================
# Pagination
# =====================================================================

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 25
MAX_LIMIT = 100

ELLIPSIS = "ellipsis"


def page_offset(page: int, limit: int) -> int:
    """Number of rows to skip for a 1-based page."""
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    if limit <= 0 or total <= 0:
        return 0
    return math.ceil(total / limit)


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_page_params(page: Any = None, limit: Any = None) -> tuple[int, int]:
    """Sanitize pagination input.

    ``page`` is at least 1 and ``limit`` is clamped to ``[1, 100]``; anything
    that is not a number falls back to page 1 and 25 rows.
    """
    page_num = _to_int(page)
    limit_num = _to_int(limit)
    page_num = DEFAULT_PAGE if page_num is None else max(1, page_num)
    limit_num = DEFAULT_LIMIT if limit_num is None else min(MAX_LIMIT, max(1, limit_num))
    return page_num, limit_num


def page_window(current: int, pages: int, max_visible: int = 5) -> List[Union[int, str]]:
    """Page numbers to render in a pager, with ``"ellipsis"`` gaps.

    The first and last pages are always shown once the window does not fit.

    >>> page_window(1, 3)
    [1, 2, 3]
    >>> page_window(5, 10)
    [1, 'ellipsis', 4, 5, 6, 'ellipsis', 10]
    """
    if pages <= 0:
        return []
    if pages <= max_visible:
        return list(range(1, pages + 1))

    current = min(max(1, current), pages)
    if current <= 3:
        return [1, 2, 3, 4, ELLIPSIS, pages]
    if current >= pages - 2:
        return [1, ELLIPSIS] + list(range(pages - 3, pages + 1))
    return [1, ELLIPSIS, current - 1, current, current + 1, ELLIPSIS, pages]


# =====================================================================
# Document codes
# =====================================================================


def budget_code(year: int, sequence: int) -> str:
    """``BUD-2024-001`` style code for the ``sequence``-th budget of ``year``."""
    return f"BUD-{year}-{sequence:03d}"


def adjustment_code(year: int, sequence: int) -> str:
    """``ADJ-2024-0001`` style code for the ``sequence``-th adjustment of ``year``."""
    return f"ADJ-{year}-{sequence:04d}"


def unique_code(base: str, taken: Sequence[str]) -> str:
    """Append ``-2``, ``-3``... to ``base`` until it collides with nothing in ``taken``."""
    if base not in taken:
        return base
    suffix = 2
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"
