"""
Budget Endpoints.

Directors open and edit budgets; the assigned manager approves them. Plain
users only see approved budgets they manage or co-lead.
"""

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter
from fastapi.responses import Response

from mis_compras.core.models.io.budgets import (
    BudgetApproval,
    BudgetCreate,
    BudgetDetail,
    BudgetRead,
    BudgetSummaryRead,
    BudgetUpdate,
    ManagerOption,
)
from mis_compras.server.services.budgets import to_budget_read
from mis_compras.server.services.deps import BudgetServiceDep, CurrentUser, DirectorUser, DocumentServiceDep
from mis_compras.server.services.documents import PDF_MEDIA_TYPE, pdf_response

router = APIRouter()


@router.get(
    "",
    response_model=List[BudgetRead],
    summary="List Budgets",
    description="Budgets of a year (default: the active year), filtered by project, area or status.",
)
async def list_budgets(
    user: CurrentUser,
    service: BudgetServiceDep,
    year: Optional[int] = None,
    project_id: Optional[str] = None,
    area_id: Optional[str] = None,
    status: Optional[str] = None,
) -> List[BudgetRead]:
    budgets = await service.list_budgets(user, year=year, project_id=project_id, area_id=area_id, status=status)
    return [to_budget_read(b) for b in budgets]


@router.get("/pending", response_model=List[BudgetRead], summary="Pending Budgets")
async def list_pending(user: CurrentUser, service: BudgetServiceDep) -> List[BudgetRead]:
    """
    Budgets awaiting approval.

    Leaders and users only see the budgets assigned to them.
    """
    return [to_budget_read(b) for b in await service.list_pending(user)]


@router.get("/years", response_model=List[int], summary="Budget Years")
async def list_years(user: CurrentUser, service: BudgetServiceDep) -> List[int]:
    return await service.years()


@router.get("/manager-options", response_model=List[ManagerOption], summary="Manager Options")
async def manager_options(user: CurrentUser, service: BudgetServiceDep) -> List[ManagerOption]:
    return [ManagerOption.model_validate(u) for u in await service.manager_options()]


@router.get(
    "/summary",
    response_model=BudgetSummaryRead,
    summary="Budget Summary",
    description="Totals, executed percentage and number of critical budgets over the visible budgets.",
)
async def summary(user: CurrentUser, service: BudgetServiceDep, year: Optional[int] = None) -> BudgetSummaryRead:
    return BudgetSummaryRead(**asdict(await service.summary(user, year=year)))


@router.get(
    "/{budget_id}",
    response_model=BudgetDetail,
    summary="Get Budget",
    responses={403: {"description": "No access to this budget"}, 404: {"description": "Not found"}},
)
async def get_budget(budget_id: str, user: CurrentUser, service: BudgetServiceDep) -> BudgetDetail:
    return await service.get_detail(user, budget_id)


@router.get(
    "/{budget_id}/document",
    summary="Budget Document",
    response_class=Response,
    responses={
        200: {"content": {PDF_MEDIA_TYPE: {}}, "description": "Printable budget"},
        403: {"description": "No access to this budget"},
        404: {"description": "Not found"},
    },
)
async def budget_document(budget_id: str, user: CurrentUser, documents: DocumentServiceDep) -> Response:
    """
    Printable budget.

    One page with the amount, executed and available balances, the people
    involved, and an APROBADO or RECHAZADO stamp once the manager decided.
    """
    file_name, content = await documents.budget_pdf(user, budget_id)
    return pdf_response(content, file_name)


@router.post("", response_model=BudgetRead, status_code=201, summary="Create Budget")
async def create_budget(data: BudgetCreate, director: DirectorUser, service: BudgetServiceDep) -> BudgetRead:
    """
    Open a budget.

    The budget starts PENDING with its whole amount available; the assigned
    manager is notified to approve it.
    """
    return to_budget_read(await service.create_budget(data, director))


@router.put(
    "/{budget_id}",
    response_model=BudgetRead,
    summary="Update Budget",
    responses={400: {"description": "New amount is below what is already committed"}},
)
async def update_budget(
    budget_id: str, data: BudgetUpdate, director: DirectorUser, service: BudgetServiceDep
) -> BudgetRead:
    return to_budget_read(await service.update_budget(budget_id, data))


@router.delete(
    "/{budget_id}",
    status_code=204,
    summary="Delete Budget",
    responses={400: {"description": "Budget still has requirements"}},
)
async def delete_budget(budget_id: str, director: DirectorUser, service: BudgetServiceDep) -> None:
    await service.delete_budget(budget_id)


@router.patch(
    "/{budget_id}/approve",
    response_model=BudgetRead,
    summary="Approve or Reject Budget",
    responses={400: {"description": "Budget already processed"}, 403: {"description": "Not the assigned manager"}},
)
async def decide_budget(
    budget_id: str, data: BudgetApproval, user: CurrentUser, service: BudgetServiceDep
) -> BudgetRead:
    return to_budget_read(await service.decide(budget_id, user, data.approve))
