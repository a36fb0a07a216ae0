"""
Requirement Endpoints.

Purchase requirements and asientos (pre-approved entries charged to a
budget on creation). Requesters see their own requirements; managers see
everyone's and drive the approval workflow.
"""

from typing import List, Optional

from fastapi import APIRouter, Query

from mis_compras.core.models.io.common import Page
from mis_compras.core.models.io.requirements import (
    AsientoCreate,
    ObservationsUpdate,
    RequirementCreate,
    RequirementDetail,
    RequirementRead,
    RequirementStatusUpdate,
    RequirementUpdate,
)
from mis_compras.server.services.deps import (
    CurrentUser,
    ExecutiveUser,
    ManagerUser,
    RequirementServiceDep,
    WorkflowUser,
)

router = APIRouter()

NOT_FOUND = {404: {"description": "Requirement not found"}}


@router.post("", response_model=RequirementRead, status_code=201, summary="Create Requirement")
async def create_requirement(
    data: RequirementCreate, user: CurrentUser, service: RequirementServiceDep
) -> RequirementRead:
    """
    Raise a requirement.

    It starts PENDING_APPROVAL and the approvers receive a notification.
    """
    return RequirementRead.model_validate(await service.create(data, user))


@router.get(
    "/me",
    response_model=Page[RequirementRead],
    summary="My Requirements",
    description="Requirements raised by the current user, newest first, one page at a time.",
)
async def list_mine(
    user: CurrentUser,
    service: RequirementServiceDep,
    year: Optional[int] = None,
    include_asientos: bool = True,
    status: Optional[str] = None,
    search: Optional[str] = Query(default=None, max_length=100),
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> Page[RequirementRead]:
    return await service.list_requirements(
        user, year=year, include_asientos=include_asientos, status=status, search=search, page=page, limit=limit
    )


@router.get("/all", response_model=Page[RequirementRead], summary="All Requirements")
async def list_all(
    manager: ManagerUser,
    service: RequirementServiceDep,
    year: Optional[int] = None,
    include_asientos: bool = True,
    status: Optional[str] = None,
    area_id: Optional[str] = None,
    search: Optional[str] = Query(default=None, max_length=100),
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> Page[RequirementRead]:
    return await service.list_requirements(
        year=year,
        include_asientos=include_asientos,
        status=status,
        area_id=area_id,
        search=search,
        page=page,
        limit=limit,
    )


@router.get("/asientos", response_model=List[RequirementRead], summary="List Asientos")
async def list_asientos(
    manager: ManagerUser, service: RequirementServiceDep, year: Optional[int] = None
) -> List[RequirementRead]:
    return [RequirementRead.model_validate(r) for r in await service.list_asientos(year)]


@router.post(
    "/asientos",
    response_model=RequirementRead,
    status_code=201,
    summary="Create Asiento",
    responses={400: {"description": "Budget not approved, blocked or without enough balance"}},
)
async def create_asiento(data: AsientoCreate, manager: ManagerUser, service: RequirementServiceDep) -> RequirementRead:
    """
    Register a pre-approved entry.

    The entry is created APPROVED and its total is deducted from the budget
    immediately.
    """
    return RequirementRead.model_validate(await service.create_asiento(data, manager))


@router.get(
    "/{requirement_id}",
    response_model=RequirementDetail,
    summary="Get Requirement",
    responses={403: {"description": "No access to this requirement"}, **NOT_FOUND},
)
async def get_requirement(requirement_id: str, user: CurrentUser, service: RequirementServiceDep) -> RequirementDetail:
    return await service.get_detail(user, requirement_id)


@router.put(
    "/{requirement_id}",
    response_model=RequirementRead,
    summary="Update Requirement",
    responses={400: {"description": "Not enough budget for the new amount"}, **NOT_FOUND},
)
async def update_requirement(
    requirement_id: str, data: RequirementUpdate, manager: ManagerUser, service: RequirementServiceDep
) -> RequirementRead:
    return RequirementRead.model_validate(await service.update(requirement_id, data, manager))


@router.patch(
    "/{requirement_id}/status",
    response_model=RequirementRead,
    summary="Update Requirement Status",
    description="Move the requirement along the approval workflow and optionally set its procurement status.",
    responses={400: {"description": "Unknown status or transition not allowed"}, **NOT_FOUND},
)
async def update_status(
    requirement_id: str,
    data: RequirementStatusUpdate,
    user: WorkflowUser,
    service: RequirementServiceDep,
) -> RequirementRead:
    return RequirementRead.model_validate(await service.update_status(requirement_id, data, user))


@router.patch("/{requirement_id}/observations", response_model=RequirementRead, summary="Update Observations")
async def update_observations(
    requirement_id: str, data: ObservationsUpdate, user: CurrentUser, service: RequirementServiceDep
) -> RequirementRead:
    return RequirementRead.model_validate(await service.update_observations(requirement_id, data, user))


@router.delete(
    "/{requirement_id}",
    status_code=204,
    summary="Delete Requirement",
    description="Delete a requirement with its history, attachments, payments and notifications.",
    responses=NOT_FOUND,
)
async def delete_requirement(
    requirement_id: str,
    user: ExecutiveUser,
    service: RequirementServiceDep,
) -> None:
    await service.delete(requirement_id, user)
