"""
Budget Adjustment Endpoints.

Anyone may request an increase of a budget or a transfer into it; directors
review the requests.
"""

from typing import List, Optional

from fastapi import APIRouter
from fastapi.responses import Response

from mis_compras.core.models.io.adjustments import AdjustmentCreate, AdjustmentReject, AdjustmentRead
from mis_compras.server.services.deps import (
    AdjustmentServiceDep,
    CurrentUser,
    DirectorUser,
    DocumentServiceDep,
    ExecutiveUser,
)
from mis_compras.server.services.documents import PDF_MEDIA_TYPE, pdf_response

router = APIRouter()

PENDING_ONLY = {400: {"description": "Adjustment already processed or balances no longer allow it"}}


@router.post(
    "",
    response_model=AdjustmentRead,
    status_code=201,
    summary="Request Adjustment",
    responses={400: {"description": "Transfer sources are invalid"}, 404: {"description": "Budget not found"}},
)
async def request_adjustment(
    data: AdjustmentCreate, user: CurrentUser, service: AdjustmentServiceDep
) -> AdjustmentRead:
    """
    Request a budget adjustment.

    A TRANSFER needs source budgets whose amounts add up to the requested
    amount, each with enough available balance.
    """
    return await service.request(data, user)


@router.get("/my", response_model=List[AdjustmentRead], summary="My Adjustments")
async def list_mine(user: CurrentUser, service: AdjustmentServiceDep) -> List[AdjustmentRead]:
    return await service.list_mine(user)


@router.get("/pending", response_model=List[AdjustmentRead], summary="Pending Adjustments")
async def list_pending(director: DirectorUser, service: AdjustmentServiceDep) -> List[AdjustmentRead]:
    return await service.list_pending()


@router.get(
    "",
    response_model=List[AdjustmentRead],
    summary="List Adjustments",
)
async def list_all(
    user: ExecutiveUser, service: AdjustmentServiceDep, status: Optional[str] = None, year: Optional[int] = None
) -> List[AdjustmentRead]:
    return await service.list_all(status=status, year=year)


@router.get("/{adjustment_id}", response_model=AdjustmentRead, summary="Get Adjustment")
async def get_adjustment(adjustment_id: str, user: CurrentUser, service: AdjustmentServiceDep) -> AdjustmentRead:
    return await service.get(user, adjustment_id)


@router.get(
    "/{adjustment_id}/document",
    summary="Adjustment Document",
    response_class=Response,
    responses={
        200: {"content": {PDF_MEDIA_TYPE: {}}, "description": "Printable adjustment"},
        403: {"description": "Neither the requester nor a reviewer"},
        404: {"description": "Not found"},
    },
)
async def adjustment_document(adjustment_id: str, user: CurrentUser, documents: DocumentServiceDep) -> Response:
    file_name, content = await documents.adjustment_pdf(user, adjustment_id)
    return pdf_response(content, file_name)


@router.patch(
    "/{adjustment_id}/approve", response_model=AdjustmentRead, summary="Approve Adjustment", responses=PENDING_ONLY
)
async def approve_adjustment(
    adjustment_id: str, director: DirectorUser, service: AdjustmentServiceDep
) -> AdjustmentRead:
    """
    Approve an adjustment.

    Source budgets give up their share, the target grows by the requested
    amount, and the adjustment is closed in the same transaction.
    """
    return await service.approve(adjustment_id, director)


@router.patch(
    "/{adjustment_id}/reject", response_model=AdjustmentRead, summary="Reject Adjustment", responses=PENDING_ONLY
)
async def reject_adjustment(
    adjustment_id: str, data: AdjustmentReject, director: DirectorUser, service: AdjustmentServiceDep
) -> AdjustmentRead:
    return await service.reject(adjustment_id, director, data.comment)
