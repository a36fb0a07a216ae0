"""
Payment Endpoints.

Payments registered against a requirement, numbered sequentially.
"""

from typing import List

from fastapi import APIRouter

from mis_compras.core.models.io.payments import MultiplePaymentsToggle, PaymentCreate, PaymentRead, PaymentUpdate
from mis_compras.core.models.io.requirements import RequirementRead
from mis_compras.server.services.deps import CurrentUser, ManagerUser, PaymentServiceDep

router = APIRouter()

LIMITS = {400: {"description": "Single-payment requirement, payment limit reached or total exceeded"}}


@router.get("/{requirement_id}", response_model=List[PaymentRead], summary="List Payments")
async def list_payments(requirement_id: str, user: CurrentUser, service: PaymentServiceDep) -> List[PaymentRead]:
    return [PaymentRead.model_validate(p) for p in await service.list_for_requirement(requirement_id, user)]


@router.post(
    "/{requirement_id}", response_model=PaymentRead, status_code=201, summary="Register Payment", responses=LIMITS
)
async def create_payment(
    requirement_id: str, data: PaymentCreate, manager: ManagerUser, service: PaymentServiceDep
) -> PaymentRead:
    """
    Register a payment.

    The requirement's procurement status becomes FINALIZADO once the payments
    cover its amount, EN_TRAMITE otherwise.
    """
    return PaymentRead.model_validate(await service.create(requirement_id, data, manager))


@router.put("/update/{payment_id}", response_model=PaymentRead, summary="Update Payment", responses=LIMITS)
async def update_payment(
    payment_id: str, data: PaymentUpdate, manager: ManagerUser, service: PaymentServiceDep
) -> PaymentRead:
    return PaymentRead.model_validate(await service.update(payment_id, data, manager))


@router.delete("/delete/{payment_id}", status_code=204, summary="Delete Payment")
async def delete_payment(payment_id: str, manager: ManagerUser, service: PaymentServiceDep) -> None:
    await service.delete(payment_id, manager)


@router.patch(
    "/{requirement_id}/toggle-multiple",
    response_model=RequirementRead,
    summary="Toggle Multiple Payments",
    responses={400: {"description": "Requirement already has several payments"}},
)
async def toggle_multiple(
    requirement_id: str, data: MultiplePaymentsToggle, manager: ManagerUser, service: PaymentServiceDep
) -> RequirementRead:
    return RequirementRead.model_validate(await service.toggle_multiple(requirement_id, data.has_multiple_payments))
