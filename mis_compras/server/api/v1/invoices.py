"""
Invoice Endpoints.

Supplier invoices go through reception (PDF upload), the 3-way match
against an approved requirement, approval and payment.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, File, Form, UploadFile

from mis_compras.core.models.io.invoices import InvoiceCreate, InvoicePay, InvoiceRead, InvoiceVerify
from mis_compras.server.services.deps import CurrentUser, InvoiceServiceDep, ManagerUser

router = APIRouter()

TRANSITION = {400: {"description": "Transition not allowed from the invoice's current status"}}


@router.get(
    "",
    response_model=List[InvoiceRead],
    summary="List Invoices",
    description=(
        "ADMIN, DIRECTOR, AUDITOR and DEVELOPER users see every invoice; others see the invoices "
        "they uploaded or that are linked to their own requirements."
    ),
)
async def list_invoices(
    user: CurrentUser,
    service: InvoiceServiceDep,
    status: Optional[str] = None,
    supplier_id: Optional[str] = None,
) -> List[InvoiceRead]:
    invoices = await service.list_invoices(user, status=status, supplier_id=supplier_id)
    return [InvoiceRead.model_validate(i) for i in invoices]


@router.get("/{invoice_id}", response_model=InvoiceRead, summary="Get Invoice")
async def get_invoice(invoice_id: str, user: CurrentUser, service: InvoiceServiceDep) -> InvoiceRead:
    return InvoiceRead.model_validate(await service.get(user, invoice_id))


@router.post(
    "",
    response_model=InvoiceRead,
    status_code=201,
    summary="Receive Invoice",
    description="Multipart form with the invoice fields and its PDF in ``file``.",
    responses={400: {"description": "Missing, oversized or non-PDF file"}, 404: {"description": "Supplier not found"}},
)
async def create_invoice(
    user: CurrentUser,
    service: InvoiceServiceDep,
    invoice_number: str = Form(..., min_length=1, max_length=64),
    supplier_id: str = Form(..., min_length=1),
    amount: float = Form(..., gt=0),
    issue_date: date = Form(...),
    due_date: Optional[date] = Form(default=None),
    file: Optional[UploadFile] = File(default=None),
) -> InvoiceRead:
    data = InvoiceCreate(
        invoice_number=invoice_number,
        supplier_id=supplier_id,
        amount=amount,
        issue_date=issue_date,
        due_date=due_date,
    )
    content = await file.read() if file is not None else None
    invoice = await service.create(
        data,
        file.filename if file is not None else None,
        file.content_type if file is not None else None,
        content,
        user,
    )
    return InvoiceRead.model_validate(invoice)


@router.patch(
    "/{invoice_id}/verify",
    response_model=InvoiceRead,
    summary="Verify Invoice",
    responses={
        400: {"description": "Requirement not approved, or transition not allowed"},
        404: {"description": "Invoice or requirement not found"},
    },
)
async def verify_invoice(
    invoice_id: str, data: InvoiceVerify, user: CurrentUser, service: InvoiceServiceDep
) -> InvoiceRead:
    """
    Perform the 3-way match.

    Links the invoice to an approved requirement and records the amount
    variance and whether it is within the configured tolerance.
    """
    return InvoiceRead.model_validate(await service.verify(invoice_id, data.requirement_id, user))


@router.patch("/{invoice_id}/approve", response_model=InvoiceRead, summary="Approve Invoice", responses=TRANSITION)
async def approve_invoice(invoice_id: str, manager: ManagerUser, service: InvoiceServiceDep) -> InvoiceRead:
    return InvoiceRead.model_validate(await service.approve(invoice_id))


@router.patch("/{invoice_id}/pay", response_model=InvoiceRead, summary="Pay Invoice", responses=TRANSITION)
async def pay_invoice(
    invoice_id: str, data: InvoicePay, manager: ManagerUser, service: InvoiceServiceDep
) -> InvoiceRead:
    """
    Mark the invoice paid.

    When the invoice is linked to a requirement a payment is registered on it
    with the next sequential number.
    """
    invoice = await service.pay(invoice_id, data.payment_date, data.transaction_number, manager)
    return InvoiceRead.model_validate(invoice)
