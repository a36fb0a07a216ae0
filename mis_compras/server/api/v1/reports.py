"""
Report Endpoints.

Excel downloads of requirements, budgets and suppliers.
"""

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import Response

from mis_compras.server.services.deps import CurrentUser, ManagerUser, ReportServiceDep
from mis_compras.server.services.reports import XLSX_MEDIA_TYPE, report_file_name

router = APIRouter()

XLSX_RESPONSE = {200: {"content": {XLSX_MEDIA_TYPE: {}}, "description": "Excel workbook"}}


def xlsx_response(content: bytes, kind: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={report_file_name(kind)}"},
    )


@router.get("/requirements", summary="Requirements Report", response_class=Response, responses=XLSX_RESPONSE)
async def requirements_report(manager: ManagerUser, service: ReportServiceDep, year: Optional[int] = None) -> Response:
    return xlsx_response(await service.requirements_xlsx(year), "requerimientos")


@router.get("/budgets", summary="Budgets Report", response_class=Response, responses=XLSX_RESPONSE)
async def budgets_report(user: CurrentUser, service: ReportServiceDep, year: Optional[int] = None) -> Response:
    return xlsx_response(await service.budgets_xlsx(user, year), "presupuestos")


@router.get("/suppliers", summary="Suppliers Report", response_class=Response, responses=XLSX_RESPONSE)
async def suppliers_report(user: CurrentUser, service: ReportServiceDep) -> Response:
    return xlsx_response(await service.suppliers_xlsx(), "proveedores")
