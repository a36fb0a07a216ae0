"""
Excel reports.

Each report is a single-sheet openpyxl workbook saved to memory. Amounts go
through :func:`format_currency` and dates through :func:`format_date` so the
sheet reads the same as the screens.
"""

from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from mis_compras.core.database.entities import User
from mis_compras.core.formatters import format_currency, format_date
from mis_compras.core.logging_config import get_logger
from mis_compras.core.workflow import execution_percent

from .base import ServiceBase
from .budgets import BudgetService

logger = get_logger(__name__)

REQUIREMENT_COLUMNS = [
    "NÚMERO DE REQUERIMIENTO",
    "DETALLES DEL REQUERIMIENTO",
    "VALOR DE LA COMPRA",
    "ESTADO",
    "ESTADO TRÁMITE",
    "PROYECTO",
    "ÁREA",
    "SOLICITANTE",
    "FECHA DE SOLICITUD",
]
BUDGET_COLUMNS = [
    "CÓDIGO",
    "PRESUPUESTO",
    "PROYECTO",
    "ÁREA",
    "MONTO ASIGNADO",
    "MONTO DISPONIBLE",
    "EJECUCIÓN (%)",
    "LÍDER RESPONSABLE",
    "ESTADO",
]
SUPPLIER_COLUMNS = [
    "NOMBRE PROVEEDOR",
    "NIT / TAX ID",
    "CORREO CONTACTO",
    "TELÉFONO",
    "DIRECCIÓN",
    "ESTADO",
]


XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def render_xlsx(title: str, header: Sequence[str], rows: Iterable[Sequence[object]]) -> bytes:
    """Write ``header`` in bold followed by ``rows`` and return the .xlsx bytes."""
    wb = Workbook()
    ws = wb.active
    ws.title = title
    ws.append(list(header))
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(list(row))
    ws.freeze_panes = "A2"
    for index, name in enumerate(header, start=1):
        ws.column_dimensions[get_column_letter(index)].width = max(12, len(name) + 2)

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def short_id(value: str) -> str:
    """First eight characters of an id, upper-cased, as shown to users."""
    return value[:8].upper()


def report_file_name(kind: str) -> str:
    return f"reporte_{kind}_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}.xlsx"


class ReportService(ServiceBase):
    """Builds the downloadable reports."""

    async def _names(self) -> Dict[str, Dict[str, str]]:
        return {
            "areas": {a.id: a.name for a in await self.repos.areas.list_ordered()},
            "projects": {p.id: p.name for p in await self.repos.projects.list_ordered()},
            "users": {u.id: u.name for u in await self.repos.users.list_all()},
        }

    async def requirements_xlsx(self, year: Optional[int] = None) -> bytes:
        requirements, _ = await self.repos.requirements.search(year=year or await self.active_year())
        names = await self._names()
        rows: List[List[object]] = [
            [
                short_id(r.id),
                r.title,
                format_currency(r.payable_amount),
                r.status,
                r.procurement_status,
                names["projects"].get(r.project_id, ""),
                names["areas"].get(r.area_id, ""),
                names["users"].get(r.created_by_id, ""),
                format_date(r.created_at),
            ]
            for r in requirements
        ]
        logger.info(f"Requirements report with {len(rows)} rows")
        return render_xlsx("Requerimientos", REQUIREMENT_COLUMNS, rows)

    async def budgets_xlsx(self, user: User, year: Optional[int] = None) -> bytes:
        budgets = await BudgetService(self.session, self.repos).list_budgets(user, year=year)
        names = await self._names()
        rows = [
            [
                b.code,
                b.title,
                names["projects"].get(b.project_id, ""),
                names["areas"].get(b.area_id, ""),
                format_currency(b.amount),
                format_currency(b.available),
                execution_percent(b.amount, b.available),
                names["users"].get(b.manager_id, ""),
                b.status,
            ]
            for b in budgets
        ]
        logger.info(f"Budgets report with {len(rows)} rows")
        return render_xlsx("Presupuestos", BUDGET_COLUMNS, rows)

    async def suppliers_xlsx(self) -> bytes:
        rows = [
            [
                s.name,
                s.tax_id,
                s.contact_email,
                s.contact_phone,
                s.address,
                "ACTIVO" if s.is_active else "INACTIVO",
            ]
            for s in await self.repos.suppliers.list_ordered()
        ]
        return render_xlsx("Proveedores", SUPPLIER_COLUMNS, rows)
