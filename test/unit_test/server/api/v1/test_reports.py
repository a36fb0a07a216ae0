"""API tests for the Excel reports."""

import io

import pytest
from httpx import AsyncClient
from openpyxl import load_workbook

from mis_compras.core.formatters import format_currency
from mis_compras.server.services.reports import (
    BUDGET_COLUMNS,
    REQUIREMENT_COLUMNS,
    SUPPLIER_COLUMNS,
    XLSX_MEDIA_TYPE,
)

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/reports"


def _rows(response):
    wb = load_workbook(io.BytesIO(response.content), read_only=True)
    return [list(row) for row in wb.active.iter_rows(values_only=True)]


class TestReports:
    async def test_requirements_report(self, client: AsyncClient, auth, requester, leader, project):
        created = await client.post(
            "/api/v1/requirements",
            json={"title": "Iluminación de sala", "total_amount": 1_500_000, "project_id": project.id},
            headers=auth(requester),
        )
        requirement_id = created.json()["id"]

        response = await client.get(f"{BASE}/requirements", headers=auth(leader))

        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX_MEDIA_TYPE
        assert "reporte_requerimientos_" in response.headers["content-disposition"]
        assert response.headers["content-disposition"].endswith(".xlsx")
        header, row = _rows(response)
        assert header == REQUIREMENT_COLUMNS
        assert "SOLICITANTE" in header
        assert row[0] == requirement_id[:8].upper()
        assert row[1] == "Iluminación de sala"
        assert row[2] == format_currency(1_500_000)
        assert row[3] == "PENDING_APPROVAL"
        assert row[5] == project.name
        assert row[6] == "Curaduría"
        assert row[7] == "Uriel Usuario"

    async def test_header_row_is_bold(self, client: AsyncClient, auth, leader):
        response = await client.get(f"{BASE}/requirements", headers=auth(leader))

        sheet = load_workbook(io.BytesIO(response.content)).active
        assert sheet.title == "Requerimientos"
        assert all(cell.font.bold for cell in sheet[1])

    async def test_requirements_report_is_for_managers(self, client: AsyncClient, auth, requester):
        assert (await client.get(f"{BASE}/requirements", headers=auth(requester))).status_code == 403

    async def test_budgets_report_follows_visibility(
        self, client: AsyncClient, auth, director, leader, requester, make_budget
    ):
        await make_budget(amount=1000, available=250, manager=leader, code="BUD-2025-001")

        full = _rows(await client.get(f"{BASE}/budgets", headers=auth(director)))
        own = _rows(await client.get(f"{BASE}/budgets", headers=auth(requester)))

        assert full[0] == BUDGET_COLUMNS
        assert full[1][0] == "BUD-2025-001"
        assert full[1][4] == format_currency(1000)
        assert full[1][6] == 75
        assert full[1][7] == "Laura Líder"
        assert own == [BUDGET_COLUMNS]

    async def test_suppliers_report(self, client: AsyncClient, auth, requester, supplier):
        rows = _rows(await client.get(f"{BASE}/suppliers", headers=auth(requester)))

        assert rows[0] == SUPPLIER_COLUMNS
        assert rows[1][:3] == ["Papelería El Cid", "900123456-7", "ventas@elcid.com"]
        assert rows[1][-1] == "ACTIVO"
