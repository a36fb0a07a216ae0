"""API tests for catalog administration and the system configuration."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/admin"


class TestSystemConfig:
    async def test_any_user_reads_configuration(self, client: AsyncClient, auth, requester):
        response = await client.get(f"{BASE}/system-config", headers=auth(requester))
        assert response.status_code == 200
        assert response.json()["active_year"] == 2025
        assert response.json()["app_name"] == "MisCompras"

    async def test_admin_changes_active_year(self, client: AsyncClient, auth, admin):
        response = await client.put(
            f"{BASE}/system-config", json={"active_year": 2026, "maintenance_mode": True}, headers=auth(admin)
        )
        assert response.status_code == 200
        assert response.json()["active_year"] == 2026
        assert response.json()["maintenance_mode"] is True

    async def test_active_year_range(self, client: AsyncClient, auth, admin):
        response = await client.put(f"{BASE}/system-config", json={"active_year": 1999}, headers=auth(admin))
        assert response.status_code == 422

    async def test_update_requires_admin(self, client: AsyncClient, auth, director):
        response = await client.put(f"{BASE}/system-config", json={"active_year": 2026}, headers=auth(director))
        assert response.status_code == 403


class TestAreas:
    async def test_crud(self, client: AsyncClient, auth, admin):
        created = await client.post(f"{BASE}/areas", json={"name": "  Educación  "}, headers=auth(admin))
        assert created.status_code == 201
        area_id = created.json()["id"]
        assert created.json()["name"] == "Educación"

        renamed = await client.put(f"{BASE}/areas/{area_id}", json={"name": "Educativa"}, headers=auth(admin))
        assert renamed.json()["name"] == "Educativa"

        names = [a["name"] for a in (await client.get(f"{BASE}/areas", headers=auth(admin))).json()]
        assert "Educativa" in names

        deleted = await client.delete(f"{BASE}/areas/{area_id}", headers=auth(admin))
        assert deleted.status_code == 204

    async def test_duplicate_name_is_case_insensitive(self, client: AsyncClient, auth, admin):
        await client.post(f"{BASE}/areas", json={"name": "Administrativa"}, headers=auth(admin))
        response = await client.post(f"{BASE}/areas", json={"name": "ADMINISTRATIVA"}, headers=auth(admin))
        assert response.status_code == 409

    async def test_area_with_users_cannot_be_deleted(self, client: AsyncClient, auth, admin, area):
        response = await client.delete(f"{BASE}/areas/{area.id}", headers=auth(admin))
        assert response.status_code == 400
        assert "assigned users" in response.json()["detail"]

    async def test_blank_name(self, client: AsyncClient, auth, admin):
        response = await client.post(f"{BASE}/areas", json={"name": "   "}, headers=auth(admin))
        assert response.status_code == 422

    async def test_unknown_area(self, client: AsyncClient, auth, admin):
        response = await client.put(f"{BASE}/areas/missing", json={"name": "X"}, headers=auth(admin))
        assert response.status_code == 404


class TestProjects:
    async def test_code_is_upper_cased_and_unique(self, client: AsyncClient, auth, admin, project):
        created = await client.post(
            f"{BASE}/projects", json={"name": "Noche de Museos", "code": "p-noche"}, headers=auth(admin)
        )
        assert created.status_code == 201
        assert created.json()["code"] == "P-NOCHE"

        duplicate = await client.post(
            f"{BASE}/projects", json={"name": "Otro", "code": "P-BOTERO-2024"}, headers=auth(admin)
        )
        assert duplicate.status_code == 409

    async def test_invalid_code(self, client: AsyncClient, auth, admin):
        response = await client.post(f"{BASE}/projects", json={"name": "X", "code": "P_1"}, headers=auth(admin))
        assert response.status_code == 422

    async def test_project_with_budgets_cannot_be_deleted(self, client: AsyncClient, auth, admin, project, make_budget):
        await make_budget()
        response = await client.delete(f"{BASE}/projects/{project.id}", headers=auth(admin))
        assert response.status_code == 400


class TestCategories:
    async def test_crud(self, client: AsyncClient, auth, admin):
        created = await client.post(f"{BASE}/categories", json={"code": "1-1", "name": "Refrigerios"}, headers=auth(admin))
        assert created.status_code == 201
        category_id = created.json()["id"]

        duplicate = await client.post(f"{BASE}/categories", json={"code": "1-1", "name": "Otra"}, headers=auth(admin))
        assert duplicate.status_code == 409

        updated = await client.put(
            f"{BASE}/categories/{category_id}", json={"name": "Refrigerios y catering"}, headers=auth(admin)
        )
        assert updated.json()["name"] == "Refrigerios y catering"

        assert (await client.delete(f"{BASE}/categories/{category_id}", headers=auth(admin))).status_code == 204


class TestSuppliers:
    async def test_create_normalizes_fields(self, client: AsyncClient, auth, admin):
        response = await client.post(
            f"{BASE}/suppliers",
            json={
                "name": "Tecnología Andina",
                "tax_id": "800.987.654-1",
                "contact_email": "Ventas@Andina.co",
                "contact_phone": "601 555 0000",
            },
            headers=auth(admin),
        )
        assert response.status_code == 201
        data = response.json()
        assert data["tax_id"] == "800987654-1"
        assert data["contact_email"] == "ventas@andina.co"

    async def test_blank_contact_email_is_dropped(self, client: AsyncClient, auth, admin):
        response = await client.post(
            f"{BASE}/suppliers", json={"name": "Sin correo", "contact_email": ""}, headers=auth(admin)
        )
        assert response.status_code == 201
        assert response.json()["contact_email"] is None

    async def test_duplicate_tax_id(self, client: AsyncClient, auth, admin, supplier):
        response = await client.post(
            f"{BASE}/suppliers", json={"name": "Copia", "tax_id": "900.123.456-7"}, headers=auth(admin)
        )
        assert response.status_code == 409

    async def test_invalid_tax_id(self, client: AsyncClient, auth, admin):
        response = await client.post(f"{BASE}/suppliers", json={"name": "X", "tax_id": "12AB"}, headers=auth(admin))
        assert response.status_code == 422

    async def test_active_only_listing(self, client: AsyncClient, auth, admin, supplier):
        await client.put(f"{BASE}/suppliers/{supplier.id}", json={"is_active": False}, headers=auth(admin))

        all_suppliers = await client.get(f"{BASE}/suppliers", headers=auth(admin))
        active = await client.get(f"{BASE}/suppliers", params={"active_only": True}, headers=auth(admin))
        assert len(all_suppliers.json()) == 1
        assert active.json() == []

    async def test_get_supplier(self, client: AsyncClient, auth, requester, supplier):
        response = await client.get(f"{BASE}/suppliers/{supplier.id}", headers=auth(requester))
        assert response.status_code == 200
        assert response.json()["name"] == "Papelería El Cid"

    async def test_users_cannot_create(self, client: AsyncClient, auth, requester):
        response = await client.post(f"{BASE}/suppliers", json={"name": "X"}, headers=auth(requester))
        assert response.status_code == 403


async def test_stats(client: AsyncClient, auth, admin, project, supplier):
    response = await client.get(f"{BASE}/stats", headers=auth(admin))
    assert response.status_code == 200
    assert response.json() == {"areas": 1, "projects": 1, "categories": 0, "suppliers": 1, "users": 1}


class TestNullFields:
    """An explicit null clears optional columns and is refused for required ones."""

    @pytest.mark.parametrize(
        "resource, field",
        [
            ("areas", "name"),
            ("projects", "name"),
            ("projects", "is_active"),
            ("suppliers", "name"),
            ("suppliers", "is_active"),
        ],
    )
    async def test_required_field_cannot_be_null(
        self, client: AsyncClient, auth, admin, area, project, supplier, resource, field
    ):
        ids = {"areas": area.id, "projects": project.id, "suppliers": supplier.id}

        response = await client.put(f"{BASE}/{resource}/{ids[resource]}", json={field: None}, headers=auth(admin))

        assert response.status_code == 422

    async def test_category_code_cannot_be_null(self, client: AsyncClient, auth, admin):
        created = await client.post(f"{BASE}/categories", json={"code": "2-1", "name": "Transporte"}, headers=auth(admin))

        response = await client.put(
            f"{BASE}/categories/{created.json()['id']}", json={"code": None}, headers=auth(admin)
        )

        assert response.status_code == 422

    @pytest.mark.parametrize("field", ["active_year", "app_name", "maintenance_mode"])
    async def test_system_config_fields_cannot_be_null(self, client: AsyncClient, auth, admin, field):
        response = await client.put(f"{BASE}/system-config", json={field: None}, headers=auth(admin))

        assert response.status_code == 422
        current = await client.get(f"{BASE}/system-config", headers=auth(admin))
        assert current.json()["active_year"] == 2025

    async def test_supplier_contact_can_be_cleared(self, client: AsyncClient, auth, admin, supplier):
        response = await client.put(
            f"{BASE}/suppliers/{supplier.id}", json={"contact_email": None, "tax_id": None}, headers=auth(admin)
        )

        assert response.status_code == 200
        assert response.json()["contact_email"] is None
        assert response.json()["tax_id"] is None
        assert response.json()["name"] == "Papelería El Cid"

    async def test_project_code_can_be_cleared(self, client: AsyncClient, auth, admin, project):
        response = await client.put(f"{BASE}/projects/{project.id}", json={"code": None}, headers=auth(admin))

        assert response.status_code == 200
        assert response.json()["code"] is None
