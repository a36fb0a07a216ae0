"""API tests for account administration and the self-service profile."""

import pytest
from httpx import AsyncClient

from mis_compras.core.database.entities import Notification

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/users"
PASSWORD = "Secreto123"


class TestProfile:
    async def test_read_me(self, client: AsyncClient, auth, leader):
        response = await client.get(f"{BASE}/me", headers=auth(leader))
        assert response.status_code == 200
        assert response.json()["role"] == "LEADER"

    async def test_update_profile(self, client: AsyncClient, auth, requester):
        response = await client.patch(
            f"{BASE}/me/profile",
            json={"name": "Uriel U.", "phone": "(1) 555-1234", "position": "Asistente"},
            headers=auth(requester),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Uriel U."
        assert data["phone"] == "(1) 555-1234"
        assert data["role"] == "USER"

    async def test_update_profile_rejects_bad_phone(self, client: AsyncClient, auth, requester):
        response = await client.patch(f"{BASE}/me/profile", json={"phone": "abc"}, headers=auth(requester))
        assert response.status_code == 422

    async def test_update_profile_rejects_null_name(self, client: AsyncClient, auth, requester):
        response = await client.patch(f"{BASE}/me/profile", json={"name": None}, headers=auth(requester))
        assert response.status_code == 422

    async def test_update_profile_clears_phone(self, client: AsyncClient, auth, requester):
        await client.patch(f"{BASE}/me/profile", json={"phone": "(1) 555-1234"}, headers=auth(requester))

        response = await client.patch(f"{BASE}/me/profile", json={"phone": None}, headers=auth(requester))

        assert response.status_code == 200
        assert response.json()["phone"] is None
        assert response.json()["name"] == "Uriel Usuario"

    async def test_change_password(self, client: AsyncClient, auth, requester):
        response = await client.patch(
            f"{BASE}/me/password",
            json={"current_password": PASSWORD, "new_password": "OtraClave99"},
            headers=auth(requester),
        )
        assert response.status_code == 200

        login = await client.post("/api/v1/auth/login", json={"email": requester.email, "password": "OtraClave99"})
        assert login.status_code == 200

    async def test_change_password_wrong_current(self, client: AsyncClient, auth, requester):
        response = await client.patch(
            f"{BASE}/me/password",
            json={"current_password": "Equivocada1", "new_password": "OtraClave99"},
            headers=auth(requester),
        )
        assert response.status_code == 400


class TestAdministration:
    async def test_generate_password_is_admin_only(self, client: AsyncClient, auth, admin, director):
        response = await client.get(f"{BASE}/generate-password", headers=auth(admin))
        assert response.status_code == 200
        assert len(response.json()["password"]) == 12

        denied = await client.get(f"{BASE}/generate-password", headers=auth(director))
        assert denied.status_code == 403

    async def test_create_user(self, client: AsyncClient, auth, admin, area):
        response = await client.post(
            BASE,
            json={
                "email": "Coord2@museo.co",
                "password": "Clave12345",
                "name": "Coordinadora",
                "role": "COORDINATOR",
                "area_id": area.id,
            },
            headers=auth(admin),
        )
        assert response.status_code == 201
        assert response.json()["email"] == "coord2@museo.co"
        assert response.json()["role"] == "COORDINATOR"

    async def test_create_user_rejects_unknown_role(self, client: AsyncClient, auth, admin):
        response = await client.post(
            BASE,
            json={"email": "x@museo.co", "password": "Clave12345", "name": "X", "role": "SUPERUSER"},
            headers=auth(admin),
        )
        assert response.status_code == 422

    async def test_create_user_requires_admin(self, client: AsyncClient, auth, leader):
        response = await client.post(
            BASE,
            json={"email": "x@museo.co", "password": "Clave12345", "name": "X"},
            headers=auth(leader),
        )
        assert response.status_code == 403

    async def test_list_and_filter(self, client: AsyncClient, auth, admin, leader, requester):
        response = await client.get(BASE, headers=auth(leader))
        assert response.status_code == 200
        assert {u["email"] for u in response.json()} == {admin.email, leader.email, requester.email}

        filtered = await client.get(BASE, params={"role": "USER"}, headers=auth(leader))
        assert [u["email"] for u in filtered.json()] == [requester.email]

        searched = await client.get(BASE, params={"search": "LAURA"}, headers=auth(leader))
        assert [u["id"] for u in searched.json()] == [leader.id]

    async def test_list_forbidden_for_plain_user(self, client: AsyncClient, auth, requester):
        response = await client.get(BASE, headers=auth(requester))
        assert response.status_code == 403

    async def test_get_unknown_user(self, client: AsyncClient, auth, admin):
        response = await client.get(f"{BASE}/missing", headers=auth(admin))
        assert response.status_code == 404

    async def test_update_user_role_and_password(self, client: AsyncClient, auth, admin, requester):
        response = await client.put(
            f"{BASE}/{requester.id}",
            json={"role": "LEADER", "password": "NuevaClave1"},
            headers=auth(admin),
        )
        assert response.status_code == 200
        assert response.json()["role"] == "LEADER"

        login = await client.post("/api/v1/auth/login", json={"email": requester.email, "password": "NuevaClave1"})
        assert login.status_code == 200

    async def test_update_user_email_conflict(self, client: AsyncClient, auth, admin, requester, leader):
        response = await client.put(f"{BASE}/{requester.id}", json={"email": leader.email}, headers=auth(admin))
        assert response.status_code == 409

    @pytest.mark.parametrize("field", ["email", "name", "role", "is_active", "password"])
    async def test_update_user_rejects_null_on_required_field(self, client: AsyncClient, auth, admin, requester, field):
        response = await client.put(f"{BASE}/{requester.id}", json={field: None}, headers=auth(admin))

        assert response.status_code == 422
        detail = await client.get(f"{BASE}/{requester.id}", headers=auth(admin))
        assert detail.json()["email"] == requester.email
        assert detail.json()["is_active"] is True

    async def test_update_user_clears_area(self, client: AsyncClient, auth, admin, requester):
        response = await client.put(f"{BASE}/{requester.id}", json={"area_id": None}, headers=auth(admin))

        assert response.status_code == 200
        assert response.json()["area_id"] is None

    async def test_admin_cannot_deactivate_self(self, client: AsyncClient, auth, admin):
        response = await client.patch(f"{BASE}/{admin.id}/toggle-status", headers=auth(admin))
        assert response.status_code == 400

        update = await client.put(f"{BASE}/{admin.id}", json={"is_active": False}, headers=auth(admin))
        assert update.status_code == 400

    async def test_toggle_status(self, client: AsyncClient, auth, admin, requester):
        response = await client.patch(f"{BASE}/{requester.id}/toggle-status", headers=auth(admin))
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        blocked = await client.get(f"{BASE}/me", headers=auth(requester))
        assert blocked.status_code == 403

    async def test_delete_user_with_notifications(self, client: AsyncClient, auth, admin, requester, session):
        session.add(Notification(user_id=requester.id, title="Hola", message="Bienvenido"))
        await session.commit()

        response = await client.delete(f"{BASE}/{requester.id}", headers=auth(admin))
        assert response.status_code == 204

        missing = await client.get(f"{BASE}/{requester.id}", headers=auth(admin))
        assert missing.status_code == 404

    async def test_delete_self(self, client: AsyncClient, auth, admin):
        response = await client.delete(f"{BASE}/{admin.id}", headers=auth(admin))
        assert response.status_code == 400

    async def test_delete_user_with_budgets(self, client: AsyncClient, auth, admin, leader, make_budget):
        await make_budget(manager=leader)
        response = await client.delete(f"{BASE}/{leader.id}", headers=auth(admin))
        assert response.status_code == 400
        assert "deactivate" in response.json()["detail"]
