"""API tests for payments registered against requirements."""

import pytest
from httpx import AsyncClient

from mis_compras.server.core.config import settings

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/payments"


@pytest.fixture
def new_requirement(client: AsyncClient, auth, requester):
    async def _make(total_amount: float = 1000):
        response = await client.post(
            "/api/v1/requirements",
            json={"title": "Impresión de catálogos", "total_amount": total_amount},
            headers=auth(requester),
        )
        assert response.status_code == 201
        return response.json()

    return _make


async def _pay(client, auth, user, requirement_id, amount, **extra):
    return await client.post(
        f"{BASE}/{requirement_id}",
        json={"amount": amount, "payment_date": "2025-06-15", **extra},
        headers=auth(user),
    )


async def _procurement_status(client, auth, user, requirement_id):
    response = await client.get(f"/api/v1/requirements/{requirement_id}", headers=auth(user))
    return response.json()["procurement_status"]


class TestRegister:
    async def test_full_payment_finalizes_requirement(self, client: AsyncClient, auth, leader, new_requirement):
        requirement = await new_requirement()

        response = await _pay(client, auth, leader, requirement["id"], 1000, invoice_number="FE-10")

        assert response.status_code == 201
        assert response.json()["payment_number"] == 1
        assert response.json()["invoice_number"] == "FE-10"
        assert await _procurement_status(client, auth, leader, requirement["id"]) == "FINALIZADO"

    async def test_single_payment_requirement(self, client: AsyncClient, auth, leader, new_requirement):
        requirement = await new_requirement()
        await _pay(client, auth, leader, requirement["id"], 400)

        response = await _pay(client, auth, leader, requirement["id"], 100)

        assert response.status_code == 400
        assert "single payment" in response.json()["detail"]

    async def test_multiple_payments_are_numbered(self, client: AsyncClient, auth, leader, new_requirement):
        requirement = await new_requirement()
        toggle = await client.patch(
            f"{BASE}/{requirement['id']}/toggle-multiple", json={"has_multiple_payments": True}, headers=auth(leader)
        )
        assert toggle.json()["has_multiple_payments"] is True

        first = await _pay(client, auth, leader, requirement["id"], 400)
        assert await _procurement_status(client, auth, leader, requirement["id"]) == "EN_TRAMITE"
        second = await _pay(client, auth, leader, requirement["id"], 600)

        assert [first.json()["payment_number"], second.json()["payment_number"]] == [1, 2]
        assert await _procurement_status(client, auth, leader, requirement["id"]) == "FINALIZADO"

        listed = await client.get(f"{BASE}/{requirement['id']}", headers=auth(leader))
        assert [p["amount"] for p in listed.json()] == [400, 600]

    async def test_total_cannot_exceed_requirement(self, client: AsyncClient, auth, leader, new_requirement):
        requirement = await new_requirement()
        response = await _pay(client, auth, leader, requirement["id"], 1000.02)
        assert response.status_code == 400
        assert "exceeds" in response.json()["detail"]

    async def test_rounding_tolerance(self, client: AsyncClient, auth, leader, new_requirement):
        requirement = await new_requirement()
        response = await _pay(client, auth, leader, requirement["id"], 1000.01)
        assert response.status_code == 201

    async def test_payment_limit(self, client: AsyncClient, auth, leader, new_requirement, monkeypatch):
        monkeypatch.setattr(settings, "max_payments_per_requirement", 2)
        requirement = await new_requirement()
        await client.patch(
            f"{BASE}/{requirement['id']}/toggle-multiple", json={"has_multiple_payments": True}, headers=auth(leader)
        )
        await _pay(client, auth, leader, requirement["id"], 100)
        await _pay(client, auth, leader, requirement["id"], 100)

        response = await _pay(client, auth, leader, requirement["id"], 100)

        assert response.status_code == 400
        assert "at most 2" in response.json()["detail"]

    async def test_requires_manager(self, client: AsyncClient, auth, requester, new_requirement):
        requirement = await new_requirement()
        response = await _pay(client, auth, requester, requirement["id"], 100)
        assert response.status_code == 403

    async def test_invalid_amount(self, client: AsyncClient, auth, leader, new_requirement):
        requirement = await new_requirement()
        response = await _pay(client, auth, leader, requirement["id"], 0)
        assert response.status_code == 422

    async def test_unknown_requirement(self, client: AsyncClient, auth, leader):
        response = await _pay(client, auth, leader, "missing", 100)
        assert response.status_code == 404

    async def test_payment_is_logged(self, client: AsyncClient, auth, leader, new_requirement):
        requirement = await new_requirement()
        await _pay(client, auth, leader, requirement["id"], 250)

        detail = (await client.get(f"/api/v1/requirements/{requirement['id']}", headers=auth(leader))).json()

        assert detail["logs"][0]["action"] == "PAYMENT_REGISTERED"
        assert [p["amount"] for p in detail["payments"]] == [250]


class TestEditAndDelete:
    async def test_update_amount_rechecks_total(self, client: AsyncClient, auth, leader, new_requirement):
        requirement = await new_requirement()
        payment = (await _pay(client, auth, leader, requirement["id"], 400)).json()

        too_much = await client.put(f"{BASE}/update/{payment['id']}", json={"amount": 1500}, headers=auth(leader))
        assert too_much.status_code == 400

        updated = await client.put(f"{BASE}/update/{payment['id']}", json={"amount": 1000}, headers=auth(leader))
        assert updated.json()["amount"] == 1000
        assert await _procurement_status(client, auth, leader, requirement["id"]) == "FINALIZADO"

    @pytest.mark.parametrize("field", ["amount", "payment_date"])
    async def test_null_on_required_field_is_rejected(self, client: AsyncClient, auth, leader, new_requirement, field):
        requirement = await new_requirement()
        payment = (await _pay(client, auth, leader, requirement["id"], 400)).json()

        response = await client.put(f"{BASE}/update/{payment['id']}", json={field: None}, headers=auth(leader))

        assert response.status_code == 422

    async def test_observations_can_be_cleared(self, client: AsyncClient, auth, leader, new_requirement):
        requirement = await new_requirement()
        payment = (await _pay(client, auth, leader, requirement["id"], 400, observations="Anticipo")).json()

        response = await client.put(
            f"{BASE}/update/{payment['id']}", json={"observations": None}, headers=auth(leader)
        )

        assert response.status_code == 200
        assert response.json()["observations"] is None
        assert response.json()["amount"] == 400

    async def test_delete_reopens_procurement(self, client: AsyncClient, auth, leader, new_requirement):
        requirement = await new_requirement()
        await client.patch(
            f"{BASE}/{requirement['id']}/toggle-multiple", json={"has_multiple_payments": True}, headers=auth(leader)
        )
        await _pay(client, auth, leader, requirement["id"], 300)
        second = (await _pay(client, auth, leader, requirement["id"], 700)).json()

        response = await client.delete(f"{BASE}/delete/{second['id']}", headers=auth(leader))

        assert response.status_code == 204
        assert await _procurement_status(client, auth, leader, requirement["id"]) == "EN_TRAMITE"

    async def test_unknown_payment(self, client: AsyncClient, auth, leader):
        response = await client.delete(f"{BASE}/delete/missing", headers=auth(leader))
        assert response.status_code == 404

    async def test_multiple_flag_cannot_be_dropped_with_several_payments(
        self, client: AsyncClient, auth, leader, new_requirement
    ):
        requirement = await new_requirement()
        url = f"{BASE}/{requirement['id']}/toggle-multiple"
        await client.patch(url, json={"has_multiple_payments": True}, headers=auth(leader))
        await _pay(client, auth, leader, requirement["id"], 100)
        await _pay(client, auth, leader, requirement["id"], 100)

        response = await client.patch(url, json={"has_multiple_payments": False}, headers=auth(leader))

        assert response.status_code == 400


class TestVisibility:
    async def test_owner_and_viewers_list_payments(
        self, client: AsyncClient, auth, leader, requester, make_user, new_requirement
    ):
        requirement = await new_requirement()
        await _pay(client, auth, leader, requirement["id"], 100)
        stranger = await make_user()

        assert (await client.get(f"{BASE}/{requirement['id']}", headers=auth(requester))).status_code == 200
        assert (await client.get(f"{BASE}/{requirement['id']}", headers=auth(stranger))).status_code == 403
