"""API tests for in-app notifications."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from mis_compras.core.database.entities import Notification

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/notifications"


async def _notify(session: AsyncSession, user, title: str, is_read: bool = False) -> Notification:
    notification = Notification(user_id=user.id, title=title, message=f"{title}.", type="INFO", is_read=is_read)
    session.add(notification)
    await session.commit()
    return notification


class TestNotifications:
    async def test_list_is_scoped_to_current_user(self, client: AsyncClient, auth, session, requester, leader):
        await _notify(session, requester, "Solicitud actualizada")
        await _notify(session, leader, "Nueva Solicitud Pendiente")

        response = await client.get(BASE, headers=auth(requester))

        assert response.status_code == 200
        assert [n["title"] for n in response.json()] == ["Solicitud actualizada"]

    async def test_unread_count_and_mark_read(self, client: AsyncClient, auth, session, requester):
        first = await _notify(session, requester, "Presupuesto aprobado")
        await _notify(session, requester, "Ajuste aprobado")
        await _notify(session, requester, "Antigua", is_read=True)

        assert (await client.get(f"{BASE}/unread-count", headers=auth(requester))).json() == {"count": 2}

        marked = await client.patch(f"{BASE}/{first.id}/read", headers=auth(requester))
        assert marked.json()["is_read"] is True
        assert (await client.get(f"{BASE}/unread-count", headers=auth(requester))).json() == {"count": 1}

    async def test_mark_all_read(self, client: AsyncClient, auth, session, requester):
        await _notify(session, requester, "Uno")
        await _notify(session, requester, "Dos")

        response = await client.patch(f"{BASE}/read-all", headers=auth(requester))

        assert response.json() == {"count": 2}
        assert (await client.get(f"{BASE}/unread-count", headers=auth(requester))).json() == {"count": 0}

    async def test_someone_elses_notification_is_not_found(self, client: AsyncClient, auth, session, requester, leader):
        notification = await _notify(session, leader, "Privada")
        response = await client.patch(f"{BASE}/{notification.id}/read", headers=auth(requester))
        assert response.status_code == 404
        assert notification.is_read is False

    async def test_requires_authentication(self, client: AsyncClient):
        assert (await client.get(BASE)).status_code == 401
