"""
Notification Endpoints.

In-app notifications of the current user.
"""

from typing import List

from fastapi import APIRouter

from mis_compras.core.models.io.common import CountResponse
from mis_compras.core.models.io.notifications import NotificationRead
from mis_compras.server.services.deps import CurrentUser, NotificationServiceDep

router = APIRouter()


@router.get("", response_model=List[NotificationRead], summary="List Notifications")
async def list_notifications(user: CurrentUser, service: NotificationServiceDep) -> List[NotificationRead]:
    return [NotificationRead.model_validate(n) for n in await service.list_for_user(user)]


@router.get("/unread-count", response_model=CountResponse, summary="Unread Count")
async def unread_count(user: CurrentUser, service: NotificationServiceDep) -> CountResponse:
    return CountResponse(count=await service.unread_count(user))


@router.patch("/read-all", response_model=CountResponse, summary="Mark All Read")
async def mark_all_read(user: CurrentUser, service: NotificationServiceDep) -> CountResponse:
    return CountResponse(count=await service.mark_all_read(user))


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationRead,
    summary="Mark Read",
    responses={404: {"description": "Notification not found"}},
)
async def mark_read(notification_id: str, user: CurrentUser, service: NotificationServiceDep) -> NotificationRead:
    return NotificationRead.model_validate(await service.mark_read(user, notification_id))
