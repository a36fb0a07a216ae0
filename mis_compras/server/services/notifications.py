"""
Notification service.

Other services use :meth:`NotificationService.notify` and
:meth:`NotificationService.notify_roles` to stage messages inside their own
transaction; the read/mark endpoints commit themselves.

With ``email=True`` the same message is also queued for the recipient's
e-mail address. The caller sends the queue with
:meth:`NotificationService.send_mail` once its transaction has committed.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from mis_compras.core.database import RepoBundle
from mis_compras.core.database.entities import Notification, User
from mis_compras.core.errors import NotFoundError
from mis_compras.core.logging_config import get_logger
from mis_compras.core.models.domain.enums import NotificationType

from .base import ServiceBase
from .mail import Attachment, MailService

logger = get_logger(__name__)


class NotificationService(ServiceBase):
    """In-app notifications, optionally mirrored by e-mail."""

    def __init__(
        self, session: AsyncSession, repos: Optional[RepoBundle] = None, mailer: Optional[MailService] = None
    ) -> None:
        super().__init__(session, repos)
        self.mailer = mailer or MailService()
        self.outbox: List[Tuple[str, str, str, List[Attachment]]] = []

    async def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.info,
        requirement_id: Optional[str] = None,
        email: bool = False,
        attachments: Sequence[Attachment] = (),
    ) -> Notification:
        """Stage a notification for one user (the caller commits)."""
        if email and self.mailer.enabled:
            recipient = await self.repos.users.get_by_id(user_id)
            if recipient is not None and recipient.email:
                self.outbox.append((recipient.email, title, message, list(attachments)))
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type.value,
            requirement_id=requirement_id,
        )
        return await self.repos.notifications.create(notification)

    async def notify_roles(
        self,
        roles: Iterable[str],
        title: str,
        message: str,
        type: NotificationType = NotificationType.info,
        requirement_id: Optional[str] = None,
        exclude_user_id: Optional[str] = None,
        email: bool = False,
    ) -> int:
        """Stage the same notification for every active user holding one of ``roles``.

        Returns:
            Number of notifications staged
        """
        recipients = await self.repos.users.list_by_roles([getattr(r, "value", r) for r in roles])
        count = 0
        for recipient in recipients:
            if recipient.id == exclude_user_id:
                continue
            await self.notify(recipient.id, title, message, type, requirement_id, email=email)
            count += 1
        logger.debug(f"Notified {count} users: {title}")
        return count

    async def send_mail(self) -> int:
        """Deliver the queued e-mails and empty the queue.

        Returns:
            Number of messages the SMTP server accepted
        """
        queued, self.outbox = self.outbox, []
        sent = 0
        for address, subject, body, attachments in queued:
            if await self.mailer.send_async([address], subject, f"{body}\n\n-- \nMis Compras", attachments):
                sent += 1
        return sent

    async def list_for_user(self, user: User) -> List[Notification]:
        return await self.repos.notifications.for_user(user.id)

    async def unread_count(self, user: User) -> int:
        return await self.repos.notifications.unread_count(user.id)

    async def mark_read(self, user: User, notification_id: str) -> Notification:
        """Mark one of the user's notifications as read.

        Someone else's notification is reported as missing.
        """
        notification = await self.repos.notifications.get_by_id(notification_id)
        if notification is None or notification.user_id != user.id:
            raise NotFoundError("Notification", notification_id)
        notification.is_read = True
        await self.repos.notifications.update(notification)
        await self.commit()
        return notification

    async def mark_all_read(self, user: User) -> int:
        changed = await self.repos.notifications.mark_all_read(user.id)
        await self.commit()
        return changed
