"""
E-mail delivery over SMTP.

Mail is a second channel next to in-app notifications and is off until
``SMTP_HOST`` is configured. Delivery problems are logged and reported as a
``False`` result; they never fail the request that triggered the message.
"""

from __future__ import annotations

import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from typing import Iterable, Optional, Sequence, Tuple

from mis_compras.core.logging_config import get_logger
from mis_compras.server.core.config import MailConfig, settings

logger = get_logger(__name__)

# (file name, PDF bytes)
Attachment = Tuple[str, bytes]


class MailService:
    """Plain-text e-mail with optional PDF attachments."""

    def __init__(self, config: Optional[MailConfig] = None) -> None:
        self.config = config or settings.mail

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def build_message(
        self, to: Sequence[str], subject: str, body: str, attachments: Iterable[Attachment] = ()
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.config.sender
        message["To"] = ", ".join(to)
        message["Subject"] = subject
        message.set_content(body)
        for file_name, content in attachments:
            message.add_attachment(content, maintype="application", subtype="pdf", filename=file_name)
        return message

    def send(self, to: Iterable[Optional[str]], subject: str, body: str, attachments: Iterable[Attachment] = ()) -> bool:
        """Send one message to every address in ``to``.

        Returns:
            True when the SMTP server accepted the message
        """
        recipients = [address for address in to if address]
        if not self.enabled:
            logger.debug(f"Mail disabled, not sending '{subject}'")
            return False
        if not recipients:
            return False

        message = self.build_message(recipients, subject, body, attachments)
        try:
            with self._connect() as server:
                if self.config.username and self.config.password:
                    server.login(self.config.username, self.config.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(f"Could not send '{subject}' to {', '.join(recipients)}: {type(exc).__name__}: {exc}")
            return False

        logger.info(f"Sent '{subject}' to {', '.join(recipients)}")
        return True

    async def send_async(
        self, to: Iterable[Optional[str]], subject: str, body: str, attachments: Iterable[Attachment] = ()
    ) -> bool:
        """:meth:`send` on a worker thread so the event loop is not blocked by SMTP."""
        return await asyncio.to_thread(self.send, list(to), subject, body, list(attachments))

    def _connect(self) -> smtplib.SMTP:
        config = self.config
        if config.security == "ssl":
            return smtplib.SMTP_SSL(
                config.host, config.port, timeout=config.timeout, context=ssl.create_default_context()
            )

        server = smtplib.SMTP(config.host, config.port, timeout=config.timeout)
        if config.security == "starttls":
            try:
                server.ehlo()
                server.starttls(context=ssl.create_default_context())
                server.ehlo()
            except (smtplib.SMTPException, OSError):
                server.close()
                raise
        return server
