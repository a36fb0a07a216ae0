"""Unit tests for SMTP delivery."""

import logging
import smtplib

import pytest

from mis_compras.server.core.config import MailConfig
from mis_compras.server.services.mail import MailService

PDF = b"%PDF-1.4\n%%EOF\n"


def _config(**fields) -> MailConfig:
    values = {"SMTP_HOST": "smtp.museo.co", "MAIL_SENDER": "compras@museo.co"}
    values.update(fields)
    return MailConfig.model_validate(values)


class TestMailService:
    """Connection handling and message building."""

    def test_disabled_without_host(self, smtp):
        service = MailService(MailConfig())

        assert service.enabled is False
        assert service.send(["ana@museo.co"], "Asunto", "Cuerpo") is False
        assert smtp == []

    def test_starttls_login_and_headers(self, smtp):
        service = MailService(_config(SMTP_USERNAME="compras", SMTP_PASSWORD="clave"))

        assert service.send(["ana@museo.co", None, "beto@museo.co"], "Ajuste aprobado", "Tu solicitud fue aprobada.")

        (connection,) = smtp
        assert (connection.host, connection.port) == ("smtp.museo.co", 587)
        assert connection.started_tls is True
        assert connection.credentials == ("compras", "clave")
        assert connection.closed is True
        (message,) = connection.messages
        assert message["From"] == "compras@museo.co"
        assert message["To"] == "ana@museo.co, beto@museo.co"
        assert message["Subject"] == "Ajuste aprobado"
        assert "Tu solicitud fue aprobada." in message.get_content()

    def test_implicit_ssl(self, smtp):
        MailService(_config(SMTP_SECURITY="ssl", SMTP_PORT=465)).send(["ana@museo.co"], "Asunto", "Cuerpo")

        (connection,) = smtp
        assert connection.port == 465
        assert connection.implicit_tls is True
        assert connection.started_tls is False

    def test_plain_connection_without_login(self, smtp):
        MailService(_config(SMTP_SECURITY="none")).send(["ana@museo.co"], "Asunto", "Cuerpo")

        (connection,) = smtp
        assert connection.started_tls is False
        assert connection.credentials is None

    def test_unknown_security_is_rejected(self):
        with pytest.raises(ValueError):
            _config(SMTP_SECURITY="tls13")

    def test_no_recipients(self, smtp):
        assert MailService(_config()).send([None, ""], "Asunto", "Cuerpo") is False
        assert smtp == []

    def test_pdf_attachment(self, smtp):
        MailService(_config()).send(["ana@museo.co"], "Ajuste", "Adjunto", [("ADJ-2025-0001.pdf", PDF)])

        (message,) = smtp[0].messages
        (attachment,) = list(message.iter_attachments())
        assert attachment.get_content_type() == "application/pdf"
        assert attachment.get_filename() == "ADJ-2025-0001.pdf"
        assert attachment.get_content() == PDF

    def test_smtp_failure_is_logged_not_raised(self, smtp, monkeypatch, caplog):
        def refuse(connection, message):
            raise smtplib.SMTPRecipientsRefused({"ana@museo.co": (550, b"no such user")})

        monkeypatch.setattr(smtplib.SMTP, "send_message", refuse)

        with caplog.at_level(logging.ERROR):
            assert MailService(_config()).send(["ana@museo.co"], "Asunto", "Cuerpo") is False

        assert "SMTPRecipientsRefused" in caplog.text
        assert smtp[0].closed is True

    def test_connection_error_is_logged_not_raised(self, monkeypatch, caplog):
        def unreachable(*args, **kwargs):
            raise ConnectionRefusedError("connection refused")

        monkeypatch.setattr(smtplib, "SMTP", unreachable)

        with caplog.at_level(logging.ERROR):
            assert MailService(_config()).send(["ana@museo.co"], "Asunto", "Cuerpo") is False

        assert "ConnectionRefusedError" in caplog.text


@pytest.mark.asyncio
async def test_send_async_runs_in_worker_thread(smtp):
    assert await MailService(_config()).send_async(["ana@museo.co"], "Asunto", "Cuerpo") is True
    assert len(smtp[0].messages) == 1
