"""Tests for transactional email."""
import smtplib

import pytest
from httpx import AsyncClient

from lms_backend.core.auth import auth_service
from lms_backend.services import email as email_module
from lms_backend.services.email import EmailDeliveryError, EmailService


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.sent = []
        self.logged_in = None
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self, context=None):
        pass

    def login(self, user, password):
        self.logged_in = (user, password)

    def sendmail(self, from_addr, to_addr, message):
        self.sent.append((from_addr, to_addr, message))


class RefusingSMTP(FakeSMTP):
    def sendmail(self, from_addr, to_addr, message):
        raise smtplib.SMTPRecipientsRefused({to_addr: (550, b"no such user")})


def smtp_service():
    return EmailService(
        smtp_host="smtp.example.com",
        smtp_user="mailer@example.com",
        smtp_password="pw",
        from_email="no-reply@example.com",
    )


async def test_dev_mode_does_not_connect(monkeypatch):
    monkeypatch.setattr(email_module.smtplib, "SMTP", RefusingSMTP)
    service = EmailService()

    assert service.is_configured is False
    await service.send_password_reset("ama@example.com", "http://frontend.test/reset-password/abc")


async def test_password_reset_email_sent_over_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(email_module.smtplib, "SMTP", FakeSMTP)

    await smtp_service().send_password_reset("ama@example.com", "http://frontend.test/reset-password/abc")

    server = FakeSMTP.instances[-1]
    assert server.host == "smtp.example.com"
    assert server.logged_in == ("mailer@example.com", "pw")
    from_addr, to_addr, message = server.sent[0]
    assert from_addr == "no-reply@example.com"
    assert to_addr == "ama@example.com"
    assert "Reset Your Password" in message
    assert "http://frontend.test/reset-password/abc" in message


async def test_smtp_failure_raises(monkeypatch):
    monkeypatch.setattr(email_module.smtplib, "SMTP", RefusingSMTP)

    with pytest.raises(EmailDeliveryError):
        await smtp_service().send("ama@example.com", "Subject", "<p>Body</p>")


async def test_forgot_password_mail_failure_is_internal_error(client: AsyncClient, test_user, monkeypatch):
    async def failing_send(to_email, reset_link, expire_minutes=60):
        raise EmailDeliveryError("connection refused")

    monkeypatch.setattr(auth_service.mailer, "send_password_reset", failing_send)

    response = await client.post("/api/v1/auth/forgot-password", json={"email": test_user.email})

    assert response.status_code == 500
    assert response.json()["message"] == "Internal Server Error"
