"""Transactional email delivery."""
import asyncio
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import structlog

from ..config.settings import MailSettings
from ..core.logging import BusinessLogger, redact_email

logger = structlog.get_logger("services.email")


class EmailDeliveryError(Exception):
    """SMTP refused or failed to deliver a message."""


class EmailService:
    """Sends mail over SMTP.

    Without an SMTP host the service runs in dev mode and logs a preview
    of each message instead of sending it.
    """

    def __init__(
        self,
        *,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        smtp_use_tls: bool = True,
        from_email: Optional[str] = None,
        from_name: str = "SkillIt LMS",
    ) -> None:
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.smtp_use_tls = smtp_use_tls
        self.from_email = from_email or smtp_user
        self.from_name = from_name

    @classmethod
    def from_settings(cls, mail: MailSettings) -> "EmailService":
        return cls(
            smtp_host=mail.smtp_host,
            smtp_port=mail.smtp_port,
            smtp_user=mail.smtp_user,
            smtp_password=mail.smtp_password,
            smtp_use_tls=mail.smtp_use_tls,
            from_email=mail.from_email,
            from_name=mail.from_name,
        )

    @property
    def is_configured(self) -> bool:
        """Check if email sending is properly configured."""
        return bool(self.smtp_host and self.from_email)

    async def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> None:
        """Send one message; raises ``EmailDeliveryError`` on failure."""
        if not self.is_configured:
            logger.info(
                "Email not sent, SMTP not configured",
                to=redact_email(to_email),
                subject=subject,
                body_preview=(text_body or html_body)[:200],
            )
            BusinessLogger.log_email_sent(to_email, subject, delivered=False)
            return

        message = self._build_message(to_email, subject, html_body, text_body)
        await asyncio.to_thread(self._deliver, to_email, message)
        BusinessLogger.log_email_sent(to_email, subject, delivered=True)

    def _build_message(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str]
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        if text_body:
            msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))
        return msg

    def _deliver(self, to_email: str, msg: MIMEMultipart) -> None:
        context = ssl.create_default_context()
        try:
            if self.smtp_use_tls:
                with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                    server.starttls(context=context)
                    if self.smtp_user and self.smtp_password:
                        server.login(self.smtp_user, self.smtp_password)
                    server.sendmail(self.from_email, to_email, msg.as_string())
            else:
                with smtplib.SMTP_SSL(
                    self.smtp_host, self.smtp_port, context=context, timeout=30
                ) as server:
                    if self.smtp_user and self.smtp_password:
                        server.login(self.smtp_user, self.smtp_password)
                    server.sendmail(self.from_email, to_email, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "Email delivery failed",
                to=redact_email(to_email),
                host=self.smtp_host,
                error=str(e),
            )
            raise EmailDeliveryError(str(e)) from e

    async def send_password_reset(self, to_email: str, reset_link: str, expire_minutes: int = 60) -> None:
        """Email the reset link built from the raw token."""
        html_body = f"""
        <h2>Password Reset Request</h2>
        <p>Click the link below to reset your password. This link will expire in {expire_minutes} minutes.</p>
        <a href="{reset_link}" style="text-decoration: none;">
          <button style="background-color: #4CAF50; color: white; padding: 10px 20px; border: none; border-radius: 5px; cursor: pointer;">
            Reset Password
          </button>
        </a>
        <p>If you did not request this, please ignore this email.</p>
        """
        text_body = (
            "Password Reset Request\n\n"
            f"Open this link to reset your password (expires in {expire_minutes} minutes):\n"
            f"{reset_link}\n\n"
            "If you did not request this, please ignore this email."
        )
        await self.send(to_email, "Reset Your Password", html_body, text_body)
