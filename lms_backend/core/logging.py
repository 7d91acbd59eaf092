"""Logging configuration and utilities."""
import logging
import sys
from typing import Any, Dict

import structlog
from structlog.stdlib import LoggerFactory

from ..config import settings


def configure_logging():
    """Configure structured logging."""

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.monitoring.log_level.upper()),
    )

    # Set third-party log levels
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def redact_email(email: str) -> str:
    """Redact an email address for logging."""
    if not email or "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class RequestLogger:
    """Request logging utility."""

    @staticmethod
    def log_request(
        method: str,
        path: str,
        user_id: str = None,
        request_id: str = None,
        extra_data: Dict[str, Any] = None
    ):
        """Log incoming request."""
        logger = structlog.get_logger("api.request")
        logger.info(
            "Request started",
            method=method,
            path=path,
            user_id=user_id,
            request_id=request_id,
            **(extra_data or {})
        )

    @staticmethod
    def log_response(
        method: str,
        path: str,
        status_code: int,
        response_time_ms: float,
        user_id: str = None,
        request_id: str = None,
        extra_data: Dict[str, Any] = None
    ):
        """Log response."""
        logger = structlog.get_logger("api.response")
        logger.info(
            "Request completed",
            method=method,
            path=path,
            status_code=status_code,
            response_time_ms=response_time_ms,
            user_id=user_id,
            request_id=request_id,
            **(extra_data or {})
        )

    @staticmethod
    def log_unhandled_error(
        method: str,
        path: str,
        error: Exception,
        request_id: str = None
    ):
        """Log an exception that escaped every handler."""
        logger = structlog.get_logger("api.error")
        logger.error(
            "Unhandled exception",
            method=method,
            path=path,
            request_id=request_id,
            error_type=type(error).__name__,
            exc_info=error
        )


class BusinessLogger:
    """Business event logging utility."""

    @staticmethod
    def log_user_registered(user_id: str, email: str, role: str):
        """Log account creation."""
        logger = structlog.get_logger("business.user")
        logger.info(
            "User registered",
            event_type="user_registered",
            user_id=user_id,
            email=redact_email(email),
            role=role
        )

    @staticmethod
    def log_notification_created(user_id: str, notification_type: str):
        """Log in-app notification creation."""
        logger = structlog.get_logger("business.notification")
        logger.info(
            "Notification created",
            event_type="notification_created",
            user_id=user_id,
            notification_type=notification_type
        )

    @staticmethod
    def log_email_sent(to: str, subject: str, delivered: bool):
        """Log outgoing mail."""
        logger = structlog.get_logger("business.email")
        logger.info(
            "Email sent" if delivered else "Email logged (dev mode)",
            event_type="email_sent",
            to=redact_email(to),
            subject=subject,
            delivered=delivered
        )


class SecurityLogger:
    """Security event logging utility."""

    @staticmethod
    def log_login_attempt(
        email: str,
        success: bool,
        ip_address: str = None,
        failure_reason: str = None
    ):
        """Log login attempt."""
        logger = structlog.get_logger("security.auth")
        logger.info(
            "Login attempt",
            event_type="login_attempt",
            email=redact_email(email),
            success=success,
            ip_address=ip_address,
            failure_reason=failure_reason
        )

    @staticmethod
    def log_password_reset_requested(email: str, user_found: bool):
        """Log forgot-password request."""
        logger = structlog.get_logger("security.auth")
        logger.info(
            "Password reset requested",
            event_type="password_reset_requested",
            email=redact_email(email),
            user_found=user_found
        )

    @staticmethod
    def log_password_changed(user_id: str, via: str, token_version: int = None):
        """Log password change or reset completion."""
        logger = structlog.get_logger("security.auth")
        logger.info(
            "Password changed",
            event_type="password_changed",
            user_id=user_id,
            via=via,
            token_version=token_version
        )

    @staticmethod
    def log_invalid_reset_token():
        """Log reset attempt with unknown, expired or consumed ticket."""
        logger = structlog.get_logger("security.auth")
        logger.warning(
            "Invalid password reset token",
            event_type="invalid_reset_token"
        )

    @staticmethod
    def log_unauthorized_access(
        path: str,
        method: str,
        ip_address: str = None,
        reason: str = None
    ):
        """Log unauthorized access attempt."""
        logger = structlog.get_logger("security.access")
        logger.warning(
            "Unauthorized access attempt",
            event_type="unauthorized_access",
            path=path,
            method=method,
            ip_address=ip_address,
            reason=reason
        )

    @staticmethod
    def log_rate_limit_exceeded(
        ip_address: str,
        path: str,
        limit_type: str = "general"
    ):
        """Log rate limit exceeded."""
        logger = structlog.get_logger("security.rate_limit")
        logger.warning(
            "Rate limit exceeded",
            event_type="rate_limit_exceeded",
            ip_address=ip_address,
            path=path,
            limit_type=limit_type
        )
