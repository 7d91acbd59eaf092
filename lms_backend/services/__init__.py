"""Services module."""
from .email import EmailDeliveryError, EmailService
from .notifications import NotificationService, notification_service
from .users import UserStore

__all__ = [
    "EmailDeliveryError",
    "EmailService",
    "NotificationService",
    "notification_service",
    "UserStore",
]
