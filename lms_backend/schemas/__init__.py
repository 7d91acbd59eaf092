"""Pydantic schemas module."""
from .auth import (
    RegisterRequest,
    SignInRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ChangePasswordRequest,
    UserResponse,
    TokenPayload,
    UserEnvelope,
    SignInResponse,
)
from .notification import (
    NotificationResponse,
    NotificationListResponse,
    NotificationEnvelope,
)
from .common import (
    BaseSchema,
    SuccessResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    # Auth
    "RegisterRequest",
    "SignInRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "ChangePasswordRequest",
    "UserResponse",
    "TokenPayload",
    "UserEnvelope",
    "SignInResponse",
    # Notification
    "NotificationResponse",
    "NotificationListResponse",
    "NotificationEnvelope",
    # Common
    "BaseSchema",
    "SuccessResponse",
    "ErrorResponse",
    "HealthResponse",
]
