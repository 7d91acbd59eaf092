"""Notification schemas."""
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .common import BaseSchema, SuccessResponse


class NotificationResponse(BaseSchema):
    """Notification as shown to its owner."""

    id: uuid.UUID = Field(..., description="Notification ID")
    type: str = Field(..., description="Notification type")
    message: str = Field(..., description="Notification text")
    is_read: bool = Field(..., description="Read flag")
    created_at: Optional[datetime] = Field(None, description="Creation time")


class NotificationListResponse(SuccessResponse):
    """Envelope carrying the caller's notifications."""

    notifications: List[NotificationResponse] = Field(default_factory=list)


class NotificationEnvelope(SuccessResponse):
    """Envelope carrying one notification."""

    notification: NotificationResponse
