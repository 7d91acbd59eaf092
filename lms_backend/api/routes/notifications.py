"""Notification routes."""
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ...schemas.notification import (
    NotificationEnvelope,
    NotificationListResponse,
    NotificationResponse,
)
from ...core.security import get_current_user
from ...models.user import User
from ...services.notifications import notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the caller's notifications, newest first."""
    notifications = await notification_service.list_for_user(db, current_user.id)
    return NotificationListResponse(
        message="Successfully fetched notifications",
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
    )


@router.patch("/{notification_id}/read", response_model=NotificationEnvelope)
async def mark_notification_read(
    notification_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Mark one of the caller's notifications as read."""
    notification = await notification_service.mark_read(db, current_user.id, notification_id)
    return NotificationEnvelope(
        message="Notification marked as read",
        notification=NotificationResponse.model_validate(notification),
    )
