"""In-app notifications."""
import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..core.logging import BusinessLogger
from ..models.notification import Notification
from ..models.user import User

SIGNUP = "signup"
PASSWORD_RESET = "password_reset"
PASSWORD_CHANGED = "password_changed"


class NotificationService:
    """Writes and reads notification rows.

    ``notify`` only adds to the session, so a notification commits or
    rolls back together with the change that caused it.
    """

    async def notify(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        notification_type: str,
        message: str
    ) -> Notification:
        notification = Notification(user_id=user_id, type=notification_type, message=message)
        db.add(notification)
        await db.flush()
        BusinessLogger.log_notification_created(str(user_id), notification_type)
        return notification

    async def notify_signup(self, db: AsyncSession, user: User) -> Notification:
        return await self.notify(
            db, user.id, SIGNUP, f"{user.first_name} just registered on the platform!"
        )

    async def notify_password_reset(self, db: AsyncSession, user_id: uuid.UUID) -> Notification:
        return await self.notify(
            db, user_id, PASSWORD_RESET, "Your password was reset. Please sign in again."
        )

    async def notify_password_changed(self, db: AsyncSession, user_id: uuid.UUID) -> Notification:
        return await self.notify(
            db, user_id, PASSWORD_CHANGED, "Your password was changed. Other sessions were signed out."
        )

    async def list_for_user(self, db: AsyncSession, user_id: uuid.UUID) -> List[Notification]:
        """Newest first."""
        stmt = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def mark_read(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        notification_id: uuid.UUID
    ) -> Notification:
        notification = await db.get(Notification, notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFoundError("Notification not found!")
        notification.is_read = True
        await db.commit()
        return notification


# Global notification service instance
notification_service = NotificationService()
