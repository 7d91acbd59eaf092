"""Credential store: persistence of user records."""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError
from ..models.user import User


class UserStore:
    """User lookups and credential updates over one session.

    Methods flush but never commit; the calling service owns the
    transaction. The credential updates are bulk UPDATEs that bypass the
    identity map, so refresh any loaded ``User`` before reading it again.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get user by ID."""
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.strip().lower())
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def create(self, **fields) -> User:
        """Add a user and flush so defaults and the id are populated."""
        fields["email"] = fields["email"].strip().lower()
        user = User(**fields)
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError() from e
        return user

    async def set_reset_ticket(self, user: User, hashed_token: str, expires_at: datetime) -> None:
        user.reset_token = hashed_token
        user.reset_token_expiry = expires_at
        await self.db.flush()

    async def find_by_reset_token(self, hashed_token: str, now: datetime) -> Optional[User]:
        """User holding this ticket, if it has not expired."""
        stmt = select(User).where(
            User.reset_token == hashed_token,
            User.reset_token_expiry > now,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def consume_reset_ticket(self, hashed_token: str, password_hash: str, now: datetime) -> bool:
        """Swap in a new password if the ticket is still valid.

        One conditional UPDATE: the ticket is matched, cleared and the
        token version bumped in the same statement, so two concurrent
        resets with the same ticket cannot both succeed.
        """
        stmt = (
            update(User)
            .where(
                User.reset_token == hashed_token,
                User.reset_token_expiry > now,
            )
            .values(
                password_hash=password_hash,
                reset_token=None,
                reset_token_expiry=None,
                token_version=User.token_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def update_password(self, user: User, password_hash: str) -> None:
        """Store a new hash and invalidate every token issued so far."""
        stmt = (
            update(User)
            .where(User.id == user.id)
            .values(
                password_hash=password_hash,
                token_version=User.token_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)
