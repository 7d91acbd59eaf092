"""User model."""
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

DEFAULT_USER_IMAGE = "https://upload.wikimedia.org/wikipedia/commons/5/59/User-avatar.svg"


class User(Base):
    """Account and credential state for a learner or admin."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default="user", nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    # Bumped on every password change; tokens carrying an older value are rejected
    token_version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # SHA-256 of the emailed reset token, never the raw value
    reset_token: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    reset_token_expiry: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Profile
    user_image: Mapped[str] = mapped_column(String(500), default=DEFAULT_USER_IMAGE, nullable=False)
    gender: Mapped[Optional[str]] = mapped_column(String(10))
    location: Mapped[Optional[str]] = mapped_column(String(255))
    phone_number: Mapped[Optional[str]] = mapped_column(String(50))
    has_chosen_path: Mapped[bool] = mapped_column(default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<User(email={self.email}, role={self.role})>"
