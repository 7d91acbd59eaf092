"""Database models module."""
from .base import Base
from .user import User
from .notification import Notification

__all__ = [
    "Base",
    "User",
    "Notification",
]
