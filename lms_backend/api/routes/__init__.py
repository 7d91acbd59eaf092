"""API routers."""
from . import auth, notifications

__all__ = ["auth", "notifications"]
