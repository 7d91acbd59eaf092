"""Configuration module."""
from .settings import DEFAULT_SECRET_KEY, Settings, settings

__all__ = ["DEFAULT_SECRET_KEY", "Settings", "settings"]
