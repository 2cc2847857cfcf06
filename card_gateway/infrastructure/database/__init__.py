"""Database infrastructure."""

from .connection import DatabaseSessionManager, db_manager, to_async_url
from .models import ApplicationModel, Base

__all__ = [
    "DatabaseSessionManager",
    "db_manager",
    "to_async_url",
    "ApplicationModel",
    "Base",
]
