"""Repository implementations."""

from .application_repository import PostgresApplicationRepository

__all__ = [
    "PostgresApplicationRepository",
]
