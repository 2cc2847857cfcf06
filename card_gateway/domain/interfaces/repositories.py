"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from typing import Optional

from card_gateway.domain.entities import CreditCardApplication


class ApplicationRepository(ABC):
    """
    Abstract repository for CreditCardApplication persistence.

    Implementations may use PostgreSQL, in-memory storage, etc.
    """

    @abstractmethod
    async def get_by_id(self, application_id: str) -> Optional[CreditCardApplication]:
        """
        Retrieve an application by ID.

        Args:
            application_id: The application's unique identifier

        Returns:
            The application if found, None otherwise
        """
        ...

    @abstractmethod
    async def get_by_application_number(
        self,
        application_number: str,
    ) -> Optional[CreditCardApplication]:
        """Retrieve an application by its human-facing number."""
        ...

    @abstractmethod
    async def save(self, application: CreditCardApplication) -> CreditCardApplication:
        """
        Insert or update an application.

        New applications get an identifier assigned on first save.

        Returns:
            The saved application with its identifier populated
        """
        ...

    @abstractmethod
    async def generate_application_number(self) -> str:
        """
        Produce the next application number for today.

        Numbers look like ``APP-20240115-00042`` and are sequential per day.
        """
        ...
