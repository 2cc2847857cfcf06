"""External client interfaces."""

from abc import ABC, abstractmethod
from typing import Optional

from card_gateway.domain.entities import (
    BureauReport,
    ClientValidationResult,
    CoreApplicationStatus,
    CoreRegistrationRequest,
    CoreRegistrationResult,
    DocumentType,
)


class CoreBankingClient(ABC):
    """
    Abstract client for the core banking system.

    Every method makes a single attempt. Retries belong to the caller.
    Implementations raise CoreBankingAPIException or
    CoreBankingTimeoutException on failure.
    """

    @abstractmethod
    async def validate_client(
        self,
        document_type: DocumentType,
        document_number: str,
        email: Optional[str] = None,
    ) -> ClientValidationResult:
        """
        Check whether the applicant is known to the bank.

        Args:
            document_type: Type of identity document
            document_number: Document number
            email: Applicant email, used as a secondary match

        Returns:
            Existence flags and the bank's client id when known
        """
        ...

    @abstractmethod
    async def query_risk_bureaus(
        self,
        document_type: DocumentType,
        document_number: str,
        first_name: str,
        last_name: str,
    ) -> BureauReport:
        """Query the credit risk bureaus for score, debt and risk level."""
        ...

    @abstractmethod
    async def register_application(
        self,
        registration: CoreRegistrationRequest,
    ) -> CoreRegistrationResult:
        """Register the application in the core and return its core id."""
        ...

    @abstractmethod
    async def query_status(self, core_application_id: str) -> CoreApplicationStatus:
        """Fetch the status of an application previously registered in the core."""
        ...
