"""Application services (use cases)."""

from .application_service import ApplicationService
from .banking_integration_service import BankingIntegrationService
from .submission_service import SubmissionService

__all__ = [
    "ApplicationService",
    "BankingIntegrationService",
    "SubmissionService",
]
