"""Core banking integration domain exceptions."""

from .base import DomainException


class CoreBankingAPIException(DomainException):
    """Raised when the core banking gateway returns an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(
            message=message,
            code="CORE_BANKING_ERROR",
        )
        self.status_code = status_code


class CoreBankingTimeoutException(CoreBankingAPIException):
    """Raised when the core banking gateway times out."""

    def __init__(self, operation: str):
        super().__init__(
            message=f"Core banking request timed out: {operation}",
            status_code=None,
        )
        self.code = "CORE_BANKING_TIMEOUT"
        self.operation = operation


class IntegrationStepException(DomainException):
    """
    Raised by the integration service when a core banking step fails.

    The failure has already been recorded on the application and
    persisted when this is raised. These are the retryable errors
    of the submission workflow.
    """

    def __init__(self, step: str, code: str, message: str):
        super().__init__(
            message=f"{step} failed: {message}",
            code=code,
        )
        self.step = step


class IntegrationFailedException(DomainException):
    """Raised when a submission could not complete its core integration."""

    def __init__(self, application_id: str, message: str):
        super().__init__(
            message=f"Core validation failed: {message}",
            code="INTEGRATION_FAILED",
        )
        self.application_id = application_id
