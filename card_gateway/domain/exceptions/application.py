"""Application-related domain exceptions."""

from typing import List

from .base import DomainException


class ApplicationNotFoundException(DomainException):
    """Raised when an application cannot be found."""

    def __init__(self, application_id: str):
        super().__init__(
            message=f"Application not found: {application_id}",
            code="NOT_FOUND",
        )
        self.application_id = application_id


class InvalidApplicationStateException(DomainException):
    """Raised when a use case precondition on the application state fails."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INVALID_STATE",
        )


class InvalidTransitionException(DomainException):
    """Raised by the entity when a guarded transition is not allowed."""

    def __init__(self, action: str, status: str, reason: str):
        super().__init__(
            message=f"Cannot {action} application in status '{status}': {reason}",
            code="INVALID_TRANSITION",
        )
        self.action = action
        self.status = status


class InvalidApplicationDataException(DomainException):
    """Raised when a data patch references fields the application does not have."""

    def __init__(self, section: str, fields: List[str]):
        super().__init__(
            message=f"Unknown fields for {section}: {', '.join(sorted(fields))}",
            code="INVALID_APPLICATION_DATA",
        )
        self.section = section
        self.fields = fields


class ApplicationValidationException(DomainException):
    """Raised when an application breaks one or more business rules."""

    def __init__(self, errors: List[str]):
        super().__init__(
            message="; ".join(errors),
            code="VALIDATION_FAILED",
        )
        self.errors = list(errors)
