"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException
from .application import (
    ApplicationNotFoundException,
    ApplicationValidationException,
    InvalidApplicationDataException,
    InvalidApplicationStateException,
    InvalidTransitionException,
)
from .core_banking import (
    CoreBankingAPIException,
    CoreBankingTimeoutException,
    IntegrationFailedException,
    IntegrationStepException,
)

__all__ = [
    "DomainException",
    "ApplicationNotFoundException",
    "ApplicationValidationException",
    "InvalidApplicationDataException",
    "InvalidApplicationStateException",
    "InvalidTransitionException",
    "CoreBankingAPIException",
    "CoreBankingTimeoutException",
    "IntegrationFailedException",
    "IntegrationStepException",
]
