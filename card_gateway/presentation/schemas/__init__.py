"""Pydantic schemas for API request/response validation."""

from .application import (
    ApplicationResponseSchema,
    CreateApplicationSchema,
    SubmissionResponseSchema,
    UpdateApplicationSchema,
)
from .core_integration import (
    BureauQueryResponseSchema,
    ClientValidationResponseSchema,
    CoreStatusResponseSchema,
    CoreSyncResponseSchema,
    DecisionSchema,
)
from .error import ErrorResponseSchema

__all__ = [
    "ApplicationResponseSchema",
    "CreateApplicationSchema",
    "SubmissionResponseSchema",
    "UpdateApplicationSchema",
    "BureauQueryResponseSchema",
    "ClientValidationResponseSchema",
    "CoreStatusResponseSchema",
    "CoreSyncResponseSchema",
    "DecisionSchema",
    "ErrorResponseSchema",
]
