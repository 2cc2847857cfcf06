"""Data Transfer Objects for application layer."""

from .application import (
    ApplicationResponse,
    CreateApplicationRequest,
    UpdateApplicationRequest,
)
from .submission import BureauQueryOutcome, IntegrationSummary, SubmissionSummary

__all__ = [
    "ApplicationResponse",
    "CreateApplicationRequest",
    "UpdateApplicationRequest",
    "BureauQueryOutcome",
    "IntegrationSummary",
    "SubmissionSummary",
]
