"""Dependency injection for FastAPI."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from card_gateway.core.config import settings
from card_gateway.domain.interfaces import ApplicationRepository, CoreBankingClient
from card_gateway.infrastructure.database import db_manager
from card_gateway.infrastructure.repositories import PostgresApplicationRepository
from card_gateway.infrastructure.clients import (
    HttpCoreBankingClient,
    SimulatedCoreBankingClient,
)
from card_gateway.application.services import (
    ApplicationService,
    BankingIntegrationService,
    SubmissionService,
)
from card_gateway.core.retry import linear_backoff


# Repository dependencies
def get_application_repository() -> ApplicationRepository:
    """Get an ApplicationRepository backed by the shared session factory."""
    return PostgresApplicationRepository(db_manager.session_factory)


# External client dependencies
@lru_cache
def get_core_banking_client() -> CoreBankingClient:
    """Get the CoreBankingClient selected by CORE_BANKING_MODE."""
    if settings.core_banking_mode == "http":
        return HttpCoreBankingClient()
    return SimulatedCoreBankingClient()


# Service dependencies
def get_application_service(
    application_repo: Annotated[ApplicationRepository, Depends(get_application_repository)],
) -> ApplicationService:
    """Get an ApplicationService instance."""
    return ApplicationService(application_repository=application_repo)


def get_integration_service(
    application_repo: Annotated[ApplicationRepository, Depends(get_application_repository)],
    core_client: Annotated[CoreBankingClient, Depends(get_core_banking_client)],
) -> BankingIntegrationService:
    """Get a BankingIntegrationService instance."""
    return BankingIntegrationService(
        application_repository=application_repo,
        core_banking_client=core_client,
    )


def get_submission_service(
    application_repo: Annotated[ApplicationRepository, Depends(get_application_repository)],
    integration_service: Annotated[BankingIntegrationService, Depends(get_integration_service)],
) -> SubmissionService:
    """Get a SubmissionService instance with all dependencies."""
    return SubmissionService(
        application_repository=application_repo,
        integration_service=integration_service,
        max_attempts=settings.submission_max_attempts,
        backoff=linear_backoff(settings.submission_backoff_seconds),
    )
