"""Submission service - drives a draft application through the core integration."""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog

from card_gateway.application.dto import SubmissionSummary
from card_gateway.core.metrics import (
    record_compensation,
    record_integration_retry,
    record_submission,
    track_submission_latency,
)
from card_gateway.core.retry import BackoffFn, SleepFn, linear_backoff, with_retry
from card_gateway.domain.exceptions import (
    ApplicationNotFoundException,
    DomainException,
    IntegrationFailedException,
    IntegrationStepException,
    InvalidApplicationStateException,
)
from card_gateway.domain.interfaces import ApplicationRepository
from .banking_integration_service import BankingIntegrationService

logger = structlog.get_logger(__name__)


class SubmissionService:
    """
    Application service for the submit use case.

    Submitting moves a draft to SUBMITTED and then runs three core steps in
    order: client validation, risk bureau query and core registration. Each
    step is retried independently with linear backoff. If a step is still
    failing after its last attempt the application is reverted to DRAFT and
    IntegrationFailedException is raised.
    """

    def __init__(
        self,
        application_repository: ApplicationRepository,
        integration_service: BankingIntegrationService,
        max_attempts: int = 3,
        backoff: Optional[BackoffFn] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._application_repo = application_repository
        self._integration = integration_service
        self._max_attempts = max_attempts
        self._backoff = backoff or linear_backoff(1.0)
        self._sleep = sleep

    async def submit_application(self, application_id: str) -> SubmissionSummary:
        """
        Submit a draft application and integrate it with the core.

        Args:
            application_id: The application's unique identifier

        Returns:
            SubmissionSummary of the application after integration

        Raises:
            ApplicationNotFoundException: If the application doesn't exist
            InvalidApplicationStateException: If it is not a draft or the
                consents are missing
            IntegrationFailedException: If the integration failed and the
                application was reverted to DRAFT
        """
        log = logger.bind(application_id=application_id)
        log.info("submission_started")

        with track_submission_latency():
            application = await self._application_repo.get_by_id(application_id)
            if application is None:
                raise ApplicationNotFoundException(application_id)

            if not application.is_draft():
                record_submission("rejected_precondition")
                raise InvalidApplicationStateException(
                    f"Only draft applications can be submitted (status: {application.status.value})"
                )
            if not application.has_accepted_terms():
                record_submission("rejected_precondition")
                raise InvalidApplicationStateException(
                    "All consents must be granted before submitting"
                )

            application.submit()
            await self._application_repo.save(application)
            log.info("application_submitted", application_number=application.application_number)

            try:
                await self._integrate(application_id)
            except asyncio.CancelledError:
                log.warning("submission_cancelled")
                await asyncio.shield(self._compensate(application_id, "submission cancelled"))
                raise
            except Exception as e:
                message = e.message if isinstance(e, DomainException) else str(e) or type(e).__name__
                log.error(
                    "submission_integration_failed",
                    error_code=getattr(e, "code", None),
                    error_type=type(e).__name__,
                    error=message,
                )
                await self._compensate(application_id, message)
                record_submission("failed")
                raise IntegrationFailedException(application_id, message) from e

            updated = await self._application_repo.get_by_id(application_id)
            if updated is None:
                raise ApplicationNotFoundException(application_id)

        record_submission("completed")
        log.info(
            "submission_completed",
            status=updated.status.value,
            credit_score=updated.validation_state.credit_score,
            core_application_id=updated.core_integration.core_application_id,
        )
        return SubmissionSummary.from_entity(updated)

    async def _integrate(self, application_id: str) -> None:
        """Run the three core steps in order, each with its own retry budget."""
        await self._run_step(
            "validate_client", lambda: self._integration.validate_client(application_id)
        )
        await self._run_step(
            "query_risk_bureaus", lambda: self._integration.query_risk_bureaus(application_id)
        )
        await self._run_step(
            "sync_with_core", lambda: self._integration.sync_with_core(application_id)
        )

    async def _run_step(self, step: str, operation: Callable[[], Awaitable[object]]) -> None:
        await with_retry(
            operation,
            max_attempts=self._max_attempts,
            backoff=self._backoff,
            retry_on=(IntegrationStepException,),
            description=step,
            sleep=self._sleep,
            on_retry=lambda attempt, error: record_integration_retry(step),
        )

    async def _compensate(self, application_id: str, message: str) -> None:
        """Revert the last persisted state of the application to DRAFT."""
        current = await self._application_repo.get_by_id(application_id)
        if current is None:
            logger.error("compensation_skipped", application_id=application_id, reason="not_found")
            return

        current.revert_to_draft(f"Core integration failed: {message}")
        await self._application_repo.save(current)
        record_compensation()

        logger.warning(
            "submission_compensated",
            application_id=application_id,
            attempt_count=current.core_integration.attempt_count,
        )
