"""
Unit tests for SubmissionService.

Covers the full submit workflow:
1. Happy path through all three core steps
2. Per-step retries with linear backoff
3. Compensation back to DRAFT once a step exhausts its attempts
4. Preconditions checked before anything is persisted
"""

import asyncio

import httpx
import pytest

from card_gateway.application.services import (
    BankingIntegrationService,
    SubmissionService,
)
from card_gateway.domain.entities import ApplicationStatus, Consents
from card_gateway.domain.exceptions import (
    ApplicationNotFoundException,
    IntegrationFailedException,
    IntegrationStepException,
    InvalidApplicationStateException,
)
from card_gateway.infrastructure.clients import HttpCoreBankingClient
from tests.conftest import MockCoreBankingClient, make_application


def build_service(repository, client, sleep) -> SubmissionService:
    return SubmissionService(
        application_repository=repository,
        integration_service=BankingIntegrationService(repository, client),
        max_attempts=3,
        sleep=sleep,
    )


async def saved_draft(repository, **kwargs) -> str:
    application = make_application(**kwargs)
    await repository.save(application)
    return application.id


class TestSubmitApplication:
    """Tests for the happy path."""

    @pytest.mark.asyncio
    async def test_submission_completes(self, repository, core_client, recording_sleep):
        application_id = await saved_draft(repository)
        service = build_service(repository, core_client, recording_sleep)

        summary = await service.submit_application(application_id)

        assert summary.id == application_id
        assert summary.status == "approved"
        assert summary.integration.validated is True
        assert summary.integration.credit_score == 800
        assert summary.integration.core_application_id == "CORE-APP-20240115-00001"
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_history_and_integration_are_persisted(
        self, repository, core_client, recording_sleep
    ):
        application_id = await saved_draft(repository)
        await build_service(repository, core_client, recording_sleep).submit_application(
            application_id
        )

        stored = await repository.get_by_id(application_id)
        statuses = [entry.status for entry in stored.status_history]
        assert statuses == [
            ApplicationStatus.DRAFT,
            ApplicationStatus.SUBMITTED,
            ApplicationStatus.APPROVED,
        ]
        assert stored.core_integration.sent is True
        assert stored.core_integration.attempt_count == 1

    @pytest.mark.asyncio
    async def test_steps_run_once_each_in_order(self, repository, core_client, recording_sleep):
        application_id = await saved_draft(repository)
        await build_service(repository, core_client, recording_sleep).submit_application(
            application_id
        )

        assert core_client.calls == {
            "validate_client": 1,
            "query_risk_bureaus": 1,
            "register_application": 1,
            "query_status": 0,
        }

    @pytest.mark.asyncio
    async def test_manual_review_is_still_registered(self, repository, recording_sleep):
        client = MockCoreBankingClient(credit_score=650, current_debt=2_000_000)
        application_id = await saved_draft(repository)

        summary = await build_service(repository, client, recording_sleep).submit_application(
            application_id
        )

        assert summary.status == "in_review"
        assert client.calls["register_application"] == 1


class TestRetries:
    """Tests for per-step retry behavior."""

    @pytest.mark.asyncio
    async def test_two_failures_then_success(self, repository, recording_sleep):
        client = MockCoreBankingClient(fail_times={"validate_client": 2})
        application_id = await saved_draft(repository)

        summary = await build_service(repository, client, recording_sleep).submit_application(
            application_id
        )

        assert summary.status == "approved"
        assert client.calls["validate_client"] == 3
        assert recording_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_each_step_has_its_own_budget(self, repository, recording_sleep):
        client = MockCoreBankingClient(
            fail_times={"validate_client": 2, "register_application": 2},
        )
        application_id = await saved_draft(repository)

        await build_service(repository, client, recording_sleep).submit_application(
            application_id
        )

        assert client.calls["validate_client"] == 3
        assert client.calls["register_application"] == 3
        assert recording_sleep.delays == [1.0, 2.0, 1.0, 2.0]

        stored = await repository.get_by_id(application_id)
        # four recorded errors plus the successful registration
        assert stored.core_integration.attempt_count == 5


class TestCompensation:
    """Tests for reverting to DRAFT after exhausted retries."""

    @pytest.mark.asyncio
    async def test_sync_failure_reverts_to_draft(self, repository, recording_sleep):
        client = MockCoreBankingClient(always_fail={"register_application"})
        application_id = await saved_draft(repository)
        service = build_service(repository, client, recording_sleep)

        with pytest.raises(IntegrationFailedException) as exc_info:
            await service.submit_application(application_id)

        assert exc_info.value.code == "INTEGRATION_FAILED"
        assert exc_info.value.message.startswith("Core validation failed:")
        assert isinstance(exc_info.value.__cause__, IntegrationStepException)

        stored = await repository.get_by_id(application_id)
        assert stored.status == ApplicationStatus.DRAFT
        assert stored.status_history[-1].status == ApplicationStatus.DRAFT
        assert "Core integration failed" in stored.status_history[-1].note
        assert stored.core_integration.attempt_count == 3
        assert stored.core_integration.last_error.code == "CORE_SYNC_ERROR"
        assert client.calls["register_application"] == 3
        assert recording_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_later_steps_skipped_after_failure(self, repository, recording_sleep):
        client = MockCoreBankingClient(always_fail={"validate_client"})
        application_id = await saved_draft(repository)

        with pytest.raises(IntegrationFailedException):
            await build_service(repository, client, recording_sleep).submit_application(
                application_id
            )

        assert client.calls["query_risk_bureaus"] == 0
        assert client.calls["register_application"] == 0

    @pytest.mark.asyncio
    async def test_reverted_application_can_be_resubmitted(self, repository, recording_sleep):
        client = MockCoreBankingClient(always_fail={"register_application"})
        application_id = await saved_draft(repository)
        service = build_service(repository, client, recording_sleep)

        with pytest.raises(IntegrationFailedException):
            await service.submit_application(application_id)

        client.always_fail.clear()
        summary = await service.submit_application(application_id)

        stored = await repository.get_by_id(application_id)
        assert summary.status == "approved"
        assert stored.core_integration.attempt_count == 4

    @pytest.mark.asyncio
    async def test_unexpected_gateway_error_reverts_to_draft(self, repository, recording_sleep):
        client = MockCoreBankingClient(
            always_fail={"query_risk_bureaus"},
            error=RuntimeError("connection reset by peer"),
        )
        application_id = await saved_draft(repository)

        with pytest.raises(IntegrationFailedException) as exc_info:
            await build_service(repository, client, recording_sleep).submit_application(
                application_id
            )

        assert isinstance(exc_info.value.__cause__, IntegrationStepException)
        stored = await repository.get_by_id(application_id)
        assert stored.status == ApplicationStatus.DRAFT
        assert stored.core_integration.last_error.code == "BUREAU_QUERY_ERROR"
        assert stored.core_integration.last_error.message == "connection reset by peer"
        assert stored.core_integration.attempt_count == 3
        assert client.calls["query_risk_bureaus"] == 3
        assert client.calls["register_application"] == 0

    @pytest.mark.asyncio
    async def test_malformed_core_answer_reverts_to_draft(self, repository, recording_sleep):
        client = HttpCoreBankingClient(
            base_url="http://core.test/api/v1",
            api_key="secret",
            timeout=1.0,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[])),
        )
        application_id = await saved_draft(repository)

        with pytest.raises(IntegrationFailedException):
            await build_service(repository, client, recording_sleep).submit_application(
                application_id
            )

        stored = await repository.get_by_id(application_id)
        assert stored.status == ApplicationStatus.DRAFT
        assert stored.core_integration.last_error.code == "CLIENT_VALIDATION_ERROR"
        assert stored.core_integration.attempt_count == 3

    @pytest.mark.asyncio
    async def test_error_outside_the_steps_is_compensated(self, repository, core_client):
        application_id = await saved_draft(repository)

        async def broken_sleep(seconds: float) -> None:
            raise RuntimeError("timer unavailable")

        core_client.fail_times["validate_client"] = 1
        service = build_service(repository, core_client, broken_sleep)

        with pytest.raises(IntegrationFailedException) as exc_info:
            await service.submit_application(application_id)

        assert exc_info.value.message.endswith("timer unavailable")
        stored = await repository.get_by_id(application_id)
        assert stored.status == ApplicationStatus.DRAFT

    @pytest.mark.asyncio
    async def test_cancellation_reverts_to_draft(self, repository):
        client = MockCoreBankingClient(fail_times={"validate_client": 1})
        application_id = await saved_draft(repository)

        async def cancelled_sleep(seconds: float) -> None:
            raise asyncio.CancelledError()

        service = build_service(repository, client, cancelled_sleep)

        with pytest.raises(asyncio.CancelledError):
            await service.submit_application(application_id)

        stored = await repository.get_by_id(application_id)
        assert stored.status == ApplicationStatus.DRAFT
        assert stored.status_history[-1].note == "Core integration failed: submission cancelled"


class TestPreconditions:
    """Tests for checks made before the application is submitted."""

    @pytest.mark.asyncio
    async def test_unknown_application(self, repository, core_client, recording_sleep):
        service = build_service(repository, core_client, recording_sleep)
        with pytest.raises(ApplicationNotFoundException):
            await service.submit_application("missing")

    @pytest.mark.asyncio
    async def test_non_draft_is_refused(self, repository, core_client, recording_sleep):
        application = make_application()
        application.submit()
        await repository.save(application)
        saves = repository.save_count

        with pytest.raises(InvalidApplicationStateException) as exc_info:
            await build_service(repository, core_client, recording_sleep).submit_application(
                application.id
            )

        assert exc_info.value.code == "INVALID_STATE"
        assert repository.save_count == saves
        assert core_client.calls["validate_client"] == 0

    @pytest.mark.asyncio
    async def test_missing_consents_are_refused(self, repository, core_client, recording_sleep):
        application_id = await saved_draft(
            repository,
            consents=Consents(accepts_terms=True, accepts_data_processing=True),
        )

        with pytest.raises(InvalidApplicationStateException):
            await build_service(repository, core_client, recording_sleep).submit_application(
                application_id
            )

        stored = await repository.get_by_id(application_id)
        assert stored.status == ApplicationStatus.DRAFT
        assert len(stored.status_history) == 1
