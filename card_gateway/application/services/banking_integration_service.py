"""Banking integration service - wraps each core banking step for an application."""

import structlog

from card_gateway.application.dto import BureauQueryOutcome
from card_gateway.core.metrics import record_automatic_decision
from card_gateway.domain.entities import (
    ApplicationStatus,
    ClientValidationResult,
    CoreApplicationStatus,
    CoreRegistrationRequest,
    CoreRegistrationResult,
    CoreStatus,
    CreditCardApplication,
)
from card_gateway.domain.exceptions import (
    ApplicationNotFoundException,
    CoreBankingAPIException,
    IntegrationStepException,
    InvalidApplicationStateException,
)
from card_gateway.domain.interfaces import ApplicationRepository, CoreBankingClient
from card_gateway.service.rules import (
    DecisionAction,
    RulesSettings,
    ValidationFailed,
    evaluate,
    rules_settings,
)

logger = structlog.get_logger(__name__)


class BankingIntegrationService:
    """
    Application service for the individual core banking integration steps.

    Each operation loads the application, calls the core, applies the result
    to the entity and saves it. Whatever the core call raises is recorded
    on the application and saved before IntegrationStepException is raised,
    so attempt counts survive the failure.
    """

    CLIENT_VALIDATION_ERROR = "CLIENT_VALIDATION_ERROR"
    BUREAU_QUERY_ERROR = "BUREAU_QUERY_ERROR"
    CORE_SYNC_ERROR = "CORE_SYNC_ERROR"
    CORE_STATUS_ERROR = "CORE_STATUS_ERROR"

    def __init__(
        self,
        application_repository: ApplicationRepository,
        core_banking_client: CoreBankingClient,
        rules: RulesSettings = rules_settings,
    ):
        self._application_repo = application_repository
        self._core_client = core_banking_client
        self._rules = rules

    async def validate_client(self, application_id: str) -> ClientValidationResult:
        """
        Check the applicant against the bank's client base.

        Raises:
            ApplicationNotFoundException: If the application doesn't exist
            IntegrationStepException: If the core call fails
        """
        application = await self._load(application_id)
        personal = application.personal_data
        log = logger.bind(application_id=application_id, step="validate_client")
        log.info("integration_step_started")

        try:
            result = await self._core_client.validate_client(
                document_type=personal.document_type,
                document_number=personal.document_number,
                email=personal.email,
            )
        except Exception as e:
            raise await self._record_failure(
                application, "validate_client", self.CLIENT_VALIDATION_ERROR, e
            ) from e

        application.mark_identity_validated(
            result.exists,
            result.core_client_id if result.is_current_client else None,
        )
        await self._application_repo.save(application)

        log.info(
            "client_validated",
            exists=result.exists,
            is_current_client=result.is_current_client,
        )
        return result

    async def query_risk_bureaus(self, application_id: str) -> BureauQueryOutcome:
        """
        Query the risk bureaus and apply the automatic decision.

        The decision rules run on the reported score and debt together with
        the declared income. When they cannot be evaluated (no income) the
        application goes to manual review.

        Raises:
            ApplicationNotFoundException: If the application doesn't exist
            IntegrationStepException: If the core call fails
        """
        application = await self._load(application_id)
        personal = application.personal_data
        log = logger.bind(application_id=application_id, step="query_risk_bureaus")
        log.info("integration_step_started")

        try:
            report = await self._core_client.query_risk_bureaus(
                document_type=personal.document_type,
                document_number=personal.document_number,
                first_name=personal.first_name,
                last_name=personal.last_name,
            )
        except Exception as e:
            raise await self._record_failure(
                application, "query_risk_bureaus", self.BUREAU_QUERY_ERROR, e
            ) from e

        application.update_credit_score(report.credit_score, report.risk_level, report.current_debt)

        outcome = evaluate(
            score=report.credit_score,
            debt=report.current_debt,
            income=application.employment_data.monthly_income,
            requested_limit=application.product_request.requested_limit,
            settings=self._rules,
        )

        if isinstance(outcome, ValidationFailed):
            application.send_to_manual_review(outcome.reason)
            action = DecisionAction.MANUAL_REVIEW
        elif outcome.action == DecisionAction.REJECT:
            application.reject(outcome.reason)
            action = outcome.action
        elif outcome.action == DecisionAction.APPROVE:
            application.approve(outcome.reason)
            action = outcome.action
        else:
            application.send_to_manual_review(outcome.reason)
            action = outcome.action

        await self._application_repo.save(application)
        record_automatic_decision(action.value)

        log.info(
            "risk_bureaus_queried",
            credit_score=report.credit_score,
            risk_level=report.risk_level.value,
            decision=action.value,
        )
        return BureauQueryOutcome(report=report, decision=outcome)

    async def sync_with_core(self, application_id: str) -> CoreRegistrationResult:
        """
        Register the application in the core banking system.

        Raises:
            ApplicationNotFoundException: If the application doesn't exist
            InvalidApplicationStateException: If the application is still a draft
            IntegrationStepException: If the core call fails
        """
        application = await self._load(application_id)
        if application.status == ApplicationStatus.DRAFT:
            raise InvalidApplicationStateException(
                f"Application {application_id} is a draft and cannot be synced with the core"
            )

        log = logger.bind(application_id=application_id, step="sync_with_core")
        log.info("integration_step_started")

        try:
            result = await self._core_client.register_application(
                self._build_registration(application)
            )
        except Exception as e:
            raise await self._record_failure(
                application, "sync_with_core", self.CORE_SYNC_ERROR, e
            ) from e

        application.mark_sent_to_core(result.core_application_id, result.core_status)
        await self._application_repo.save(application)

        log.info(
            "application_synced",
            core_application_id=result.core_application_id,
            core_status=result.core_status,
        )
        return result

    async def query_core_status(self, application_id: str) -> CoreApplicationStatus:
        """
        Refresh the core status and apply a final approval or rejection.

        Raises:
            ApplicationNotFoundException: If the application doesn't exist
            InvalidApplicationStateException: If it was never synced with the core
            IntegrationStepException: If the core call fails
        """
        application = await self._load(application_id)
        core_application_id = application.core_integration.core_application_id
        if not core_application_id:
            raise InvalidApplicationStateException(
                f"Application {application_id} has not been synced with the core"
            )

        log = logger.bind(application_id=application_id, step="query_core_status")

        try:
            status = await self._core_client.query_status(core_application_id)
        except Exception as e:
            raise await self._record_failure(
                application, "query_core_status", self.CORE_STATUS_ERROR, e
            ) from e

        application.update_core_status(status.status)

        if status.status == CoreStatus.APPROVED.value:
            if status.approved_limit is not None:
                application.approve(f"Approved by core - limit: {status.approved_limit}")
            else:
                application.approve("Approved by core")
        elif status.status == CoreStatus.REJECTED.value:
            application.reject(status.notes or "Rejected by core banking")

        await self._application_repo.save(application)

        log.info("core_status_updated", core_status=status.status)
        return status

    async def _load(self, application_id: str) -> CreditCardApplication:
        application = await self._application_repo.get_by_id(application_id)
        if application is None:
            raise ApplicationNotFoundException(application_id)
        return application

    async def _record_failure(
        self,
        application: CreditCardApplication,
        step: str,
        code: str,
        error: Exception,
    ) -> IntegrationStepException:
        """Record the failed step on the application and build the error to raise."""
        if isinstance(error, CoreBankingAPIException):
            message = error.message
        else:
            message = str(error) or type(error).__name__

        application.record_core_error(code, message)
        await self._application_repo.save(application)

        logger.warning(
            "integration_step_failed",
            application_id=application.id,
            step=step,
            error_code=code,
            error=message,
            error_type=type(error).__name__,
            attempt_count=application.core_integration.attempt_count,
        )
        return IntegrationStepException(step=step, code=code, message=message)

    @staticmethod
    def _build_registration(application: CreditCardApplication) -> CoreRegistrationRequest:
        personal = application.personal_data
        return CoreRegistrationRequest(
            application_number=application.application_number,
            document_type=personal.document_type,
            document_number=personal.document_number,
            first_name=personal.first_name,
            last_name=personal.last_name,
            email=personal.email,
            phone=personal.phone,
            monthly_income=application.employment_data.monthly_income,
            card_tier=application.product_request.card_tier,
            requested_limit=application.product_request.requested_limit,
            franchise=application.product_request.franchise,
            credit_score=application.validation_state.credit_score,
            core_client_id=application.core_integration.core_client_id,
            identity_validated=application.validation_state.identity_validated,
            risk_level=application.validation_state.risk_level,
        )
