"""Application service - create, read, update and abandon credit card applications."""

import structlog

from card_gateway.application.dto import (
    CreateApplicationRequest,
    UpdateApplicationRequest,
)
from card_gateway.core.metrics import record_application_created
from card_gateway.domain.entities import CreditCardApplication
from card_gateway.domain.exceptions import (
    ApplicationNotFoundException,
    ApplicationValidationException,
    InvalidApplicationStateException,
)
from card_gateway.domain.interfaces import ApplicationRepository
from card_gateway.service.rules import RulesSettings, rules_settings, validate_all

logger = structlog.get_logger(__name__)


class ApplicationService:
    """
    Application service for the draft lifecycle of an application.
    """

    def __init__(
        self,
        application_repository: ApplicationRepository,
        rules: RulesSettings = rules_settings,
    ):
        self._application_repo = application_repository
        self._rules = rules

    async def create_application(self, request: CreateApplicationRequest) -> CreditCardApplication:
        """
        Start a new draft application.

        Args:
            request: Applicant data, product request and consents

        Returns:
            The saved application

        Raises:
            ApplicationValidationException: If the data breaks a business rule
        """
        errors = request.validate()
        if errors:
            raise ApplicationValidationException(errors)

        self._validate_rules(request.personal_data, request.employment_data, request.product_request)

        application_number = await self._application_repo.generate_application_number()
        application = CreditCardApplication.create(
            application_number=application_number,
            personal_data=request.personal_data,
            employment_data=request.employment_data,
            product_request=request.product_request,
            consents=request.consents,
            channel=request.channel,
            origin_ip=request.origin_ip,
            user_agent=request.user_agent,
        )
        application = await self._application_repo.save(application)

        card_tier = request.product_request.card_tier
        record_application_created(card_tier.value if card_tier else None)
        logger.info(
            "application_created",
            application_id=application.id,
            application_number=application.application_number,
            channel=request.channel.value,
        )
        return application

    async def get_application(self, application_id: str) -> CreditCardApplication:
        """
        Get a specific application by ID.

        Raises:
            ApplicationNotFoundException: If application not found
        """
        application = await self._application_repo.get_by_id(application_id)
        if application is None:
            raise ApplicationNotFoundException(application_id)
        return application

    async def update_application(
        self,
        application_id: str,
        request: UpdateApplicationRequest,
    ) -> CreditCardApplication:
        """
        Apply partial updates to a draft application.

        Business rules are checked again when employment, product or birth
        date data changed.

        Raises:
            ApplicationNotFoundException: If application not found
            InvalidApplicationStateException: If the application is not a draft
            InvalidApplicationDataException: If a patch names unknown fields
            ApplicationValidationException: If the result breaks a business rule
        """
        application = await self.get_application(application_id)
        if not application.can_be_updated():
            raise InvalidApplicationStateException(
                f"Only draft applications can be updated (status: {application.status.value})"
            )

        if request.is_empty():
            return application

        if request.personal_data:
            application.update_personal_data(request.personal_data)
        if request.employment_data:
            application.update_employment_data(request.employment_data)
        if request.product_request:
            application.update_product_request(request.product_request)
        if request.consents:
            application.update_consents(request.consents)

        if request.touches_rules:
            self._validate_rules(
                application.personal_data,
                application.employment_data,
                application.product_request,
            )

        application = await self._application_repo.save(application)
        logger.info("application_updated", application_id=application_id)
        return application

    async def abandon_application(self, application_id: str) -> CreditCardApplication:
        """
        Abandon an application that has not been decided yet.

        Raises:
            ApplicationNotFoundException: If application not found
            InvalidApplicationStateException: If the application was already
                approved or rejected
        """
        application = await self.get_application(application_id)
        if not application.can_be_abandoned():
            raise InvalidApplicationStateException(
                f"Application cannot be abandoned (status: {application.status.value})"
            )

        application.abandon()
        application = await self._application_repo.save(application)
        logger.info("application_abandoned", application_id=application_id)
        return application

    def _validate_rules(self, personal_data, employment_data, product_request) -> None:
        result = validate_all(
            birth_date=personal_data.birth_date,
            monthly_income=employment_data.monthly_income,
            card_tier=product_request.card_tier,
            requested_limit=product_request.requested_limit,
            settings=self._rules,
        )
        if not result.is_valid:
            raise ApplicationValidationException(result.errors)
