"""PostgreSQL implementation of ApplicationRepository."""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from card_gateway.core.config import settings
from card_gateway.domain.entities import CreditCardApplication
from card_gateway.domain.interfaces import ApplicationRepository
from card_gateway.infrastructure.database.models import ApplicationModel


class PostgresApplicationRepository(ApplicationRepository):
    """
    PostgreSQL implementation of the Application repository.

    Every operation opens its own session, and ``save`` commits before
    returning, so each step of a submission is durable on its own.
    """

    SEQUENCE_DIGITS = 5

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        number_prefix: str | None = None,
    ):
        self._session_factory = session_factory
        self._number_prefix = number_prefix or settings.application_number_prefix

    async def get_by_id(self, application_id: str) -> Optional[CreditCardApplication]:
        """Retrieve an application by ID."""
        async with self._session_factory() as session:
            model = await session.get(ApplicationModel, str(application_id))
            if model is None:
                return None
            return self._to_entity(model)

    async def get_by_application_number(
        self,
        application_number: str,
    ) -> Optional[CreditCardApplication]:
        """Retrieve an application by its number."""
        stmt = select(ApplicationModel).where(
            ApplicationModel.application_number == application_number
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()
            if model is None:
                return None
            return self._to_entity(model)

    async def save(self, application: CreditCardApplication) -> CreditCardApplication:
        """Insert or update an application and commit."""
        if application.id is None:
            application.assign_id(str(uuid4()))

        async with self._session_factory() as session:
            async with session.begin():
                model = await session.get(ApplicationModel, application.id)
                if model is None:
                    model = ApplicationModel(id=application.id)
                    session.add(model)
                self._apply(model, application)

        return application

    async def generate_application_number(self) -> str:
        """
        Next number for today, e.g. ``APP-20240115-00042``.

        The sequence is one past the highest number issued today and
        restarts at 1 every day (UTC).
        """
        day_prefix = f"{self._number_prefix}-{datetime.now(timezone.utc):%Y%m%d}-"
        stmt = (
            select(ApplicationModel.application_number)
            .where(ApplicationModel.application_number.like(f"{day_prefix}%"))
            .order_by(ApplicationModel.application_number.desc())
            .limit(1)
        )

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            last_number = result.scalar_one_or_none()

        sequence = int(last_number[len(day_prefix):]) + 1 if last_number else 1
        return f"{day_prefix}{sequence:0{self.SEQUENCE_DIGITS}d}"

    def _apply(self, model: ApplicationModel, application: CreditCardApplication) -> None:
        """Copy entity state onto the ORM model."""
        data = application.to_dict()
        model.application_number = application.application_number
        model.status = application.status.value
        model.document_type = application.personal_data.document_type.value
        model.document_number = application.personal_data.document_number
        model.personal_data = data["personal_data"]
        model.employment_data = data["employment_data"]
        model.product_request = data["product_request"]
        model.consents = data["consents"]
        model.validation_state = data["validation_state"]
        model.core_integration = data["core_integration"]
        model.status_history = data["status_history"]
        model.app_metadata = data["metadata"]
        model.created_at = application.metadata.created_at
        model.updated_at = application.metadata.updated_at

    def _to_entity(self, model: ApplicationModel) -> CreditCardApplication:
        """Convert database model to domain entity."""
        return CreditCardApplication.from_dict(
            {
                "id": str(model.id),
                "application_number": model.application_number,
                "status": model.status,
                "personal_data": model.personal_data,
                "employment_data": model.employment_data,
                "product_request": model.product_request,
                "consents": model.consents,
                "validation_state": model.validation_state,
                "core_integration": model.core_integration,
                "status_history": model.status_history,
                "metadata": model.app_metadata,
            }
        )
