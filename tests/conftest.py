"""
Shared fixtures and test doubles.

Provides:
- Factories for application data
- In-memory application repository
- Mock core banking client with per-operation failure modes
- Recording sleep so backoff delays can be asserted without waiting
"""

from datetime import date
from typing import Dict, List, Optional

import pytest

from card_gateway.domain.entities import (
    Address,
    BureauReport,
    CardTier,
    ClientValidationResult,
    Consents,
    CoreApplicationStatus,
    CoreRegistrationRequest,
    CoreRegistrationResult,
    CoreStatus,
    CreditCardApplication,
    DocumentType,
    EmploymentData,
    EmploymentStatus,
    Franchise,
    PersonalData,
    ProductRequest,
    RiskLevel,
)
from card_gateway.domain.exceptions import CoreBankingAPIException
from card_gateway.domain.interfaces import ApplicationRepository, CoreBankingClient


# =============================================================================
# Factories
# =============================================================================

def make_personal_data(**overrides) -> PersonalData:
    data = dict(
        first_name="Ana",
        last_name="Gomez",
        document_type=DocumentType.CC,
        document_number="1020304050",
        birth_date=date(1990, 5, 17),
        email="ana.gomez@example.com",
        phone="3001234567",
        address=Address(street="Calle 10 # 5-20", city="Bogota", state="Cundinamarca"),
    )
    data.update(overrides)
    return PersonalData(**data)


ALL_CONSENTS = Consents(
    accepts_terms=True,
    accepts_data_processing=True,
    authorizes_bureau_query=True,
)


def make_application(
    application_number: str = "APP-20240115-00001",
    monthly_income: Optional[int] = 5_000_000,
    card_tier: CardTier = CardTier.ORO,
    requested_limit: int = 8_000_000,
    consents: Consents = ALL_CONSENTS,
    **personal_overrides,
) -> CreditCardApplication:
    """A draft application that passes every business rule."""
    return CreditCardApplication.create(
        application_number=application_number,
        personal_data=make_personal_data(**personal_overrides),
        employment_data=EmploymentData(
            employment_status=EmploymentStatus.EMPLOYED,
            company_name="Acme SAS",
            months_employed=36,
            monthly_income=monthly_income,
        ),
        product_request=ProductRequest(
            card_tier=card_tier,
            requested_limit=requested_limit,
            franchise=Franchise.VISA,
        ),
        consents=consents,
    )


# =============================================================================
# Test Doubles
# =============================================================================

class InMemoryApplicationRepository(ApplicationRepository):
    """
    Repository that keeps serialized snapshots.

    Every load returns a fresh entity, like a real database round trip.
    """

    def __init__(self):
        self.rows: Dict[str, dict] = {}
        self.save_count = 0
        self._sequence = 0

    async def get_by_id(self, application_id: str) -> Optional[CreditCardApplication]:
        row = self.rows.get(application_id)
        return CreditCardApplication.from_dict(row) if row else None

    async def get_by_application_number(
        self,
        application_number: str,
    ) -> Optional[CreditCardApplication]:
        for row in self.rows.values():
            if row["application_number"] == application_number:
                return CreditCardApplication.from_dict(row)
        return None

    async def save(self, application: CreditCardApplication) -> CreditCardApplication:
        if application.id is None:
            application.assign_id(f"app-{len(self.rows) + 1}")
        self.rows[application.id] = application.to_dict()
        self.save_count += 1
        return application

    async def generate_application_number(self) -> str:
        self._sequence += 1
        return f"APP-20240115-{self._sequence:05d}"


class MockCoreBankingClient(CoreBankingClient):
    """
    Mock core banking client that tracks calls.

    ``fail_times`` makes an operation fail that many times before it
    succeeds; ``always_fail`` makes it fail on every call. ``error`` replaces
    the default 503 CoreBankingAPIException.
    """

    OPERATIONS = ("validate_client", "query_risk_bureaus", "register_application", "query_status")

    def __init__(
        self,
        exists: bool = True,
        is_current_client: bool = True,
        credit_score: int = 800,
        current_debt: int = 1_000_000,
        core_status: CoreApplicationStatus | None = None,
        fail_times: Dict[str, int] | None = None,
        always_fail: set | None = None,
        error: Exception | None = None,
    ):
        self.exists = exists
        self.is_current_client = is_current_client
        self.credit_score = credit_score
        self.current_debt = current_debt
        self.core_status = core_status
        self.fail_times = dict(fail_times or {})
        self.always_fail = set(always_fail or ())
        self.error = error
        self.calls: Dict[str, int] = {op: 0 for op in self.OPERATIONS}
        self.registrations: List[CoreRegistrationRequest] = []

    def _track(self, operation: str) -> None:
        self.calls[operation] += 1

        if operation in self.always_fail:
            raise self.error or CoreBankingAPIException(
                message=f"{operation} unavailable",
                status_code=503,
            )

        if self.fail_times.get(operation, 0) > 0:
            self.fail_times[operation] -= 1
            raise self.error or CoreBankingAPIException(
                message=f"{operation} temporarily unavailable",
                status_code=503,
            )

    async def validate_client(
        self,
        document_type: DocumentType,
        document_number: str,
        email: Optional[str] = None,
    ) -> ClientValidationResult:
        self._track("validate_client")
        return ClientValidationResult(
            exists=self.exists,
            is_current_client=self.is_current_client,
            core_client_id=f"CLI-{document_number}" if self.exists else None,
        )

    async def query_risk_bureaus(
        self,
        document_type: DocumentType,
        document_number: str,
        first_name: str,
        last_name: str,
    ) -> BureauReport:
        self._track("query_risk_bureaus")
        return BureauReport(
            credit_score=self.credit_score,
            current_debt=self.current_debt,
            risk_level=RiskLevel.LOW if self.credit_score >= 700 else RiskLevel.HIGH,
        )

    async def register_application(
        self,
        registration: CoreRegistrationRequest,
    ) -> CoreRegistrationResult:
        self._track("register_application")
        self.registrations.append(registration)
        return CoreRegistrationResult(
            core_application_id=f"CORE-{registration.application_number}",
            core_status=CoreStatus.PENDING_VALIDATION.value,
        )

    async def query_status(self, core_application_id: str) -> CoreApplicationStatus:
        self._track("query_status")
        return self.core_status or CoreApplicationStatus(
            core_application_id=core_application_id,
            status=CoreStatus.IN_REVIEW.value,
        )


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def repository() -> InMemoryApplicationRepository:
    return InMemoryApplicationRepository()


@pytest.fixture
def core_client() -> MockCoreBankingClient:
    return MockCoreBankingClient()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
