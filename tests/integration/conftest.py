"""
Fixtures for integration tests.

Provides:
- In-memory SQLite database with the real repository
- Mock core banking client
- Test client for the FastAPI app with dependencies overridden
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from card_gateway.main import app
from card_gateway.application.services import (
    BankingIntegrationService,
    SubmissionService,
)
from card_gateway.core.dependencies import (
    get_application_repository,
    get_core_banking_client,
    get_submission_service,
)
from card_gateway.infrastructure.database import Base
from card_gateway.infrastructure.repositories import PostgresApplicationRepository
from tests.conftest import MockCoreBankingClient, RecordingSleep


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine using SQLite."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_repository(session_factory) -> PostgresApplicationRepository:
    return PostgresApplicationRepository(session_factory, number_prefix="APP")


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def mock_core_client() -> MockCoreBankingClient:
    return MockCoreBankingClient()


@pytest.fixture
def backoff_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest_asyncio.fixture
async def client(
    db_repository,
    mock_core_client,
    backoff_sleep,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with mocked dependencies."""

    def override_submission_service() -> SubmissionService:
        return SubmissionService(
            application_repository=db_repository,
            integration_service=BankingIntegrationService(db_repository, mock_core_client),
            max_attempts=3,
            sleep=backoff_sleep,
        )

    app.dependency_overrides[get_application_repository] = lambda: db_repository
    app.dependency_overrides[get_core_banking_client] = lambda: mock_core_client
    app.dependency_overrides[get_submission_service] = override_submission_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def application_payload(**overrides) -> dict:
    """Request body for POST /v1/applications that passes every rule."""
    payload = {
        "personal_data": {
            "first_name": "Ana",
            "last_name": "Gomez",
            "document_type": "CC",
            "document_number": "1020304050",
            "birth_date": "1990-05-17",
            "email": "ana.gomez@example.com",
            "phone": "3001234567",
            "address": {
                "street": "Calle 10 # 5-20",
                "city": "Bogota",
                "state": "Cundinamarca",
            },
        },
        "employment_data": {
            "employment_status": "EMPLOYED",
            "contract_type": "PERMANENT",
            "company_name": "Acme SAS",
            "months_employed": 36,
            "monthly_income": 5_000_000,
        },
        "product_request": {
            "card_tier": "ORO",
            "requested_limit": 8_000_000,
            "franchise": "VISA",
        },
        "consents": {
            "accepts_terms": True,
            "accepts_data_processing": True,
            "authorizes_bureau_query": True,
        },
        "channel": "WEB",
    }
    payload.update(overrides)
    return payload
