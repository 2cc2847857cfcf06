"""In-process stand-in for the core banking API, for local runs and demos."""

import asyncio
import random
import time
from typing import Optional

import structlog

from card_gateway.core.config import settings
from card_gateway.core.metrics import (
    record_core_banking_failure,
    record_core_banking_success,
    track_core_banking_latency,
)
from card_gateway.domain.entities import (
    BureauReport,
    ClientValidationResult,
    CoreApplicationStatus,
    CoreRegistrationRequest,
    CoreRegistrationResult,
    CoreStatus,
    DocumentType,
    RiskLevel,
    utcnow,
)
from card_gateway.domain.exceptions import CoreBankingAPIException
from card_gateway.domain.interfaces import CoreBankingClient
from card_gateway.core.retry import SleepFn

logger = structlog.get_logger(__name__)


class SimulatedCoreBankingClient(CoreBankingClient):
    """
    Core banking client that fabricates plausible answers.

    - 70% of applicants exist, half of those are current clients
    - Bureau scores are uniform in 350-800 with 0-20M of debt and 0-10M
      of available credit
    - Registration fails at ``failure_rate``
    - Status polling lands on each core status with fixed odds

    Pass a seeded ``rng`` and a no-op ``sleep`` for deterministic tests.
    """

    def __init__(
        self,
        failure_rate: float | None = None,
        min_delay_ms: int | None = None,
        max_delay_ms: int | None = None,
        rng: Optional[random.Random] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._failure_rate = (
            settings.simulated_failure_rate if failure_rate is None else failure_rate
        )
        self._min_delay_ms = (
            settings.simulated_min_delay_ms if min_delay_ms is None else min_delay_ms
        )
        self._max_delay_ms = (
            settings.simulated_max_delay_ms if max_delay_ms is None else max_delay_ms
        )
        self._rng = rng or random.Random()
        self._sleep = sleep

    async def validate_client(
        self,
        document_type: DocumentType,
        document_number: str,
        email: Optional[str] = None,
    ) -> ClientValidationResult:
        with track_core_banking_latency("validate_client"):
            await self._simulate_delay()
            exists = self._rng.random() > 0.3
            is_current_client = exists and self._rng.random() > 0.5

        record_core_banking_success("validate_client")
        return ClientValidationResult(
            exists=exists,
            is_current_client=is_current_client,
            core_client_id=f"CLI-{document_number}" if exists else None,
        )

    async def query_risk_bureaus(
        self,
        document_type: DocumentType,
        document_number: str,
        first_name: str,
        last_name: str,
    ) -> BureauReport:
        with track_core_banking_latency("query_risk_bureaus"):
            await self._simulate_delay()
            score = self._rng.randint(350, 799)
            debt = self._rng.randint(0, 19_999_999)
            available_limit = self._rng.randint(0, 9_999_999)
            obligations = self._rng.randint(0, 4)
            delinquencies = self._rng.randint(0, 2) if self._rng.random() > 0.8 else 0

        record_core_banking_success("query_risk_bureaus")
        return BureauReport(
            credit_score=score,
            current_debt=debt,
            risk_level=self.risk_level_for(score),
            available_limit=available_limit,
            active_obligations=obligations,
            delinquencies_12mo=delinquencies,
            queried_at=utcnow(),
        )

    async def register_application(
        self,
        registration: CoreRegistrationRequest,
    ) -> CoreRegistrationResult:
        with track_core_banking_latency("register_application"):
            await self._simulate_delay()
            if self._rng.random() < self._failure_rate:
                record_core_banking_failure("register_application", "error")
                logger.warning(
                    "simulated_core_failure",
                    application_number=registration.application_number,
                )
                raise CoreBankingAPIException(
                    message="Communication error with core banking (simulated)",
                    status_code=503,
                )

        record_core_banking_success("register_application")
        return CoreRegistrationResult(
            core_application_id=f"CORE-{int(time.time() * 1000)}",
            core_status=CoreStatus.PENDING_VALIDATION.value,
            message="Application registered in core banking",
        )

    async def query_status(self, core_application_id: str) -> CoreApplicationStatus:
        with track_core_banking_latency("query_status"):
            await self._simulate_delay()
            roll = self._rng.random()

        record_core_banking_success("query_status")
        if roll < 0.2:
            return CoreApplicationStatus(
                core_application_id=core_application_id,
                status=CoreStatus.PENDING_VALIDATION.value,
                notes="Awaiting document validation",
                updated_at=utcnow(),
            )
        if roll < 0.5:
            return CoreApplicationStatus(
                core_application_id=core_application_id,
                status=CoreStatus.IN_REVIEW.value,
                notes="Under review by the credit department",
                updated_at=utcnow(),
            )
        if roll < 0.8:
            return CoreApplicationStatus(
                core_application_id=core_application_id,
                status=CoreStatus.APPROVED.value,
                approved_limit=self._rng.randint(2_000_000, 16_999_999),
                notes="Approved by the credit committee",
                updated_at=utcnow(),
            )
        return CoreApplicationStatus(
            core_application_id=core_application_id,
            status=CoreStatus.REJECTED.value,
            notes="Rejected for not meeting credit policies",
            updated_at=utcnow(),
        )

    @staticmethod
    def risk_level_for(score: int) -> RiskLevel:
        if score >= 700:
            return RiskLevel.LOW
        if score >= 550:
            return RiskLevel.MEDIUM
        return RiskLevel.HIGH

    async def _simulate_delay(self) -> None:
        if self._max_delay_ms <= 0:
            return
        delay_ms = self._rng.randint(self._min_delay_ms, self._max_delay_ms)
        await self._sleep(delay_ms / 1000)
