"""HTTP implementation of CoreBankingClient."""

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

import httpx
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
    DocumentType,
    RiskLevel,
)
from card_gateway.domain.exceptions import (
    CoreBankingAPIException,
    CoreBankingTimeoutException,
)
from card_gateway.domain.interfaces import CoreBankingClient

logger = structlog.get_logger(__name__)


@contextmanager
def _malformed_response(operation: str) -> Iterator[None]:
    """Turn parsing errors on a response body into CoreBankingAPIException."""
    try:
        yield
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.error("core_banking_malformed_response", operation=operation, error=str(e))
        raise CoreBankingAPIException(
            message=f"Malformed core banking response for {operation}: {e}",
        ) from e


class HttpCoreBankingClient(CoreBankingClient):
    """
    HTTP client for the core banking integration API.

    Makes exactly one request per call; the submission workflow owns
    retries. Transport errors and non-2xx responses become
    CoreBankingAPIException, timeouts CoreBankingTimeoutException.
    """

    API_KEY_HEADER = "X-API-Key"

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or settings.core_banking_api_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.core_banking_api_key
        self._timeout = timeout or settings.core_banking_timeout
        self._transport = transport

    async def validate_client(
        self,
        document_type: DocumentType,
        document_number: str,
        email: Optional[str] = None,
    ) -> ClientValidationResult:
        data = await self._request(
            "validate_client",
            "POST",
            "/clients/validate",
            json={
                "document_type": DocumentType(document_type).value,
                "document_number": document_number,
                "email": email,
            },
        )
        with _malformed_response("validate_client"):
            return ClientValidationResult(
                exists=bool(data.get("exists", False)),
                is_current_client=bool(data.get("is_current_client", False)),
                core_client_id=data.get("core_client_id"),
            )

    async def query_risk_bureaus(
        self,
        document_type: DocumentType,
        document_number: str,
        first_name: str,
        last_name: str,
    ) -> BureauReport:
        data = await self._request(
            "query_risk_bureaus",
            "POST",
            "/risk-bureaus/query",
            json={
                "document_type": DocumentType(document_type).value,
                "document_number": document_number,
                "first_name": first_name,
                "last_name": last_name,
            },
        )
        if data.get("succeeded") is False:
            raise CoreBankingAPIException(
                message=data.get("message") or "Risk bureau query did not succeed",
            )
        with _malformed_response("query_risk_bureaus"):
            return BureauReport(
                credit_score=int(data["credit_score"]),
                current_debt=int(data.get("current_debt", 0)),
                risk_level=RiskLevel(data["risk_level"]),
                available_limit=data.get("available_limit"),
                active_obligations=data.get("active_obligations"),
                delinquencies_12mo=data.get("delinquencies_12mo"),
                queried_at=self._parse_datetime(data.get("queried_at")),
            )

    async def register_application(
        self,
        registration: CoreRegistrationRequest,
    ) -> CoreRegistrationResult:
        data = await self._request(
            "register_application",
            "POST",
            "/applications",
            json=registration.to_payload(),
        )
        if data.get("success") is False:
            raise CoreBankingAPIException(
                message=data.get("message") or "Core rejected the registration",
            )
        with _malformed_response("register_application"):
            return CoreRegistrationResult(
                core_application_id=data["core_application_id"],
                core_status=data["core_status"],
                message=data.get("message"),
            )

    async def query_status(self, core_application_id: str) -> CoreApplicationStatus:
        data = await self._request(
            "query_status",
            "GET",
            f"/applications/{core_application_id}/status",
        )
        with _malformed_response("query_status"):
            return CoreApplicationStatus(
                core_application_id=data.get("core_application_id", core_application_id),
                status=data["core_status"],
                approved_limit=data.get("approved_limit"),
                notes=data.get("notes"),
                updated_at=self._parse_datetime(data.get("updated_at")),
            )

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """Send one request and return the decoded JSON body."""
        headers = {self.API_KEY_HEADER: self._api_key} if self._api_key else {}

        try:
            with track_core_banking_latency(operation):
                async with httpx.AsyncClient(
                    base_url=self._base_url,
                    timeout=self._timeout,
                    transport=self._transport,
                ) as client:
                    response = await client.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as e:
            record_core_banking_failure(operation, "timeout")
            logger.warning("core_banking_timeout", operation=operation, path=path)
            raise CoreBankingTimeoutException(operation) from e
        except httpx.HTTPError as e:
            record_core_banking_failure(operation, "transport")
            logger.error("core_banking_transport_error", operation=operation, error=str(e))
            raise CoreBankingAPIException(
                message=f"Core banking unreachable: {e}",
            ) from e

        if response.status_code >= 400:
            record_core_banking_failure(operation, "error")
            logger.error(
                "core_banking_error",
                operation=operation,
                status_code=response.status_code,
            )
            raise CoreBankingAPIException(
                message=f"Core banking error: {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            record_core_banking_failure(operation, "invalid_response")
            raise CoreBankingAPIException(
                message="Core banking returned an invalid response",
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            record_core_banking_failure(operation, "invalid_response")
            logger.error(
                "core_banking_malformed_response",
                operation=operation,
                body_type=type(data).__name__,
            )
            raise CoreBankingAPIException(
                message="Core banking returned an invalid response",
                status_code=response.status_code,
            )

        record_core_banking_success(operation)
        return data

    @staticmethod
    def _parse_datetime(value: str | None) -> datetime | None:
        if not value:
            return None
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
