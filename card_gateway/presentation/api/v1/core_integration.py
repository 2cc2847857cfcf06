"""Core banking integration endpoints, one per integration step."""

from typing import Annotated

from fastapi import APIRouter, Depends

from card_gateway.application.services import BankingIntegrationService
from card_gateway.core.dependencies import get_integration_service
from card_gateway.service.rules import ValidationFailed
from card_gateway.presentation.schemas import (
    BureauQueryResponseSchema,
    ClientValidationResponseSchema,
    CoreStatusResponseSchema,
    CoreSyncResponseSchema,
    DecisionSchema,
    ErrorResponseSchema,
)

core_integration_router = APIRouter(
    prefix="/core-integration/applications/{application_id}",
    responses={
        404: {"model": ErrorResponseSchema, "description": "Application not found"},
        409: {"model": ErrorResponseSchema, "description": "Not allowed in the current status"},
        502: {"model": ErrorResponseSchema, "description": "Core banking step failed"},
    },
)


@core_integration_router.post(
    "/validate-client",
    response_model=ClientValidationResponseSchema,
    summary="Validate Client",
)
async def validate_client(
    application_id: str,
    integration_service: Annotated[BankingIntegrationService, Depends(get_integration_service)],
) -> ClientValidationResponseSchema:
    result = await integration_service.validate_client(application_id)
    return ClientValidationResponseSchema(
        exists=result.exists,
        is_current_client=result.is_current_client,
        core_client_id=result.core_client_id,
    )


@core_integration_router.post(
    "/query-bureaus",
    response_model=BureauQueryResponseSchema,
    summary="Query Risk Bureaus",
    description="Query the risk bureaus and apply the automatic decision to the application.",
)
async def query_bureaus(
    application_id: str,
    integration_service: Annotated[BankingIntegrationService, Depends(get_integration_service)],
) -> BureauQueryResponseSchema:
    outcome = await integration_service.query_risk_bureaus(application_id)
    report = outcome.report

    if isinstance(outcome.decision, ValidationFailed):
        decision = DecisionSchema(reason=outcome.decision.reason, errors=outcome.decision.errors)
    else:
        decision = DecisionSchema(**outcome.decision.to_dict())

    return BureauQueryResponseSchema(
        credit_score=report.credit_score,
        current_debt=report.current_debt,
        risk_level=report.risk_level,
        available_limit=report.available_limit,
        debt_percentage=report.debt_percentage,
        active_obligations=report.active_obligations,
        delinquencies_12mo=report.delinquencies_12mo,
        queried_at=report.queried_at,
        evaluated=outcome.evaluated,
        decision=decision,
    )


@core_integration_router.post(
    "/sync",
    response_model=CoreSyncResponseSchema,
    summary="Register Application in Core",
)
async def sync_with_core(
    application_id: str,
    integration_service: Annotated[BankingIntegrationService, Depends(get_integration_service)],
) -> CoreSyncResponseSchema:
    result = await integration_service.sync_with_core(application_id)
    return CoreSyncResponseSchema(
        core_application_id=result.core_application_id,
        core_status=result.core_status,
        message=result.message,
    )


@core_integration_router.get(
    "/status",
    response_model=CoreStatusResponseSchema,
    summary="Query Core Status",
    description="Refresh the core status; a final approval or rejection is applied to the application.",
)
async def query_core_status(
    application_id: str,
    integration_service: Annotated[BankingIntegrationService, Depends(get_integration_service)],
) -> CoreStatusResponseSchema:
    status = await integration_service.query_core_status(application_id)
    return CoreStatusResponseSchema(
        core_application_id=status.core_application_id,
        status=status.status,
        approved_limit=status.approved_limit,
        notes=status.notes,
        updated_at=status.updated_at,
    )
