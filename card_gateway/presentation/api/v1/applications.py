"""Application API endpoints."""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from card_gateway.application.dto import (
    ApplicationResponse,
    CreateApplicationRequest,
    UpdateApplicationRequest,
)
from card_gateway.application.services import ApplicationService, SubmissionService
from card_gateway.core.dependencies import get_application_service, get_submission_service
from card_gateway.domain.entities import (
    Address,
    Consents,
    CreditCardApplication,
    EmploymentData,
    PersonalData,
    ProductRequest,
)
from card_gateway.presentation.schemas import (
    ApplicationResponseSchema,
    CreateApplicationSchema,
    ErrorResponseSchema,
    SubmissionResponseSchema,
    UpdateApplicationSchema,
)

applications_router = APIRouter(
    prefix="/applications",
    responses={
        400: {"model": ErrorResponseSchema, "description": "Business rule violation"},
        404: {"model": ErrorResponseSchema, "description": "Application not found"},
        409: {"model": ErrorResponseSchema, "description": "Not allowed in the current status"},
    },
)


def _to_schema(application: CreditCardApplication) -> ApplicationResponseSchema:
    return ApplicationResponseSchema.model_validate(
        asdict(ApplicationResponse.from_entity(application))
    )


@applications_router.post(
    "",
    response_model=ApplicationResponseSchema,
    status_code=201,
    summary="Create Application",
    description="Start a new credit card application in draft status.",
)
async def create_application(
    body: CreateApplicationSchema,
    request: Request,
    application_service: Annotated[ApplicationService, Depends(get_application_service)],
) -> ApplicationResponseSchema:
    personal = body.personal_data
    dto = CreateApplicationRequest(
        personal_data=PersonalData(
            first_name=personal.first_name,
            last_name=personal.last_name,
            document_type=personal.document_type,
            document_number=personal.document_number,
            birth_date=personal.birth_date,
            email=personal.email,
            phone=personal.phone,
            address=Address(**personal.address.model_dump()),
            gender=personal.gender,
        ),
        employment_data=EmploymentData(**body.employment_data.model_dump()),
        product_request=ProductRequest(**body.product_request.model_dump()),
        consents=Consents(**body.consents.model_dump()),
        channel=body.channel,
        origin_ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )

    application = await application_service.create_application(dto)
    return _to_schema(application)


@applications_router.get(
    "/{application_id}",
    response_model=ApplicationResponseSchema,
    summary="Get Application",
)
async def get_application(
    application_id: str,
    application_service: Annotated[ApplicationService, Depends(get_application_service)],
) -> ApplicationResponseSchema:
    application = await application_service.get_application(application_id)
    return _to_schema(application)


@applications_router.patch(
    "/{application_id}",
    response_model=ApplicationResponseSchema,
    summary="Update Draft Application",
    description="Partially update a draft application. Only the fields sent are changed.",
)
async def update_application(
    application_id: str,
    body: UpdateApplicationSchema,
    application_service: Annotated[ApplicationService, Depends(get_application_service)],
) -> ApplicationResponseSchema:
    def patch(section):
        return section.model_dump(exclude_unset=True) if section is not None else None

    dto = UpdateApplicationRequest(
        personal_data=patch(body.personal_data),
        employment_data=patch(body.employment_data),
        product_request=patch(body.product_request),
        consents=patch(body.consents),
    )
    application = await application_service.update_application(application_id, dto)
    return _to_schema(application)


@applications_router.post(
    "/{application_id}/submit",
    response_model=SubmissionResponseSchema,
    summary="Submit Application",
    description="""
    Submit a draft application and run the core banking integration:
    client validation, risk bureau query and core registration.

    If the integration fails the application goes back to draft and
    a 502 INTEGRATION_FAILED error is returned.
    """,
    responses={
        502: {"model": ErrorResponseSchema, "description": "Core integration failed"},
    },
)
async def submit_application(
    application_id: str,
    submission_service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> SubmissionResponseSchema:
    summary = await submission_service.submit_application(application_id)
    return SubmissionResponseSchema.model_validate(asdict(summary))


@applications_router.post(
    "/{application_id}/abandon",
    response_model=ApplicationResponseSchema,
    summary="Abandon Application",
)
async def abandon_application(
    application_id: str,
    application_service: Annotated[ApplicationService, Depends(get_application_service)],
) -> ApplicationResponseSchema:
    application = await application_service.abandon_application(application_id)
    return _to_schema(application)
