"""Application-related Pydantic schemas."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from card_gateway.domain.entities import (
    ApplicationStatus,
    CardTier,
    Channel,
    ContractType,
    DocumentType,
    EmploymentStatus,
    Franchise,
    Gender,
    RiskLevel,
)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class AddressSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    street: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)


class PersonalDataSchema(BaseModel):
    """Applicant identity and contact details."""

    model_config = ConfigDict(extra="forbid")

    first_name: str = Field(..., min_length=1, max_length=100, examples=["Ana"])
    last_name: str = Field(..., min_length=1, max_length=100, examples=["Gomez"])
    document_type: DocumentType = Field(..., examples=["CC"])
    document_number: str = Field(
        ...,
        min_length=5,
        max_length=20,
        pattern=r"^[A-Za-z0-9]+$",
        examples=["1020304050"],
    )
    birth_date: date = Field(..., examples=["1990-05-17"])
    gender: Optional[Gender] = None
    email: str = Field(..., max_length=254, pattern=EMAIL_PATTERN, examples=["ana@example.com"])
    phone: str = Field(..., min_length=7, max_length=20, examples=["3001234567"])
    address: AddressSchema

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: date) -> date:
        """Birth date cannot be in the future."""
        if v > date.today():
            raise ValueError("birth_date cannot be in the future")
        return v


class EmploymentDataSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    employment_status: Optional[EmploymentStatus] = None
    contract_type: Optional[ContractType] = None
    company_name: Optional[str] = Field(None, max_length=200)
    job_title: Optional[str] = Field(None, max_length=100)
    months_employed: Optional[int] = Field(None, ge=0)
    monthly_income: Optional[int] = Field(None, ge=0, examples=[5_000_000])


class ProductRequestSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    card_tier: Optional[CardTier] = Field(None, examples=["ORO"])
    requested_limit: Optional[int] = Field(None, gt=0, examples=[8_000_000])
    franchise: Optional[Franchise] = None
    additional_insurance: Optional[bool] = None


class ConsentsSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    accepts_terms: bool = False
    accepts_data_processing: bool = False
    authorizes_bureau_query: bool = False


class CreateApplicationSchema(BaseModel):
    """Schema for POST /v1/applications request body."""

    personal_data: PersonalDataSchema
    employment_data: EmploymentDataSchema = Field(default_factory=EmploymentDataSchema)
    product_request: ProductRequestSchema = Field(default_factory=ProductRequestSchema)
    consents: ConsentsSchema = Field(default_factory=ConsentsSchema)
    channel: Channel = Channel.WEB


# =============================================================================
# Partial updates
# =============================================================================

class PersonalDataPatchSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None
    email: Optional[str] = Field(None, max_length=254, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, min_length=7, max_length=20)
    address: Optional[AddressSchema] = None

    @field_validator("first_name", "last_name", "birth_date", "email", "phone", "address")
    @classmethod
    def reject_null(cls, v):
        """Required personal fields can be omitted from a patch but not cleared."""
        if v is None:
            raise ValueError("field cannot be null")
        return v


class ConsentsPatchSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    accepts_terms: Optional[bool] = None
    accepts_data_processing: Optional[bool] = None
    authorizes_bureau_query: Optional[bool] = None

    @field_validator("accepts_terms", "accepts_data_processing", "authorizes_bureau_query")
    @classmethod
    def reject_null(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("consent cannot be null")
        return v


class UpdateApplicationSchema(BaseModel):
    """
    Schema for PATCH /v1/applications/{id} request body.

    Only the fields sent are changed. Identity documents cannot be edited.
    """

    personal_data: Optional[PersonalDataPatchSchema] = None
    employment_data: Optional[EmploymentDataSchema] = None
    product_request: Optional[ProductRequestSchema] = None
    consents: Optional[ConsentsPatchSchema] = None


# =============================================================================
# Responses
# =============================================================================

class ConsentsResponseSchema(ConsentsSchema):
    terms_accepted_at: Optional[datetime] = None


class ValidationStateSchema(BaseModel):
    identity_validated: bool
    bureaus_queried: bool
    credit_score: Optional[int] = None
    risk_level: Optional[RiskLevel] = None
    current_debt: Optional[int] = None


class CoreErrorSchema(BaseModel):
    code: str
    message: str
    at: datetime


class CoreIntegrationSchema(BaseModel):
    sent: bool
    sent_at: Optional[datetime] = None
    core_client_id: Optional[str] = None
    core_application_id: Optional[str] = None
    core_status: Optional[str] = None
    attempt_count: int = Field(..., ge=0)
    last_error: Optional[CoreErrorSchema] = None


class StatusHistoryEntrySchema(BaseModel):
    status: ApplicationStatus
    timestamp: datetime
    note: Optional[str] = None


class ApplicationMetadataSchema(BaseModel):
    created_at: datetime
    updated_at: datetime
    channel: Channel
    origin_ip: Optional[str] = None
    user_agent: Optional[str] = None


class ApplicationResponseSchema(BaseModel):
    """Schema for application response bodies."""

    id: str = Field(..., description="Application ID")
    application_number: str = Field(..., examples=["APP-20240115-00042"])
    status: ApplicationStatus
    personal_data: PersonalDataSchema
    employment_data: EmploymentDataSchema
    product_request: ProductRequestSchema
    consents: ConsentsResponseSchema
    validation_state: ValidationStateSchema
    core_integration: CoreIntegrationSchema
    status_history: List[StatusHistoryEntrySchema]
    metadata: ApplicationMetadataSchema


class IntegrationSummarySchema(BaseModel):
    validated: bool
    credit_score: Optional[int] = None
    core_application_id: Optional[str] = None


class SubmissionResponseSchema(BaseModel):
    """Schema for POST /v1/applications/{id}/submit response body."""

    id: str
    application_number: str
    status: ApplicationStatus
    integration: IntegrationSummarySchema
