"""Data transfer objects for application management operations."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from card_gateway.domain.entities import (
    Channel,
    Consents,
    CreditCardApplication,
    EmploymentData,
    PersonalData,
    ProductRequest,
)


@dataclass(frozen=True)
class CreateApplicationRequest:
    """Input data for starting a new application."""
    personal_data: PersonalData
    employment_data: EmploymentData = field(default_factory=EmploymentData)
    product_request: ProductRequest = field(default_factory=ProductRequest)
    consents: Consents = field(default_factory=Consents)
    channel: Channel = Channel.WEB
    origin_ip: Optional[str] = None
    user_agent: Optional[str] = None

    def validate(self) -> List[str]:
        errors = []

        if not self.personal_data.document_number.strip():
            errors.append("document_number is required")

        income = self.employment_data.monthly_income
        if income is not None and income < 0:
            errors.append("monthly_income cannot be negative")

        limit = self.product_request.requested_limit
        if limit is not None and limit <= 0:
            errors.append("requested_limit must be positive")

        return errors


@dataclass(frozen=True)
class UpdateApplicationRequest:
    """
    Partial update of a draft application.

    Each section is a patch: only the keys present are changed.
    """
    personal_data: Optional[Mapping[str, Any]] = None
    employment_data: Optional[Mapping[str, Any]] = None
    product_request: Optional[Mapping[str, Any]] = None
    consents: Optional[Mapping[str, Any]] = None

    @property
    def touches_rules(self) -> bool:
        """Whether the patch changes inputs of the business rules."""
        return bool(self.employment_data or self.product_request) or bool(
            self.personal_data and "birth_date" in self.personal_data
        )

    def is_empty(self) -> bool:
        return not any(
            (self.personal_data, self.employment_data, self.product_request, self.consents)
        )


@dataclass(frozen=True)
class ApplicationResponse:
    """Full view of an application returned to callers."""

    id: str
    application_number: str
    status: str
    personal_data: Dict[str, Any]
    employment_data: Dict[str, Any]
    product_request: Dict[str, Any]
    consents: Dict[str, Any]
    validation_state: Dict[str, Any]
    core_integration: Dict[str, Any]
    status_history: List[Dict[str, Any]]
    metadata: Dict[str, Any]

    @classmethod
    def from_entity(cls, application: CreditCardApplication) -> "ApplicationResponse":
        return cls(**application.to_dict())
