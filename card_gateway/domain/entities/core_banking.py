"""Results exchanged with the core banking system."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .common import CardTier, DocumentType, Franchise, RiskLevel


@dataclass(frozen=True)
class ClientValidationResult:
    """Whether the applicant is known to the bank."""

    exists: bool
    is_current_client: bool
    core_client_id: Optional[str] = None


@dataclass(frozen=True)
class BureauReport:
    """Consolidated answer from the credit risk bureaus."""

    credit_score: int
    current_debt: int
    risk_level: RiskLevel
    available_limit: Optional[int] = None
    active_obligations: Optional[int] = None
    delinquencies_12mo: Optional[int] = None
    queried_at: Optional[datetime] = None

    @property
    def debt_percentage(self) -> Optional[int]:
        """Debt as a share of debt plus available credit, in whole percent."""
        if not self.available_limit:
            return None
        return round(self.current_debt / (self.current_debt + self.available_limit) * 100)


@dataclass(frozen=True)
class CoreRegistrationRequest:
    """Payload sent to the core to register an application."""

    application_number: str
    document_type: DocumentType
    document_number: str
    first_name: str
    last_name: str
    email: str
    phone: str
    monthly_income: Optional[int]
    card_tier: Optional[CardTier]
    requested_limit: Optional[int]
    franchise: Optional[Franchise]
    credit_score: Optional[int]
    core_client_id: Optional[str] = None
    identity_validated: bool = False
    risk_level: Optional[RiskLevel] = None

    def to_payload(self) -> dict:
        return {
            "application_number": self.application_number,
            "client": {
                "document_type": self.document_type.value,
                "document_number": self.document_number,
                "first_name": self.first_name,
                "last_name": self.last_name,
                "email": self.email,
                "phone": self.phone,
                "core_client_id": self.core_client_id,
            },
            "product": {
                "card_tier": self.card_tier.value if self.card_tier else None,
                "requested_limit": self.requested_limit,
                "franchise": self.franchise.value if self.franchise else None,
            },
            "financial": {
                "monthly_income": self.monthly_income,
                "credit_score": self.credit_score,
            },
            "validations": {
                "identity_validated": self.identity_validated,
                "credit_score": self.credit_score,
                "risk_level": self.risk_level.value if self.risk_level else None,
            },
        }


@dataclass(frozen=True)
class CoreRegistrationResult:
    core_application_id: str
    core_status: str
    message: Optional[str] = None


@dataclass(frozen=True)
class CoreApplicationStatus:
    """Status of a registered application as the core reports it."""

    core_application_id: str
    status: str
    approved_limit: Optional[int] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None
