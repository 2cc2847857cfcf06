"""
Domain Entities
"""

from .common import (
    CardTier,
    Channel,
    ContractType,
    CoreStatus,
    DocumentType,
    EmploymentStatus,
    Franchise,
    Gender,
    RiskLevel,
)
from .application import (
    Address,
    ApplicationMetadata,
    ApplicationStatus,
    Consents,
    CoreError,
    CoreIntegration,
    CreditCardApplication,
    EmploymentData,
    PersonalData,
    ProductRequest,
    StatusHistoryEntry,
    TERMINAL_STATUSES,
    ValidationState,
    utcnow,
)
from .core_banking import (
    BureauReport,
    ClientValidationResult,
    CoreApplicationStatus,
    CoreRegistrationRequest,
    CoreRegistrationResult,
)

__all__ = [
    "CardTier",
    "Channel",
    "ContractType",
    "CoreStatus",
    "DocumentType",
    "EmploymentStatus",
    "Franchise",
    "Gender",
    "RiskLevel",
    "Address",
    "ApplicationMetadata",
    "ApplicationStatus",
    "Consents",
    "CoreError",
    "CoreIntegration",
    "CreditCardApplication",
    "EmploymentData",
    "PersonalData",
    "ProductRequest",
    "StatusHistoryEntry",
    "TERMINAL_STATUSES",
    "ValidationState",
    "utcnow",
    "BureauReport",
    "ClientValidationResult",
    "CoreApplicationStatus",
    "CoreRegistrationRequest",
    "CoreRegistrationResult",
]
