"""Credit card application aggregate and its value objects."""

from dataclasses import dataclass, fields, is_dataclass, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from card_gateway.domain.exceptions import (
    InvalidApplicationDataException,
    InvalidTransitionException,
)
from .common import (
    CardTier,
    Channel,
    ContractType,
    DocumentType,
    EmploymentStatus,
    Franchise,
    Gender,
    RiskLevel,
)

E = TypeVar("E", bound=Enum)
V = TypeVar("V")


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def _serialize(value: Any) -> Any:
    """Convert value objects into JSON-friendly primitives."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _serialize(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Mapping):
        return {key: _serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    return value


def _enum(enum_cls: Type[E], value: Any) -> Optional[E]:
    if value is None:
        return None
    return enum_cls(value)


def _datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class ApplicationStatus(str, Enum):
    """Lifecycle status of a credit card application."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    IN_REVIEW = "in_review"
    PENDING_VALIDATION = "pending_validation"
    APPROVED = "approved"
    REJECTED = "rejected"
    ABANDONED = "abandoned"


TERMINAL_STATUSES = frozenset({ApplicationStatus.APPROVED, ApplicationStatus.REJECTED})


# =============================================================================
# Value Objects
# =============================================================================

@dataclass(frozen=True)
class Address:
    street: str
    city: str
    state: str
    postal_code: Optional[str] = None

    def to_dict(self) -> dict:
        return _serialize(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Address":
        return cls(
            street=data["street"],
            city=data["city"],
            state=data["state"],
            postal_code=data.get("postal_code"),
        )


@dataclass(frozen=True)
class PersonalData:
    """Applicant identity and contact details."""

    first_name: str
    last_name: str
    document_type: DocumentType
    document_number: str
    birth_date: date
    email: str
    phone: str
    address: Address
    gender: Optional[Gender] = None

    def to_dict(self) -> dict:
        return _serialize(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PersonalData":
        address = data["address"]
        return cls(
            first_name=data["first_name"],
            last_name=data["last_name"],
            document_type=DocumentType(data["document_type"]),
            document_number=data["document_number"],
            birth_date=_date(data["birth_date"]),
            email=data["email"],
            phone=data["phone"],
            address=address if isinstance(address, Address) else Address.from_dict(address),
            gender=_enum(Gender, data.get("gender")),
        )


@dataclass(frozen=True)
class EmploymentData:
    employment_status: Optional[EmploymentStatus] = None
    contract_type: Optional[ContractType] = None
    company_name: Optional[str] = None
    job_title: Optional[str] = None
    months_employed: Optional[int] = None
    monthly_income: Optional[int] = None

    def to_dict(self) -> dict:
        return _serialize(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmploymentData":
        return cls(
            employment_status=_enum(EmploymentStatus, data.get("employment_status")),
            contract_type=_enum(ContractType, data.get("contract_type")),
            company_name=data.get("company_name"),
            job_title=data.get("job_title"),
            months_employed=data.get("months_employed"),
            monthly_income=data.get("monthly_income"),
        )


@dataclass(frozen=True)
class ProductRequest:
    card_tier: Optional[CardTier] = None
    requested_limit: Optional[int] = None
    franchise: Optional[Franchise] = None
    additional_insurance: Optional[bool] = None

    def to_dict(self) -> dict:
        return _serialize(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProductRequest":
        return cls(
            card_tier=_enum(CardTier, data.get("card_tier")),
            requested_limit=data.get("requested_limit"),
            franchise=_enum(Franchise, data.get("franchise")),
            additional_insurance=data.get("additional_insurance"),
        )


@dataclass(frozen=True)
class Consents:
    """The three authorizations an applicant must grant before submitting."""

    accepts_terms: bool = False
    accepts_data_processing: bool = False
    authorizes_bureau_query: bool = False
    terms_accepted_at: Optional[datetime] = None

    @property
    def all_granted(self) -> bool:
        return (
            self.accepts_terms
            and self.accepts_data_processing
            and self.authorizes_bureau_query
        )

    def to_dict(self) -> dict:
        return _serialize(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Consents":
        return cls(
            accepts_terms=bool(data.get("accepts_terms", False)),
            accepts_data_processing=bool(data.get("accepts_data_processing", False)),
            authorizes_bureau_query=bool(data.get("authorizes_bureau_query", False)),
            terms_accepted_at=_datetime(data.get("terms_accepted_at")),
        )


@dataclass(frozen=True)
class ValidationState:
    """Results of identity and risk bureau checks. Written by the integration."""

    identity_validated: bool = False
    bureaus_queried: bool = False
    credit_score: Optional[int] = None
    risk_level: Optional[RiskLevel] = None
    current_debt: Optional[int] = None

    def to_dict(self) -> dict:
        return _serialize(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ValidationState":
        return cls(
            identity_validated=bool(data.get("identity_validated", False)),
            bureaus_queried=bool(data.get("bureaus_queried", False)),
            credit_score=data.get("credit_score"),
            risk_level=_enum(RiskLevel, data.get("risk_level")),
            current_debt=data.get("current_debt"),
        )


@dataclass(frozen=True)
class CoreError:
    code: str
    message: str
    at: datetime

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CoreError":
        return cls(code=data["code"], message=data["message"], at=_datetime(data["at"]))


@dataclass(frozen=True)
class CoreIntegration:
    """
    Correlation with the core banking system and its failure history.

    attempt_count grows on every registration attempt and every recorded
    error; it is never reset.
    """

    sent: bool = False
    sent_at: Optional[datetime] = None
    core_client_id: Optional[str] = None
    core_application_id: Optional[str] = None
    core_status: Optional[str] = None
    attempt_count: int = 0
    last_error: Optional[CoreError] = None

    def to_dict(self) -> dict:
        return _serialize(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CoreIntegration":
        last_error = data.get("last_error")
        return cls(
            sent=bool(data.get("sent", False)),
            sent_at=_datetime(data.get("sent_at")),
            core_client_id=data.get("core_client_id"),
            core_application_id=data.get("core_application_id"),
            core_status=data.get("core_status"),
            attempt_count=int(data.get("attempt_count", 0)),
            last_error=CoreError.from_dict(last_error) if last_error else None,
        )


@dataclass(frozen=True)
class StatusHistoryEntry:
    status: ApplicationStatus
    timestamp: datetime
    note: Optional[str] = None

    def to_dict(self) -> dict:
        return _serialize(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StatusHistoryEntry":
        return cls(
            status=ApplicationStatus(data["status"]),
            timestamp=_datetime(data["timestamp"]),
            note=data.get("note"),
        )


@dataclass(frozen=True)
class ApplicationMetadata:
    created_at: datetime
    updated_at: datetime
    channel: Channel = Channel.WEB
    origin_ip: Optional[str] = None
    user_agent: Optional[str] = None

    def to_dict(self) -> dict:
        return _serialize(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ApplicationMetadata":
        return cls(
            created_at=_datetime(data["created_at"]),
            updated_at=_datetime(data["updated_at"]),
            channel=Channel(data.get("channel", Channel.WEB.value)),
            origin_ip=data.get("origin_ip"),
            user_agent=data.get("user_agent"),
        )


def _merge_patch(section: str, current: V, patch: Mapping[str, Any]) -> V:
    """
    Shallow-merge ``patch`` into a fresh copy of a value object.

    Top-level keys replace the current values; nested objects such as the
    address are replaced as a whole. The current object is left untouched.
    """
    allowed = {f.name for f in fields(current)}
    unknown = [key for key in patch if key not in allowed]
    if unknown:
        raise InvalidApplicationDataException(section, unknown)

    merged = {**_serialize(current), **_serialize(dict(patch))}
    return type(current).from_dict(merged)


# =============================================================================
# Aggregate Root
# =============================================================================

class CreditCardApplication:
    """
    A credit card application tracked through its review lifecycle.

    Status only changes through the transition methods below, each of
    which appends to the status history. Value objects are immutable;
    mutators swap them for updated copies.
    """

    def __init__(
        self,
        *,
        application_number: str,
        personal_data: PersonalData,
        status: ApplicationStatus = ApplicationStatus.DRAFT,
        employment_data: Optional[EmploymentData] = None,
        product_request: Optional[ProductRequest] = None,
        consents: Optional[Consents] = None,
        validation_state: Optional[ValidationState] = None,
        core_integration: Optional[CoreIntegration] = None,
        status_history: Optional[List[StatusHistoryEntry]] = None,
        metadata: Optional[ApplicationMetadata] = None,
        id: Optional[str] = None,
    ):
        now = utcnow()
        self._id = id
        self._application_number = application_number
        self._status = status
        self._personal_data = personal_data
        self._employment_data = employment_data or EmploymentData()
        self._product_request = product_request or ProductRequest()
        self._consents = consents or Consents()
        self._validation_state = validation_state or ValidationState()
        self._core_integration = core_integration or CoreIntegration()
        self._status_history = list(status_history) if status_history else [
            StatusHistoryEntry(status=status, timestamp=now, note="Application created")
        ]
        self._metadata = metadata or ApplicationMetadata(created_at=now, updated_at=now)

    @classmethod
    def create(
        cls,
        application_number: str,
        personal_data: PersonalData,
        employment_data: Optional[EmploymentData] = None,
        product_request: Optional[ProductRequest] = None,
        consents: Optional[Consents] = None,
        channel: Channel = Channel.WEB,
        origin_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> "CreditCardApplication":
        """Start a new application in DRAFT with zeroed integration state."""
        now = utcnow()
        consents = consents or Consents()
        if consents.accepts_terms and consents.terms_accepted_at is None:
            consents = replace(consents, terms_accepted_at=now)

        return cls(
            application_number=application_number,
            personal_data=personal_data,
            status=ApplicationStatus.DRAFT,
            employment_data=employment_data,
            product_request=product_request,
            consents=consents,
            status_history=[
                StatusHistoryEntry(
                    status=ApplicationStatus.DRAFT,
                    timestamp=now,
                    note="Application created",
                )
            ],
            metadata=ApplicationMetadata(
                created_at=now,
                updated_at=now,
                channel=channel,
                origin_ip=origin_ip,
                user_agent=user_agent,
            ),
        )

    # ============ Accessors ============

    @property
    def id(self) -> Optional[str]:
        return self._id

    @property
    def application_number(self) -> str:
        return self._application_number

    @property
    def status(self) -> ApplicationStatus:
        return self._status

    @property
    def personal_data(self) -> PersonalData:
        return self._personal_data

    @property
    def employment_data(self) -> EmploymentData:
        return self._employment_data

    @property
    def product_request(self) -> ProductRequest:
        return self._product_request

    @property
    def consents(self) -> Consents:
        return self._consents

    @property
    def validation_state(self) -> ValidationState:
        return self._validation_state

    @property
    def core_integration(self) -> CoreIntegration:
        return self._core_integration

    @property
    def status_history(self) -> Tuple[StatusHistoryEntry, ...]:
        return tuple(self._status_history)

    @property
    def metadata(self) -> ApplicationMetadata:
        return self._metadata

    def assign_id(self, application_id: str) -> None:
        """Set the identifier on first persistence. Called by repositories."""
        if self._id is not None and self._id != application_id:
            raise ValueError(f"Application already has id {self._id}")
        self._id = application_id

    # ============ Domain Behavior ============

    def is_draft(self) -> bool:
        return self._status == ApplicationStatus.DRAFT

    def can_be_updated(self) -> bool:
        return self.is_draft()

    def has_accepted_terms(self) -> bool:
        return self._consents.all_granted

    def can_be_submitted(self) -> bool:
        return self.is_draft() and self.has_accepted_terms()

    def can_be_abandoned(self) -> bool:
        return self._status not in TERMINAL_STATUSES

    # ============ State Transitions ============

    def submit(self) -> None:
        if not self.is_draft():
            raise InvalidTransitionException(
                "submit", self._status.value, "only draft applications can be submitted"
            )
        if not self.has_accepted_terms():
            raise InvalidTransitionException(
                "submit", self._status.value, "all consents must be granted"
            )
        self._change_status(ApplicationStatus.SUBMITTED, "Application submitted for review")

    def abandon(self) -> None:
        if not self.can_be_abandoned():
            raise InvalidTransitionException(
                "abandon", self._status.value, "decided applications cannot be abandoned"
            )
        self._change_status(ApplicationStatus.ABANDONED, "Application abandoned by the applicant")

    def approve(self, reason: Optional[str] = None) -> None:
        self._change_status(ApplicationStatus.APPROVED, reason or "Application approved")

    def reject(self, reason: Optional[str] = None) -> None:
        self._change_status(ApplicationStatus.REJECTED, reason or "Application rejected")

    def send_to_manual_review(self, reason: Optional[str] = None) -> None:
        self._change_status(ApplicationStatus.IN_REVIEW, reason or "Application sent to manual review")

    def revert_to_draft(self, reason: Optional[str] = None) -> None:
        """Compensating transition back to DRAFT after a failed submission."""
        self._change_status(ApplicationStatus.DRAFT, reason or "Application reverted to draft")

    def _change_status(self, new_status: ApplicationStatus, note: str) -> None:
        now = utcnow()
        self._status = new_status
        self._status_history.append(
            StatusHistoryEntry(status=new_status, timestamp=now, note=note)
        )
        self._touch(now)

    def _touch(self, now: Optional[datetime] = None) -> None:
        self._metadata = replace(self._metadata, updated_at=now or utcnow())

    # ============ Draft Updates ============

    def _require_editable(self) -> None:
        if not self.can_be_updated():
            raise InvalidTransitionException(
                "update", self._status.value, "only draft applications can be edited"
            )

    def update_personal_data(self, patch: Mapping[str, Any]) -> None:
        self._require_editable()
        self._personal_data = _merge_patch("personal_data", self._personal_data, patch)
        self._touch()

    def update_employment_data(self, patch: Mapping[str, Any]) -> None:
        self._require_editable()
        self._employment_data = _merge_patch("employment_data", self._employment_data, patch)
        self._touch()

    def update_product_request(self, patch: Mapping[str, Any]) -> None:
        self._require_editable()
        self._product_request = _merge_patch("product_request", self._product_request, patch)
        self._touch()

    def update_consents(self, patch: Mapping[str, Any]) -> None:
        self._require_editable()
        consents = _merge_patch("consents", self._consents, patch)
        if consents.accepts_terms and consents.terms_accepted_at is None:
            consents = replace(consents, terms_accepted_at=utcnow())
        self._consents = consents
        self._touch()

    # ============ Integration Updates ============

    def mark_identity_validated(
        self,
        validated: bool,
        core_client_id: Optional[str] = None,
    ) -> None:
        self._validation_state = replace(self._validation_state, identity_validated=validated)
        if core_client_id:
            self._core_integration = replace(self._core_integration, core_client_id=core_client_id)
        self._touch()

    def update_credit_score(
        self,
        score: int,
        risk_level: Optional[RiskLevel],
        current_debt: int,
    ) -> None:
        self._validation_state = replace(
            self._validation_state,
            bureaus_queried=True,
            credit_score=score,
            risk_level=risk_level,
            current_debt=current_debt,
        )
        self._touch()

    def mark_sent_to_core(self, core_application_id: str, core_status: str) -> None:
        now = utcnow()
        self._core_integration = replace(
            self._core_integration,
            sent=True,
            sent_at=now,
            core_application_id=core_application_id,
            core_status=core_status,
            attempt_count=self._core_integration.attempt_count + 1,
        )
        self._touch(now)

    def record_core_error(self, code: str, message: str) -> None:
        now = utcnow()
        self._core_integration = replace(
            self._core_integration,
            attempt_count=self._core_integration.attempt_count + 1,
            last_error=CoreError(code=code, message=message, at=now),
        )
        self._touch(now)

    def update_core_status(self, core_status: str) -> None:
        self._core_integration = replace(self._core_integration, core_status=core_status)
        self._touch()

    # ============ Serialization ============

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for persistence and API responses."""
        return {
            "id": self._id,
            "application_number": self._application_number,
            "status": self._status.value,
            "personal_data": self._personal_data.to_dict(),
            "employment_data": self._employment_data.to_dict(),
            "product_request": self._product_request.to_dict(),
            "consents": self._consents.to_dict(),
            "validation_state": self._validation_state.to_dict(),
            "core_integration": self._core_integration.to_dict(),
            "status_history": [entry.to_dict() for entry in self._status_history],
            "metadata": self._metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CreditCardApplication":
        """Rebuild an application from its ``to_dict`` representation."""
        return cls(
            id=data.get("id"),
            application_number=data["application_number"],
            status=ApplicationStatus(data["status"]),
            personal_data=PersonalData.from_dict(data["personal_data"]),
            employment_data=EmploymentData.from_dict(data.get("employment_data") or {}),
            product_request=ProductRequest.from_dict(data.get("product_request") or {}),
            consents=Consents.from_dict(data.get("consents") or {}),
            validation_state=ValidationState.from_dict(data.get("validation_state") or {}),
            core_integration=CoreIntegration.from_dict(data.get("core_integration") or {}),
            status_history=[
                StatusHistoryEntry.from_dict(entry) for entry in data["status_history"]
            ],
            metadata=ApplicationMetadata.from_dict(data["metadata"]),
        )

    def __repr__(self) -> str:
        return (
            f"CreditCardApplication(id={self._id!r}, "
            f"application_number={self._application_number!r}, "
            f"status={self._status.value!r})"
        )
