"""Data transfer objects for the submission and integration use cases."""

from dataclasses import dataclass
from typing import Optional

from card_gateway.domain.entities import BureauReport, CreditCardApplication
from card_gateway.service.rules import DecisionOutcome, ValidationFailed


@dataclass(frozen=True)
class IntegrationSummary:
    """Integration outcome included in submission responses."""

    validated: bool
    credit_score: Optional[int]
    core_application_id: Optional[str]


@dataclass(frozen=True)
class SubmissionSummary:
    """Projection of an application after a successful submission."""

    id: str
    application_number: str
    status: str
    integration: IntegrationSummary

    @classmethod
    def from_entity(cls, application: CreditCardApplication) -> "SubmissionSummary":
        return cls(
            id=application.id,
            application_number=application.application_number,
            status=application.status.value,
            integration=IntegrationSummary(
                validated=application.validation_state.identity_validated,
                credit_score=application.validation_state.credit_score,
                core_application_id=application.core_integration.core_application_id,
            ),
        )


@dataclass(frozen=True)
class BureauQueryOutcome:
    """Bureau report together with the automatic decision it produced."""

    report: BureauReport
    decision: DecisionOutcome

    @property
    def evaluated(self) -> bool:
        return not isinstance(self.decision, ValidationFailed)
