"""
Data models for application rules.

Validation results accumulate every violated rule. Decision results are a
tagged union: ``Decision`` when the rules could be evaluated and
``ValidationFailed`` when the inputs did not allow it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


@dataclass(frozen=True)
class TierLimits:
    """
    Requirements attached to a card tier.

    Attributes:
        min_income: Minimum monthly income to qualify for the tier
        max_limit: Highest limit that can be requested (None = unbounded)
    """
    min_income: int
    max_limit: Optional[int]


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True, errors=[])

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationResult":
        return cls(is_valid=not errors, errors=list(errors))


class DecisionAction(str, Enum):
    """Automatic outcome of the risk bureau evaluation."""
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    MANUAL_REVIEW = "MANUAL_REVIEW"


@dataclass(frozen=True)
class Decision:
    """
    Automatic decision for an application.

    Attributes:
        action: What should happen to the application
        reason: Human-readable reason, recorded in the status history
        debt_ratio: Current debt as a fraction of monthly income
            (``inf`` when income is not positive)
    """
    action: DecisionAction
    reason: str
    debt_ratio: float

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "action": self.action.value,
            "reason": self.reason,
            "debt_ratio": round(self.debt_ratio, 4) if self.debt_ratio != float("inf") else None,
        }


@dataclass(frozen=True)
class ValidationFailed:
    """The decision rules could not be evaluated with the given inputs."""
    errors: List[str]

    @property
    def reason(self) -> str:
        return "; ".join(self.errors)


DecisionOutcome = Union[Decision, ValidationFailed]
