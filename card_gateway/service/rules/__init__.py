"""
Business Rules for Credit Card Applications
"""

from .models import (
    Decision,
    DecisionAction,
    DecisionOutcome,
    TierLimits,
    ValidationFailed,
    ValidationResult,
)
from .settings import RulesSettings, rules_settings
from .validation import (
    calculate_age,
    validate_age,
    validate_all,
    validate_card_tier_requirements,
    validate_limit_request,
    validate_minimum_income,
)
from .decision import calculate_debt_ratio, decide, evaluate, explain_decision

__all__ = [
    # Settings
    "RulesSettings",
    "rules_settings",
    # Models
    "Decision",
    "DecisionAction",
    "DecisionOutcome",
    "TierLimits",
    "ValidationFailed",
    "ValidationResult",
    # Validation
    "calculate_age",
    "validate_age",
    "validate_all",
    "validate_card_tier_requirements",
    "validate_limit_request",
    "validate_minimum_income",
    # Decision
    "calculate_debt_ratio",
    "decide",
    "evaluate",
    "explain_decision",
]
