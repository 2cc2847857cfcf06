"""
Automatic decision rules applied after the risk bureau query.

Rules are evaluated in priority order and the first match wins:
1. Score below 500: reject
2. Score in [500, 600) with debt above 50% of income: manual review
3. Score above 750 with debt below 30% of income: approve
4. Score above 600 with debt below 50% of income: manual review (pre-approved)
5. Anything else: manual review

The functions here never mutate anything. Applying the action to the
application is the caller's job.
"""

from typing import Optional

from .models import Decision, DecisionAction, DecisionOutcome, ValidationFailed
from .settings import RulesSettings, rules_settings


def calculate_debt_ratio(debt: int, income: int) -> float:
    """Debt as a fraction of monthly income; infinite when income is not positive."""
    if income <= 0:
        return float("inf")
    return debt / income


def decide(
    score: int,
    debt: int,
    income: int,
    requested_limit: Optional[int] = None,
    settings: RulesSettings = rules_settings,
) -> Decision:
    """
    Map a credit score and debt level to an automatic decision.

    Args:
        score: Credit score reported by the bureaus
        debt: Current outstanding debt
        income: Monthly income declared on the application
        requested_limit: Requested card limit (informational)
        settings: Thresholds to apply

    Returns:
        Decision with the action, a human-readable reason and the debt ratio
    """
    ratio = calculate_debt_ratio(debt, income)

    if score < settings.reject_score_below:
        return Decision(
            action=DecisionAction.REJECT,
            reason=f"Insufficient credit score (< {settings.reject_score_below})",
            debt_ratio=ratio,
        )

    if score < settings.medium_score_ceiling and ratio > settings.medium_score_max_debt_ratio:
        return Decision(
            action=DecisionAction.MANUAL_REVIEW,
            reason=(
                "Medium score with high debt level "
                f"(> {settings.medium_score_max_debt_ratio:.0%})"
            ),
            debt_ratio=ratio,
        )

    if score > settings.auto_approve_score and ratio < settings.auto_approve_max_debt_ratio:
        return Decision(
            action=DecisionAction.APPROVE,
            reason=(
                "Excellent score with low debt level "
                f"(< {settings.auto_approve_max_debt_ratio:.0%})"
            ),
            debt_ratio=ratio,
        )

    if score > settings.pre_approve_score and ratio < settings.pre_approve_max_debt_ratio:
        return Decision(
            action=DecisionAction.MANUAL_REVIEW,
            reason="Pre-approved, requires document review",
            debt_ratio=ratio,
        )

    return Decision(
        action=DecisionAction.MANUAL_REVIEW,
        reason="Requires detailed analysis by the credit department",
        debt_ratio=ratio,
    )


def evaluate(
    score: int,
    debt: int,
    income: Optional[int],
    requested_limit: Optional[int] = None,
    settings: RulesSettings = rules_settings,
) -> DecisionOutcome:
    """
    Decide, or report why no decision can be made.

    A missing or non-positive income makes the debt ratio meaningless, so
    ValidationFailed is returned instead of a Decision.
    """
    if income is None:
        return ValidationFailed(errors=["Monthly income is required for an automatic decision"])
    if income <= 0:
        return ValidationFailed(errors=["Monthly income must be positive for an automatic decision"])
    return decide(score, debt, income, requested_limit, settings)


def explain_decision(decision: DecisionOutcome) -> str:
    """
    Generate a human-readable explanation of a decision.

    Args:
        decision: The decision (or validation failure) to explain

    Returns:
        Human-readable explanation string
    """
    if isinstance(decision, ValidationFailed):
        lines = ["Decision: NOT EVALUATED"]
        lines.extend(f"  - {error}" for error in decision.errors)
        return "\n".join(lines)

    lines = [f"Decision: {decision.action.value}", f"Reason: {decision.reason}"]
    if decision.debt_ratio == float("inf"):
        lines.append("Debt ratio: undefined (no income)")
    else:
        lines.append(f"Debt ratio: {decision.debt_ratio:.0%} of monthly income")
    return "\n".join(lines)
