"""
Business rule validation for credit card applications.

Every function is pure: it takes primitive inputs and returns a
ValidationResult listing every rule that failed. Nothing here raises for
a rule violation; callers decide how to surface the errors.
"""

from datetime import date
from typing import List, Optional

from card_gateway.domain.entities import CardTier
from .models import ValidationResult
from .settings import RulesSettings, rules_settings


def calculate_age(birth_date: date, today: Optional[date] = None) -> int:
    """
    Whole years between ``birth_date`` and ``today``.

    The calendar-year difference is reduced by one when the birthday has
    not yet come around this year, so someone turning 18 today is 18.
    """
    today = today or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def validate_age(
    birth_date: date,
    today: Optional[date] = None,
    settings: RulesSettings = rules_settings,
) -> ValidationResult:
    if calculate_age(birth_date, today) < settings.min_age:
        return ValidationResult.from_errors(
            [f"Applicant must be at least {settings.min_age} years old"]
        )
    return ValidationResult.ok()


def validate_minimum_income(
    monthly_income: int,
    settings: RulesSettings = rules_settings,
) -> ValidationResult:
    if monthly_income < settings.min_monthly_income:
        return ValidationResult.from_errors(
            [f"Minimum monthly income is {settings.min_monthly_income}"]
        )
    return ValidationResult.ok()


def validate_card_tier_requirements(
    card_tier: CardTier,
    monthly_income: int,
    settings: RulesSettings = rules_settings,
) -> ValidationResult:
    """Check the applicant earns enough for the requested card tier."""
    limits = settings.tier_limits[CardTier(card_tier)]
    if monthly_income < limits.min_income:
        return ValidationResult.from_errors(
            [f"Minimum monthly income for a {CardTier(card_tier).value} card is {limits.min_income}"]
        )
    return ValidationResult.ok()


def validate_limit_request(
    card_tier: CardTier,
    requested_limit: int,
    monthly_income: int,
    settings: RulesSettings = rules_settings,
) -> ValidationResult:
    """
    Check the requested limit against the tier cap and the income multiple.

    Both violations are reported when both apply.
    """
    errors: List[str] = []
    tier = CardTier(card_tier)
    limits = settings.tier_limits[tier]

    if limits.max_limit is not None and requested_limit > limits.max_limit:
        errors.append(f"Maximum limit for a {tier.value} card is {limits.max_limit}")

    max_by_income = monthly_income * settings.max_limit_income_ratio
    if requested_limit > max_by_income:
        errors.append(
            f"Requested limit cannot exceed {settings.max_limit_income_ratio} times "
            f"the monthly income ({max_by_income})"
        )

    return ValidationResult.from_errors(errors)


def validate_all(
    birth_date: date,
    monthly_income: Optional[int] = None,
    card_tier: Optional[CardTier] = None,
    requested_limit: Optional[int] = None,
    today: Optional[date] = None,
    settings: RulesSettings = rules_settings,
) -> ValidationResult:
    """
    Run every rule that the available inputs allow.

    Age is always checked. Income, tier and limit checks only run when the
    inputs they depend on are present. The result carries the union of
    all errors.
    """
    errors: List[str] = []

    errors.extend(validate_age(birth_date, today, settings).errors)

    if monthly_income is not None:
        errors.extend(validate_minimum_income(monthly_income, settings).errors)

    if card_tier is not None and monthly_income is not None:
        errors.extend(
            validate_card_tier_requirements(card_tier, monthly_income, settings).errors
        )

    if card_tier is not None and requested_limit is not None and monthly_income is not None:
        errors.extend(
            validate_limit_request(card_tier, requested_limit, monthly_income, settings).errors
        )

    return ValidationResult.from_errors(errors)
