"""
Business rule settings for credit card applications.

All thresholds used by the validation and decision rules live here so they
can be tuned per environment without code changes.

Environment variables use the RULES_ prefix:
    RULES_MIN_AGE=18
    RULES_MIN_MONTHLY_INCOME=1500000
    RULES_AUTO_APPROVE_SCORE=750

Usage:
    from card_gateway.service.rules.settings import rules_settings

    # Use default settings (loaded from env)
    threshold = rules_settings.reject_score_below

    # Or create custom settings for testing
    custom = RulesSettings(min_age=21)
"""

from functools import lru_cache
from typing import Dict, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from card_gateway.domain.entities import CardTier
from .models import TierLimits


class RulesSettings(BaseSettings):
    """
    Configurable thresholds for application validation and automatic decisions.

    Monetary values share the currency-agnostic unit of the application
    amounts. Debt ratios are fractions of monthly income (0.5 = 50%).
    """

    model_config = SettingsConfigDict(
        env_prefix="RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Applicant Eligibility ===
    min_age: int = Field(
        default=18,
        ge=0,
        description="Minimum applicant age in whole years",
    )
    min_monthly_income: int = Field(
        default=1_500_000,
        ge=0,
        description="Minimum monthly income for any card (inclusive)",
    )
    max_limit_income_ratio: int = Field(
        default=3,
        gt=0,
        description="Requested limit may not exceed this multiple of monthly income",
    )

    # === Card Tier Requirements ===
    clasica_min_income: int = Field(default=1_500_000, ge=0)
    clasica_max_limit: int = Field(default=5_000_000, gt=0)
    oro_min_income: int = Field(default=3_000_000, ge=0)
    oro_max_limit: int = Field(default=15_000_000, gt=0)
    platinum_min_income: int = Field(default=8_000_000, ge=0)
    platinum_max_limit: int = Field(default=40_000_000, gt=0)
    black_min_income: int = Field(default=15_000_000, ge=0)
    black_max_limit: Optional[int] = Field(
        default=None,
        description="Maximum limit for BLACK cards; unset means unbounded",
    )

    # === Automatic Decision ===
    reject_score_below: int = Field(
        default=500,
        description="Scores below this are rejected outright",
    )
    medium_score_ceiling: int = Field(
        default=600,
        description="Upper bound (exclusive) of the medium score band",
    )
    medium_score_max_debt_ratio: float = Field(
        default=0.50,
        ge=0.0,
        description="Medium-band scores above this debt ratio go to manual review",
    )
    auto_approve_score: int = Field(
        default=750,
        description="Scores above this may be approved automatically",
    )
    auto_approve_max_debt_ratio: float = Field(
        default=0.30,
        ge=0.0,
        description="Debt ratio must be below this for automatic approval",
    )
    pre_approve_score: int = Field(
        default=600,
        description="Scores above this with moderate debt are pre-approved",
    )
    pre_approve_max_debt_ratio: float = Field(
        default=0.50,
        ge=0.0,
        description="Debt ratio must be below this for pre-approval",
    )

    @model_validator(mode="after")
    def validate_score_bands(self) -> "RulesSettings":
        """Score thresholds must be ordered from rejection to approval."""
        if not (
            self.reject_score_below
            <= self.medium_score_ceiling
            <= self.auto_approve_score
        ):
            raise ValueError(
                "Expected reject_score_below <= medium_score_ceiling <= auto_approve_score"
            )
        return self

    @property
    def tier_limits(self) -> Dict[CardTier, TierLimits]:
        """Income floor and limit cap per card tier."""
        return {
            CardTier.CLASICA: TierLimits(self.clasica_min_income, self.clasica_max_limit),
            CardTier.ORO: TierLimits(self.oro_min_income, self.oro_max_limit),
            CardTier.PLATINUM: TierLimits(self.platinum_min_income, self.platinum_max_limit),
            CardTier.BLACK: TierLimits(self.black_min_income, self.black_max_limit),
        }


@lru_cache
def get_rules_settings() -> RulesSettings:
    """Get cached rules settings instance."""
    return RulesSettings()


rules_settings = get_rules_settings()
