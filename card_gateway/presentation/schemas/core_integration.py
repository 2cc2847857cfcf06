"""Core integration Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from card_gateway.domain.entities import RiskLevel


class ClientValidationResponseSchema(BaseModel):
    exists: bool
    is_current_client: bool
    core_client_id: Optional[str] = None


class DecisionSchema(BaseModel):
    """Automatic decision produced by the bureau query."""

    action: Optional[str] = Field(
        None,
        description="APPROVE, REJECT or MANUAL_REVIEW; absent when not evaluated",
    )
    reason: str
    debt_ratio: Optional[float] = Field(
        None,
        description="Debt as a fraction of monthly income",
    )
    errors: List[str] = Field(default_factory=list)


class BureauQueryResponseSchema(BaseModel):
    credit_score: int
    current_debt: int
    risk_level: RiskLevel
    available_limit: Optional[int] = None
    debt_percentage: Optional[int] = None
    active_obligations: Optional[int] = None
    delinquencies_12mo: Optional[int] = None
    queried_at: Optional[datetime] = None
    evaluated: bool
    decision: DecisionSchema


class CoreSyncResponseSchema(BaseModel):
    core_application_id: str
    core_status: str
    message: Optional[str] = None


class CoreStatusResponseSchema(BaseModel):
    core_application_id: str
    status: str
    approved_limit: Optional[int] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None
