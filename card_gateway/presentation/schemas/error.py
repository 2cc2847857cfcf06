"""Pydantic schema for API error responses."""

from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorResponseSchema(BaseModel):
    """Standard error response format for all API errors."""
    error: str = Field(
        ...,
        description="Error code",
        examples=["NOT_FOUND"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Application not found: 550e8400-e29b-41d4-a716-446655440000"],
    )
    request_id: str | None = Field(
        None,
        description="Request ID for tracing",
    )
    details: Optional[List[str]] = Field(
        None,
        description="Individual rule violations, when there are several",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "VALIDATION_FAILED",
                    "message": "Applicant must be at least 18 years old; Minimum monthly income is 1500000",
                    "request_id": "abc123",
                    "details": [
                        "Applicant must be at least 18 years old",
                        "Minimum monthly income is 1500000",
                    ],
                }
            ]
        }
    }
