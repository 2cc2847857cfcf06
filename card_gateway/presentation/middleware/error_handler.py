"""Error handling middleware and exception handlers."""

from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from card_gateway.domain.exceptions import (
    ApplicationNotFoundException,
    ApplicationValidationException,
    CoreBankingAPIException,
    CoreBankingTimeoutException,
    DomainException,
    IntegrationFailedException,
    IntegrationStepException,
    InvalidApplicationDataException,
    InvalidApplicationStateException,
    InvalidTransitionException,
)
from .request_context import get_request_id

logger = structlog.get_logger(__name__)


def _error_response(
    status_code: int,
    exc: DomainException,
    message: Optional[str] = None,
    details: Optional[List[str]] = None,
) -> JSONResponse:
    content = {
        "error": exc.code,
        "message": message or exc.message,
        "request_id": get_request_id(),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def error_handler_middleware(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI app.

    Maps domain exceptions to appropriate HTTP responses.
    """

    @app.exception_handler(ApplicationNotFoundException)
    async def not_found_handler(
        request: Request,
        exc: ApplicationNotFoundException,
    ) -> JSONResponse:
        """Handle application not found errors."""
        return _error_response(404, exc)

    @app.exception_handler(InvalidApplicationStateException)
    async def invalid_state_handler(
        request: Request,
        exc: InvalidApplicationStateException,
    ) -> JSONResponse:
        """Handle use case preconditions on the application status."""
        return _error_response(409, exc)

    @app.exception_handler(InvalidTransitionException)
    async def invalid_transition_handler(
        request: Request,
        exc: InvalidTransitionException,
    ) -> JSONResponse:
        """Handle guarded transitions refused by the entity."""
        return _error_response(409, exc)

    @app.exception_handler(ApplicationValidationException)
    async def validation_handler(
        request: Request,
        exc: ApplicationValidationException,
    ) -> JSONResponse:
        """Handle business rule violations."""
        return _error_response(400, exc, details=exc.errors)

    @app.exception_handler(InvalidApplicationDataException)
    async def invalid_data_handler(
        request: Request,
        exc: InvalidApplicationDataException,
    ) -> JSONResponse:
        """Handle patches naming unknown fields."""
        return _error_response(400, exc, details=list(exc.fields))

    @app.exception_handler(IntegrationFailedException)
    async def integration_failed_handler(
        request: Request,
        exc: IntegrationFailedException,
    ) -> JSONResponse:
        """Handle submissions reverted to draft after a core failure."""
        logger.error(
            "integration_failed",
            application_id=exc.application_id,
            message=exc.message,
        )
        return _error_response(502, exc)

    @app.exception_handler(IntegrationStepException)
    async def integration_step_handler(
        request: Request,
        exc: IntegrationStepException,
    ) -> JSONResponse:
        """Handle a single failed integration step."""
        logger.error(
            "integration_step_error",
            step=exc.step,
            code=exc.code,
            message=exc.message,
        )
        return _error_response(502, exc)

    @app.exception_handler(CoreBankingTimeoutException)
    async def core_timeout_handler(
        request: Request,
        exc: CoreBankingTimeoutException,
    ) -> JSONResponse:
        """Handle core banking timeout errors."""
        logger.error("core_banking_timeout", operation=exc.operation)
        return _error_response(
            503,
            exc,
            message="Service temporarily unavailable. Please try again.",
        )

    @app.exception_handler(CoreBankingAPIException)
    async def core_error_handler(
        request: Request,
        exc: CoreBankingAPIException,
    ) -> JSONResponse:
        """Handle core banking errors."""
        logger.error(
            "core_banking_error",
            message=exc.message,
            status_code=exc.status_code,
        )
        return _error_response(
            502,
            exc,
            message="Unable to reach the core banking system. Please try again later.",
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle generic domain exceptions."""
        logger.warning(
            "domain_exception",
            code=exc.code,
            message=exc.message,
        )
        return _error_response(400, exc)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred.",
                "request_id": get_request_id(),
            },
        )
