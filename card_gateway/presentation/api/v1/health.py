"""Health check endpoint for service monitoring."""

from fastapi import APIRouter
from pydantic import BaseModel

from card_gateway import __version__
from card_gateway.core.config import settings

health_router = APIRouter()


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    core_banking_mode: str


@health_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Returns the health status of the service.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        core_banking_mode=settings.core_banking_mode,
    )
