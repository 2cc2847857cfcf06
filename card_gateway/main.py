"""
Card Gateway - Main Application Entry Point

A credit card application service that takes applications from draft
through core banking validation and an automatic credit decision.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from card_gateway import __version__
from card_gateway.core.config import settings
from card_gateway.core.logging import setup_logging
from card_gateway.core.metrics import get_metrics, get_metrics_content_type
from card_gateway.infrastructure.database import db_manager
from card_gateway.presentation.api import api_router
from card_gateway.presentation.middleware import (
    LoggingMiddleware,
    RequestContextMiddleware,
    error_handler_middleware,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Set up logging
    - Initialize database connection pool
    - Create missing tables when DB_CREATE_TABLES is set
    - Clean up on shutdown
    """
    setup_logging()
    db_manager.init()
    if settings.db_create_tables:
        await db_manager.create_all()

    logger = structlog.get_logger(__name__)
    logger.info(
        "application_started",
        version=__version__,
        core_banking_mode=settings.core_banking_mode,
    )

    yield

    await db_manager.close()
    logger.info("application_stopped")


app = FastAPI(
    title="Card Gateway",
    description="Credit Card Application Service",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestContextMiddleware)

error_handler_middleware(app)

app.include_router(api_router)


@app.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    if not settings.metrics_enabled:
        return Response(status_code=404)
    return Response(
        content=get_metrics(),
        media_type=get_metrics_content_type(),
    )


@app.get("/", include_in_schema=False)
async def root():
    """Redirect to API documentation."""

    return RedirectResponse(url="/docs")


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "card_gateway.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
