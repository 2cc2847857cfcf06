from fastapi import APIRouter

from .applications import applications_router
from .core_integration import core_integration_router
from .health import health_router

router = APIRouter()

router.include_router(health_router, tags=["Health"])
router.include_router(applications_router, tags=["Applications"])
router.include_router(core_integration_router, tags=["Core Integration"])
