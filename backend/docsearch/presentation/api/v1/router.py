"""V1 API router — every endpoint is served under ``/api/v1``."""

from fastapi import APIRouter

from docsearch.presentation.api.v1.endpoints.health import router as health_router
from docsearch.presentation.api.v1.search_controller import router as search_router
from docsearch.presentation.api.v1.download_controller import router as download_router

router = APIRouter(prefix="/api/v1")
router.include_router(health_router)
router.include_router(search_router)
router.include_router(download_router)
