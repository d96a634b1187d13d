"""Health check endpoint — unauthenticated, reports whether search services are up."""

from fastapi import APIRouter, Request

from docsearch.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Report version, environment and whether the service container is built."""
    settings = get_settings()
    ready = getattr(request.app.state, "container", None) is not None
    return {
        "status": "healthy",
        "services": "ready" if ready else "starting",
        "version": settings.app_version,
        "environment": settings.app_env,
    }
