"""Health check routes."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from webpdf import __version__
from webpdf.modules.render.router import get_render_service
from webpdf.modules.render.service import RenderService
from webpdf.shared.errors import UnavailableError

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Service status and render capacity."""
    status: str = "healthy"
    version: str
    active_renders: int
    max_concurrent: int
    browser_ready: bool | None = None
    browser_error: str | None = None


@router.get("", response_model=HealthResponse)
async def health_check(
    service: RenderService = Depends(get_render_service),
) -> HealthResponse:
    """Liveness check with current render load."""
    return HealthResponse(
        status="degraded" if service.browser_ready is False else "healthy",
        version=__version__,
        active_renders=service.active_renders,
        max_concurrent=service.max_concurrent,
        browser_ready=service.browser_ready,
        browser_error=service.browser_error,
    )


@router.get("/ready")
async def readiness_check(
    service: RenderService = Depends(get_render_service),
) -> dict[str, str]:
    """
    Readiness check for container orchestration.

    Fails with 503 if the startup browser self-check failed. A skipped
    self-check counts as ready.
    """
    if service.browser_ready is False:
        raise UnavailableError(
            "Browser is not available",
            details={"browser_error": service.browser_error},
        )
    return {"status": "ready"}
