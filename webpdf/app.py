"""
Application factory - builds FastAPI app with all middleware and routes.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from webpdf import __version__
from webpdf.config import Settings, get_settings
from webpdf.modules.health.router import router as health_router
from webpdf.modules.render.browser import BrowserDriver
from webpdf.modules.render.router import router as render_router
from webpdf.modules.render.service import RenderService
from webpdf.shared.errors import WebPdfError
from webpdf.shared.ids import generate_request_id
from webpdf.shared.logging import (
    clear_request_context,
    get_logger,
    get_request_context,
    set_request_context,
    setup_logging,
)
from webpdf.shared.types import RequestContext

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    settings: Settings = app.state.settings
    service: RenderService = app.state.render_service

    setup_logging(settings.log_level)
    logger.info("Starting WebPDF...")

    if settings.browser_check_on_startup:
        if not await service.check_browser():
            logger.error("PDF rendering will not work until the browser is fixed.")

    logger.info(f"WebPDF started (max {service.max_concurrent} concurrent renders)")

    yield

    logger.info("WebPDF stopped")


def build_app(
    settings: Settings | None = None,
    driver: BrowserDriver | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)
        driver: Optional browser driver override (useful for testing)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="WebPDF",
        description="Render web pages to downloadable PDF documents",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.render_service = RenderService(settings=settings, driver=driver)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

    # Request context middleware
    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next: Any) -> Response:
        """Attach request context for logging."""
        ctx = RequestContext(
            request_id=request.headers.get("X-Request-ID") or generate_request_id(),
            client_host=request.client.host if request.client else None,
        )
        set_request_context(ctx)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = ctx.request_id
            return response
        finally:
            clear_request_context()

    @app.exception_handler(WebPdfError)
    async def webpdf_error_handler(request: Request, exc: WebPdfError) -> JSONResponse:
        """Handle WebPdfError with consistent JSON response."""
        ctx = get_request_context()

        return JSONResponse(
            status_code=exc.http_status,
            content={
                "error": exc.to_dict(),
                "request_id": ctx.request_id if ctx else None,
            },
        )

    # Register routers
    app.include_router(health_router)
    app.include_router(render_router)

    # Root endpoint
    @app.get("/")
    async def root() -> dict[str, str]:
        return {"service": "WebPDF", "version": __version__}

    return app
