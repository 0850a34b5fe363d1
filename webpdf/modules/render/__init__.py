"""Render module - webpage to PDF rendering using Playwright."""

from .router import router
from .schemas import RenderRequest, WebpageToPdfBody
from .service import RenderJob, RenderService
from .validation import parse_render_request

__all__ = [
    "router",
    "RenderJob",
    "RenderRequest",
    "RenderService",
    "WebpageToPdfBody",
    "parse_render_request",
]
