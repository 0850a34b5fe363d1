"""Render module routes."""

from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse

from webpdf.shared.errors import RenderTimeoutError, ValidationError
from webpdf.shared.logging import get_logger
from .schemas import WebpageToPdfBody
from .service import RenderService
from .validation import parse_render_request

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["render"])

PDF_FILENAME = "webpage.pdf"


def get_render_service(request: Request) -> RenderService:
    """Dependency injection for the app-wide render service."""
    return request.app.state.render_service


async def _read_payload(request: Request) -> Any:
    """Parse the JSON body, treating anything unparseable as empty."""
    try:
        return await request.json()
    except ValueError:
        return {}


@router.post(
    "/webpage-to-pdf",
    response_class=Response,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": WebpageToPdfBody.model_json_schema()}
            },
        }
    },
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Rendered PDF"},
        400: {"content": {"text/plain": {}}, "description": "Invalid URL"},
        500: {"content": {"text/plain": {}}, "description": "Failed to render PDF"},
    },
)
async def webpage_to_pdf(
    request: Request,
    service: RenderService = Depends(get_render_service),
) -> Response:
    """
    Render a public web page to PDF.

    Returns the PDF as a download. Failures return a short plain-text
    body; details only go to the server log.
    """
    payload = await _read_payload(request)

    try:
        render_request = parse_render_request(payload)
    except ValidationError as e:
        logger.info(f"Rejected render request: {e.details.get('reason')}")
        return PlainTextResponse("Invalid URL", status_code=400)

    try:
        pdf_bytes = await service.render(render_request)
    except RenderTimeoutError as e:
        logger.error(f"PDF render timed out for {render_request.target_url}: {e}")
        return PlainTextResponse("Failed to render PDF", status_code=500)
    except Exception:
        logger.exception(f"PDF render failed for {render_request.target_url}")
        return PlainTextResponse("Failed to render PDF", status_code=500)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{PDF_FILENAME}"',
            "Content-Length": str(len(pdf_bytes)),
            "Cache-Control": "no-store",
        },
    )
