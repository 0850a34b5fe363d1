"""
Error taxonomy for WebPDF.

Every error carries a stable code and the HTTP status it maps to.
"""

from typing import Any


class WebPdfError(Exception):
    """Base error for all WebPDF failures."""

    code = "INTERNAL_ERROR"
    http_status = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(WebPdfError):
    """Request payload is malformed or not allowed."""

    code = "VALIDATION_ERROR"
    http_status = 400


class RenderError(WebPdfError):
    """Browser launch, navigation or capture failed."""

    code = "RENDER_FAILED"
    http_status = 500


class RenderTimeoutError(RenderError):
    """A render stage (usually navigation) ran out of time."""

    code = "RENDER_TIMEOUT"

    def __init__(self, stage: str, timeout_ms: int) -> None:
        super().__init__(
            f"{stage.capitalize()} timed out after {timeout_ms}ms",
            details={"stage": stage, "timeout_ms": timeout_ms},
        )
        self.stage = stage
        self.timeout_ms = timeout_ms


class UnavailableError(WebPdfError):
    """Service cannot currently render (browser missing or broken)."""

    code = "UNAVAILABLE"
    http_status = 503
