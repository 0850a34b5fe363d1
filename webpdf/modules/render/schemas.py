"""Render module schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PageFormat = Literal["A4", "Letter", "Legal"]
MarginMode = Literal["default", "none"]

# Fixed profile applied unless the caller asks for no margins
DEFAULT_MARGINS = {
    "top": "20mm",
    "bottom": "20mm",
    "left": "15mm",
    "right": "15mm",
}


class WebpageToPdfBody(BaseModel):
    """
    Documented shape of the POST body.

    The endpoint parses the body leniently itself; this model only feeds
    the OpenAPI schema.
    """

    url: str = Field(..., description="Absolute http(s) URL to render")
    format: PageFormat = Field(default="A4", description="Paper format")
    landscape: bool = Field(default=False, description="Landscape orientation")
    printBackground: bool = Field(default=True, description="Print background colors/images")
    margin: MarginMode = Field(default="default", description="'none' removes page margins")


class RenderRequest(BaseModel):
    """A validated, immutable render request."""

    model_config = ConfigDict(frozen=True)

    target_url: str
    # Not restricted to PageFormat; unknown values are rejected by the browser
    page_format: str = "A4"
    landscape: bool = False
    print_background: bool = True
    margin_mode: MarginMode = "default"

    @property
    def margins(self) -> dict[str, str] | None:
        """Margin profile for PDF capture, or None for edge-to-edge."""
        if self.margin_mode == "none":
            return None
        return dict(DEFAULT_MARGINS)
