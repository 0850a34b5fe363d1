"""Turn an untrusted request payload into a RenderRequest."""

from typing import Any

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from webpdf.shared.errors import ValidationError

from .schemas import RenderRequest

INVALID_URL = "Invalid URL"

# AnyHttpUrl only admits http/https and requires a host
_http_url = TypeAdapter(AnyHttpUrl)


def parse_target_url(value: Any) -> str:
    """
    Validate a target URL.

    Returns the normalized absolute URL. Anything that is not an absolute
    http(s) URL (file:, data:, javascript:, relative paths, ...) raises
    ValidationError so it never reaches the browser.
    """
    raw = str(value).strip() if value else ""
    if not raw:
        raise ValidationError(INVALID_URL, details={"reason": "empty"})

    try:
        url = _http_url.validate_python(raw)
    except PydanticValidationError as e:
        raise ValidationError(
            INVALID_URL, details={"reason": e.errors()[0]["type"]}
        ) from e

    return str(url)


def parse_render_request(payload: Any) -> RenderRequest:
    """
    Build a RenderRequest from a raw body.

    Non-object payloads are treated as empty, which fails on the url rule.
    """
    body = payload if isinstance(payload, dict) else {}

    return RenderRequest(
        target_url=parse_target_url(body.get("url")),
        page_format=str(body.get("format") or "A4"),
        landscape=bool(body.get("landscape")),
        print_background=body.get("printBackground") is not False,
        margin_mode="none" if body.get("margin") == "none" else "default",
    )
