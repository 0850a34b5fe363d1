"""
WebPDF entrypoint - runs uvicorn server.
"""

import uvicorn

from webpdf.app import build_app
from webpdf.config import get_settings
from webpdf.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> None:
    """Run the WebPDF server."""
    settings = get_settings()
    setup_logging(settings.log_level)

    if not settings.browser_sandbox and settings.host not in ("127.0.0.1", "localhost"):
        logger.warning(
            f"Serving on {settings.host} with the Chromium sandbox disabled; "
            "any page reachable from this host can be rendered without isolation."
        )

    app = build_app(settings)

    logger.info(f"Starting WebPDF on http://{settings.host}:{settings.port}")
    logger.info(
        f"Rendering up to {settings.max_concurrent_renders} pages at once "
        f"(navigation timeout {settings.navigation_timeout_ms}ms)"
    )

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
