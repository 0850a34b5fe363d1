"""
Browser automation layer.

RenderService talks to the browser only through the BrowserDriver,
BrowserHandle and PageHandle protocols below, so tests can swap in a fake.
PlaywrightDriver is the production implementation (Chromium).
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Protocol

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webpdf.shared.errors import RenderTimeoutError
from webpdf.shared.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# OPTIONS
# =============================================================================

@dataclass(frozen=True)
class LaunchOptions:
    """How to start a browser process."""
    headless: bool = True
    sandbox: bool = True
    args: tuple[str, ...] = ()


@dataclass(frozen=True)
class PageOptions:
    """Emulated environment for a new page."""
    viewport_width: int = 1366
    viewport_height: int = 900
    user_agent: str | None = None
    default_timeout_ms: int = 30_000


@dataclass(frozen=True)
class SettleOptions:
    """Post-navigation steps that let client-side content finish."""
    wait_for_fonts: bool = True
    scroll_lazy_content: bool = True
    scroll_step_px: int = 800
    scroll_interval_ms: int = 200
    max_scroll_steps: int = 100
    settle_delay_ms: int = 800
    timeout_ms: int = 30_000


@dataclass(frozen=True)
class PdfOptions:
    """PDF capture parameters."""
    format: str = "A4"
    landscape: bool = False
    print_background: bool = True
    margin: dict[str, str] | None = field(default=None, hash=False)
    prefer_css_page_size: bool = False


# =============================================================================
# PROTOCOLS
# =============================================================================

class PageHandle(Protocol):
    async def goto(self, url: str, timeout_ms: int) -> None: ...

    async def set_content(self, html: str) -> None: ...

    async def settle(self, options: SettleOptions) -> None: ...

    async def pdf(self, options: PdfOptions) -> bytes: ...

    async def close(self) -> None: ...


class BrowserHandle(Protocol):
    async def new_page(self, options: PageOptions) -> PageHandle: ...

    async def close(self) -> None: ...


class BrowserDriver(Protocol):
    async def launch(self, options: LaunchOptions) -> BrowserHandle: ...


# =============================================================================
# PLAYWRIGHT
# =============================================================================

# Scrolls to the bottom in fixed steps so lazy-loaded content is requested,
# then returns to the top. Bounded by maxSteps for infinite-scroll pages.
_SCROLL_SCRIPT = """
async ([distance, interval, maxSteps]) => {
    await new Promise((resolve) => {
        let total = 0;
        let steps = 0;
        const timer = setInterval(() => {
            window.scrollBy(0, distance);
            total += distance;
            steps += 1;
            const height = document.body ? document.body.scrollHeight : 0;
            if (total >= height || steps >= maxSteps) {
                clearInterval(timer);
                window.scrollTo(0, 0);
                requestAnimationFrame(() => resolve());
            }
        }, interval);
    });
}
"""

_FONTS_SCRIPT = "() => document.fonts ? document.fonts.ready.then(() => true) : true"


class PlaywrightPage:
    """PageHandle backed by a Playwright page in its own context."""

    def __init__(self, context: BrowserContext, page: Page) -> None:
        self._context = context
        self._page = page

    async def goto(self, url: str, timeout_ms: int) -> None:
        try:
            await self._page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise RenderTimeoutError("navigation", timeout_ms) from e

    async def set_content(self, html: str) -> None:
        await self._page.set_content(html, wait_until="networkidle")

    async def settle(self, options: SettleOptions) -> None:
        try:
            await asyncio.wait_for(self._settle(options), timeout=options.timeout_ms / 1000)
        except asyncio.TimeoutError as e:
            raise RenderTimeoutError("settle", options.timeout_ms) from e

    async def _settle(self, options: SettleOptions) -> None:
        if options.wait_for_fonts:
            await self._page.evaluate(_FONTS_SCRIPT)

        if options.scroll_lazy_content:
            await self._page.evaluate(
                _SCROLL_SCRIPT,
                [options.scroll_step_px, options.scroll_interval_ms, options.max_scroll_steps],
            )

        if options.settle_delay_ms:
            await self._page.wait_for_timeout(options.settle_delay_ms)

    async def pdf(self, options: PdfOptions) -> bytes:
        pdf_options: dict[str, Any] = {
            "format": options.format,
            "landscape": options.landscape,
            "print_background": options.print_background,
            "prefer_css_page_size": options.prefer_css_page_size,
        }
        if options.margin:
            pdf_options["margin"] = options.margin

        return await self._page.pdf(**pdf_options)

    async def close(self) -> None:
        try:
            await self._page.close()
        finally:
            await self._context.close()


class PlaywrightBrowser:
    """BrowserHandle owning one Playwright driver and one Chromium process."""

    def __init__(self, playwright: Playwright, browser: Browser) -> None:
        self._playwright = playwright
        self._browser = browser

    async def new_page(self, options: PageOptions) -> PlaywrightPage:
        context = await self._browser.new_context(
            viewport={"width": options.viewport_width, "height": options.viewport_height},
            device_scale_factor=1,
            user_agent=options.user_agent,
            java_script_enabled=True,
        )
        try:
            context.set_default_timeout(options.default_timeout_ms)
            page = await context.new_page()
            await page.emulate_media(media="screen")
        except Exception:
            await context.close()
            raise
        return PlaywrightPage(context, page)

    async def close(self) -> None:
        try:
            await self._browser.close()
        finally:
            # Stopping the driver kills any Chromium process still attached
            await self._playwright.stop()


class PlaywrightDriver:
    """BrowserDriver that starts a dedicated Playwright + Chromium per launch."""

    async def launch(self, options: LaunchOptions) -> PlaywrightBrowser:
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=options.headless,
                chromium_sandbox=options.sandbox,
                args=list(options.args),
            )
        except Exception:
            await playwright.stop()
            raise

        logger.debug(f"Launched Chromium {browser.version} (sandbox={options.sandbox})")
        return PlaywrightBrowser(playwright, browser)
