"""Render service - webpage to PDF using a headless browser."""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from webpdf.config import Settings, get_settings
from webpdf.shared.errors import RenderError, RenderTimeoutError, WebPdfError
from webpdf.shared.ids import generate_job_id
from webpdf.shared.logging import get_logger

from .browser import (
    BrowserDriver,
    BrowserHandle,
    LaunchOptions,
    PageHandle,
    PageOptions,
    PdfOptions,
    PlaywrightDriver,
    SettleOptions,
)
from .schemas import RenderRequest

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF-"

SELF_CHECK_HTML = "<html><body><h1>WebPDF self-check</h1></body></html>"

# Always passed to Chromium regardless of sandbox setting
BASE_BROWSER_ARGS = (
    "--disable-dev-shm-usage",
    "--font-render-hinting=medium",
)
NO_SANDBOX_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
)


class RenderJob:
    """One navigate-and-capture cycle on a page owned by a single browser."""

    def __init__(
        self,
        job_id: str,
        request: RenderRequest,
        page: PageHandle,
        settings: Settings,
    ) -> None:
        self.job_id = job_id
        self.request = request
        self.page = page
        self.settings = settings

    def settle_options(self) -> SettleOptions:
        s = self.settings
        return SettleOptions(
            wait_for_fonts=s.wait_for_fonts,
            scroll_lazy_content=s.scroll_lazy_content,
            scroll_step_px=s.scroll_step_px,
            scroll_interval_ms=s.scroll_interval_ms,
            settle_delay_ms=s.settle_delay_ms,
            timeout_ms=s.page_timeout_ms,
        )

    def pdf_options(self) -> PdfOptions:
        return PdfOptions(
            format=self.request.page_format,
            landscape=self.request.landscape,
            print_background=self.request.print_background,
            margin=self.request.margins,
        )

    async def run(self) -> bytes:
        """Navigate, let the page settle, and capture it as PDF."""
        url = self.request.target_url

        logger.info(f"[{self.job_id}] Navigating to {url}")
        await self.page.goto(url, self.settings.navigation_timeout_ms)

        await self.page.settle(self.settle_options())

        capture_timeout_ms = self.settings.page_timeout_ms
        try:
            pdf_bytes = await asyncio.wait_for(
                self.page.pdf(self.pdf_options()), timeout=capture_timeout_ms / 1000
            )
        except asyncio.TimeoutError as e:
            raise RenderTimeoutError("capture", capture_timeout_ms) from e

        if not pdf_bytes:
            raise RenderError("Browser returned an empty PDF")

        return pdf_bytes


class RenderService:
    """
    Executes render jobs, each in its own browser process.

    Concurrent jobs are capped by max_concurrent_renders. Jobs beyond the
    cap wait up to slot_wait_timeout_ms for a free slot, then fail.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        driver: BrowserDriver | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.driver = driver or PlaywrightDriver()
        self._slots = asyncio.Semaphore(self.settings.max_concurrent_renders)
        self._active = 0

        # None until a self-check has run
        self.browser_ready: bool | None = None
        self.browser_error: str | None = None

        if not self.settings.browser_sandbox:
            logger.warning(
                "Chromium sandbox is DISABLED (WEBPDF_BROWSER_SANDBOX=false). "
                "Rendered pages run without OS-level isolation."
            )

    @property
    def active_renders(self) -> int:
        return self._active

    @property
    def max_concurrent(self) -> int:
        return self.settings.max_concurrent_renders

    def launch_options(self) -> LaunchOptions:
        args = BASE_BROWSER_ARGS
        if not self.settings.browser_sandbox:
            args = NO_SANDBOX_ARGS + args
        return LaunchOptions(
            headless=self.settings.browser_headless,
            sandbox=self.settings.browser_sandbox,
            args=args,
        )

    def page_options(self) -> PageOptions:
        return PageOptions(
            viewport_width=self.settings.viewport_width,
            viewport_height=self.settings.viewport_height,
            user_agent=self.settings.user_agent,
            default_timeout_ms=self.settings.page_timeout_ms,
        )

    @asynccontextmanager
    async def open_page(self, job_id: str) -> AsyncIterator[PageHandle]:
        """
        Launch a browser, open one page, and yield it.

        The page and browser are closed when the block exits, however it
        exits.
        """
        browser = await self.driver.launch(self.launch_options())
        logger.debug(f"[{job_id}] Browser launched")
        page: PageHandle | None = None

        try:
            page = await browser.new_page(self.page_options())
            yield page
        finally:
            await self._teardown(job_id, browser, page)

    async def _teardown(
        self, job_id: str, browser: BrowserHandle, page: PageHandle | None
    ) -> None:
        # Close failures are logged, never raised: they must not hide the
        # job's own error, and the browser close must still be attempted.
        if page is not None:
            try:
                await page.close()
            except Exception:
                logger.warning(f"[{job_id}] Failed to close page", exc_info=True)

        try:
            await browser.close()
        except Exception:
            logger.error(f"[{job_id}] Failed to close browser", exc_info=True)
        else:
            logger.debug(f"[{job_id}] Browser closed")

    async def render(self, request: RenderRequest) -> bytes:
        """
        Render request.target_url to PDF bytes.

        Raises:
            RenderTimeoutError: no slot freed up in time, navigation did not
                reach network idle in time, or capture hung
            RenderError: any other launch, navigation or capture failure
        """
        job_id = generate_job_id()
        await self._acquire_slot(job_id)

        self._active += 1
        start = time.monotonic()
        try:
            async with self.open_page(job_id) as page:
                job = RenderJob(job_id, request, page, self.settings)
                pdf_bytes = await job.run()

            elapsed = time.monotonic() - start
            logger.info(f"[{job_id}] Generated PDF: {len(pdf_bytes)} bytes in {elapsed:.2f}s")
            return pdf_bytes

        except WebPdfError:
            raise
        except Exception as e:
            raise RenderError(f"Render failed: {type(e).__name__}") from e
        finally:
            self._active -= 1
            self._slots.release()

    async def _acquire_slot(self, job_id: str) -> None:
        """Wait for a free render slot, at most slot_wait_timeout_ms."""
        timeout_ms = self.settings.slot_wait_timeout_ms
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError as e:
            logger.warning(
                f"[{job_id}] No render slot free after {timeout_ms}ms "
                f"({self._active}/{self.max_concurrent} active)"
            )
            raise RenderTimeoutError("queue", timeout_ms) from e

    async def check_browser(self) -> bool:
        """
        Render a trivial page to confirm the browser can produce PDFs.

        Records the outcome in browser_ready / browser_error.
        """
        job_id = generate_job_id()
        logger.info("Validating browser installation...")

        try:
            async with self.open_page(job_id) as page:
                await page.set_content(SELF_CHECK_HTML)
                pdf_bytes = await page.pdf(PdfOptions(format="Letter"))

            if not pdf_bytes.startswith(PDF_MAGIC):
                raise RenderError("Self-check did not produce a PDF")

        except Exception as e:
            self.browser_ready = False
            self.browser_error = str(e)
            logger.error(f"Browser self-check failed: {e}")
            return False

        self.browser_ready = True
        self.browser_error = None
        logger.info(f"Browser self-check passed ({len(pdf_bytes)} byte PDF)")
        return True
