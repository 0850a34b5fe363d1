"""
Shared fixtures.

FakeDriver stands in for Playwright: it tracks every browser it launches so
tests can assert that no browser outlives its request.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from webpdf.app import build_app
from webpdf.config import Settings, reset_settings
from webpdf.modules.render.browser import LaunchOptions, PageOptions, PdfOptions, SettleOptions


class FakePage:
    def __init__(self, driver: "FakeDriver", browser: "FakeBrowser", options: PageOptions) -> None:
        self.driver = driver
        self.browser = browser
        self.options = options
        self.url: str | None = None
        self.content: str | None = None
        self.closed = False

    async def goto(self, url: str, timeout_ms: int) -> None:
        self.driver.goto_calls.append((url, timeout_ms))
        if self.driver.goto_delay:
            await asyncio.sleep(self.driver.goto_delay)
        self.driver.maybe_fail("goto")
        self.url = url

    async def set_content(self, html: str) -> None:
        self.driver.maybe_fail("set_content")
        self.content = html

    async def settle(self, options: SettleOptions) -> None:
        self.driver.settle_calls.append(options)
        self.driver.maybe_fail("settle")

    async def pdf(self, options: PdfOptions) -> bytes:
        self.driver.pdf_calls.append(options)
        if self.driver.pdf_delay:
            await asyncio.sleep(self.driver.pdf_delay)
        self.driver.maybe_fail("pdf")
        if self.driver.pdf_result is not None:
            return self.driver.pdf_result
        source = self.url or "inline"
        return f"%PDF-1.7\n% source={source} format={options.format}\n%%EOF".encode()

    async def close(self) -> None:
        self.closed = True
        self.driver.maybe_fail("page_close")


class FakeBrowser:
    def __init__(self, driver: "FakeDriver", options: LaunchOptions) -> None:
        self.driver = driver
        self.options = options
        self.pages: list[FakePage] = []
        self.closed = False

    async def new_page(self, options: PageOptions) -> FakePage:
        self.driver.maybe_fail("new_page")
        page = FakePage(self.driver, self, options)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        # Process is gone even if close reports an error
        self.closed = True
        self.driver.maybe_fail("browser_close")


class FakeDriver:
    """BrowserDriver double with per-stage failure injection."""

    def __init__(self) -> None:
        self.browsers: list[FakeBrowser] = []
        self.failures: dict[str, Exception] = {}
        self.goto_calls: list[tuple[str, int]] = []
        self.settle_calls: list[SettleOptions] = []
        self.pdf_calls: list[PdfOptions] = []
        self.pdf_result: bytes | None = None
        self.goto_delay = 0.0
        self.pdf_delay = 0.0
        self.peak_live = 0

    def maybe_fail(self, stage: str) -> None:
        if stage in self.failures:
            raise self.failures[stage]

    @property
    def live_browsers(self) -> int:
        return sum(1 for b in self.browsers if not b.closed)

    async def launch(self, options: LaunchOptions) -> FakeBrowser:
        self.maybe_fail("launch")
        browser = FakeBrowser(self, options)
        self.browsers.append(browser)
        self.peak_live = max(self.peak_live, self.live_browsers)
        return browser


@pytest.fixture
def settings() -> Settings:
    """Settings tuned for fast tests."""
    return Settings(
        cors_origins=["http://testserver"],
        settle_delay_ms=0,
        max_concurrent_renders=2,
        browser_check_on_startup=False,
    )


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def app(settings: Settings, driver: FakeDriver):
    yield build_app(settings, driver=driver)
    reset_settings()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
