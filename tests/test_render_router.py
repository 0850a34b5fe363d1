"""Tests for POST /api/webpage-to-pdf."""

import pytest
from fastapi.testclient import TestClient

from webpdf.shared.errors import RenderTimeoutError

ENDPOINT = "/api/webpage-to-pdf"


class TestWebpageToPdfSuccess:

    def test_returns_pdf_download(self, client: TestClient, driver) -> None:
        resp = client.post(ENDPOINT, json={"url": "https://example.com"})

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.headers["content-disposition"] == 'attachment; filename="webpage.pdf"'
        assert resp.headers["cache-control"] == "no-store"
        assert resp.content.startswith(b"%PDF-")
        assert driver.live_browsers == 0

    def test_passes_options_to_browser(self, client: TestClient, driver) -> None:
        resp = client.post(ENDPOINT, json={
            "url": "https://example.com/docs",
            "format": "Legal",
            "landscape": True,
            "printBackground": False,
            "margin": "none",
        })

        assert resp.status_code == 200
        options = driver.pdf_calls[0]
        assert options.format == "Legal"
        assert options.landscape is True
        assert options.print_background is False
        assert options.margin is None

    def test_echoes_request_id(self, client: TestClient) -> None:
        resp = client.post(
            ENDPOINT,
            json={"url": "https://example.com"},
            headers={"X-Request-ID": "req_test123"},
        )
        assert resp.headers["x-request-id"] == "req_test123"


class TestWebpageToPdfInvalidUrl:

    @pytest.mark.parametrize("body", [
        {},
        {"url": ""},
        {"url": "file:///etc/passwd"},
        {"url": "data:text/html,hello"},
        {"url": "javascript:alert(1)"},
        {"url": "example.com"},
        {"url": 12345},
    ])
    def test_invalid_url_returns_400(self, client: TestClient, driver, body) -> None:
        resp = client.post(ENDPOINT, json=body)

        assert resp.status_code == 400
        assert resp.text == "Invalid URL"
        assert resp.headers["content-type"].startswith("text/plain")
        assert driver.browsers == []

    def test_malformed_json_returns_400(self, client: TestClient, driver) -> None:
        resp = client.post(
            ENDPOINT,
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert resp.status_code == 400
        assert resp.text == "Invalid URL"
        assert driver.browsers == []

    def test_json_array_body_returns_400(self, client: TestClient, driver) -> None:
        resp = client.post(ENDPOINT, json=["https://example.com"])
        assert resp.status_code == 400
        assert driver.browsers == []


class TestWebpageToPdfFailures:

    def test_timeout_returns_500(self, client: TestClient, driver) -> None:
        driver.failures["goto"] = RenderTimeoutError("navigation", 60_000)

        resp = client.post(ENDPOINT, json={"url": "https://slow.example.com"})

        assert resp.status_code == 500
        assert resp.text == "Failed to render PDF"
        assert driver.live_browsers == 0

    @pytest.mark.parametrize("stage", ["launch", "new_page", "goto", "settle", "pdf"])
    def test_failure_returns_generic_500(self, client: TestClient, driver, stage) -> None:
        driver.failures[stage] = RuntimeError("net::ERR_NAME_NOT_RESOLVED at internal-host")

        resp = client.post(ENDPOINT, json={"url": "https://example.com"})

        assert resp.status_code == 500
        assert resp.text == "Failed to render PDF"
        assert "ERR_NAME_NOT_RESOLVED" not in resp.text
        assert driver.live_browsers == 0

    def test_unknown_format_returns_500(self, client: TestClient, driver) -> None:
        driver.failures["pdf"] = ValueError("Unknown paper format: Postcard")

        resp = client.post(ENDPOINT, json={"url": "https://example.com", "format": "Postcard"})

        assert resp.status_code == 500
        assert driver.pdf_calls[0].format == "Postcard"
        assert driver.live_browsers == 0

    def test_get_not_allowed(self, client: TestClient) -> None:
        resp = client.get(ENDPOINT)
        assert resp.status_code == 405
