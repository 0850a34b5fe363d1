"""
WebPDF settings.

All values can be overridden through WEBPDF_* environment variables or a
.env file in the working directory.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="WEBPDF_",
        env_file=".env",
        extra="ignore",
    )

    # === Server ===
    host: str = "127.0.0.1"
    port: int = Field(default=8100, ge=1, le=65535)
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # === Browser ===
    browser_headless: bool = True
    # Chromium's own process sandbox. Only turn off on hosts that cannot
    # provide the kernel features it needs (some containers, serverless).
    browser_sandbox: bool = True
    browser_check_on_startup: bool = False

    # === Rendering ===
    navigation_timeout_ms: int = Field(default=60_000, ge=1_000, le=300_000)
    page_timeout_ms: int = Field(default=30_000, ge=1_000, le=300_000)
    max_concurrent_renders: int = Field(default=4, ge=1, le=32)
    # How long a request may queue for a free render slot
    slot_wait_timeout_ms: int = Field(default=120_000, ge=100, le=600_000)
    viewport_width: int = Field(default=1366, ge=320, le=3840)
    viewport_height: int = Field(default=900, ge=240, le=2160)
    user_agent: str = DEFAULT_USER_AGENT
    wait_for_fonts: bool = True
    scroll_lazy_content: bool = True
    scroll_step_px: int = Field(default=800, ge=100, le=5000)
    scroll_interval_ms: int = Field(default=200, ge=0, le=5000)
    settle_delay_ms: int = Field(default=800, ge=0, le=10_000)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def init_settings(settings: Settings) -> Settings:
    """Replace the process-wide settings (tests, embedding)."""
    global _settings
    _settings = settings
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
