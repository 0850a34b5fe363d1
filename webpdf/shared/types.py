"""Shared type definitions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Per-request context attached by middleware."""
    request_id: str
    client_host: str | None = None
