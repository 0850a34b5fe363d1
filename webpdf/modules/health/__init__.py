"""Health module - liveness and readiness."""

from .router import router

__all__ = ["router"]
