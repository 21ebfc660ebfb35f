"""API routers for the adaptive tutor service."""

from src.api.routers import adaptive_router

__all__ = [
    "adaptive_router",
]
