"""API router package."""

from .health import api_create_health_router

__all__ = ["api_create_health_router"]
