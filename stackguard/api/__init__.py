"""API layer package for HTTP status surfaces."""

from .application import create_api_application

__all__ = ["create_api_application"]
