"""API routers for the content store service."""

from cas_service.routers import health, info, objects

__all__ = ["health", "info", "objects"]
