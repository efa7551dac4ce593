"""API routers package."""

from jood_api.routers import permission_management

__all__ = ["permission_management"]
