"""Authenticated user domain model."""

from uuid import UUID

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """User account behind an authenticated request."""

    id: UUID
    email: str
    name: str
    is_active: bool = True
    legacy_roles: list[str] = []  # Account-level role tags

    class Config:
        """Pydantic config."""

        from_attributes = True
