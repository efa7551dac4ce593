"""Repositories package."""

from jood_api.repositories.audit_repository import AuditRepository
from jood_api.repositories.base import BaseRepository
from jood_api.repositories.permission_repository import PermissionRepository
from jood_api.repositories.profile_repository import ProfileRepository
from jood_api.repositories.role_repository import RoleRepository
from jood_api.repositories.user_repository import UserRepository

__all__ = [
    "AuditRepository",
    "BaseRepository",
    "PermissionRepository",
    "ProfileRepository",
    "RoleRepository",
    "UserRepository",
]
