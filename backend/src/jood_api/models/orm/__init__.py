"""SQLAlchemy ORM models package."""

from jood_api.models.orm.audit_log import AuditLogORM
from jood_api.models.orm.base import Base
from jood_api.models.orm.permission import PermissionORM
from jood_api.models.orm.profile import ProfileORM
from jood_api.models.orm.profile_grant import ProfilePermissionORM, ProfileRoleORM
from jood_api.models.orm.role import RoleORM
from jood_api.models.orm.role_permission import RolePermissionORM
from jood_api.models.orm.user import UserORM

__all__ = [
    "Base",
    "AuditLogORM",
    "PermissionORM",
    "ProfileORM",
    "ProfilePermissionORM",
    "ProfileRoleORM",
    "RoleORM",
    "RolePermissionORM",
    "UserORM",
]
