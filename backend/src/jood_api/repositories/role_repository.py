"""Role repository."""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from jood_api.models.orm.permission import PermissionORM
from jood_api.models.orm.role import RoleORM
from jood_api.models.orm.role_permission import RolePermissionORM
from jood_api.repositories.base import BaseRepository


class RoleRepository(BaseRepository[RoleORM]):
    """Repository for role catalog operations."""

    model = RoleORM

    async def get_by_name(self, name: str) -> RoleORM | None:
        """Get role by exact (case-sensitive) name, active or not.

        Args:
            name: Role name

        Returns:
            RoleORM or None if not found
        """
        result = await self.session.execute(select(RoleORM).where(RoleORM.name == name))
        return result.scalar_one_or_none()

    async def get_with_permissions(self, role_id: UUID) -> RoleORM | None:
        """Get role with permissions loaded (refreshing any cached copy).

        Args:
            role_id: Role UUID

        Returns:
            RoleORM with permissions or None
        """
        result = await self.session.execute(
            select(RoleORM)
            .options(selectinload(RoleORM.permissions))
            .where(RoleORM.id == role_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_all_active_with_permissions(self) -> list[RoleORM]:
        """Get active roles with permissions.

        Returns:
            List of RoleORM ordered by descending priority, then name
        """
        result = await self.session.execute(
            select(RoleORM)
            .options(selectinload(RoleORM.permissions))
            .where(RoleORM.is_active.is_(True))
            .order_by(RoleORM.priority.desc(), RoleORM.name)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_active_with_permission(self, permission_name: str) -> list[RoleORM]:
        """Get active roles bundling an active permission.

        Args:
            permission_name: Permission name

        Returns:
            List of RoleORM ordered by descending priority, then name
        """
        result = await self.session.execute(
            select(RoleORM)
            .join(RoleORM.permissions)
            .where(PermissionORM.name == permission_name)
            .where(PermissionORM.is_active.is_(True))
            .where(RoleORM.is_active.is_(True))
            .order_by(RoleORM.priority.desc(), RoleORM.name)
        )
        return list(result.scalars().unique().all())

    async def count_active(self) -> int:
        """Count active roles."""
        result = await self.session.execute(
            select(func.count()).select_from(RoleORM).where(RoleORM.is_active.is_(True))
        )
        return result.scalar_one()

    async def create_role(
        self,
        name: str,
        description: str,
        priority: int = 0,
        is_active: bool = True,
    ) -> RoleORM:
        """Create a new role.

        Args:
            name: Unique role name
            description: Role description
            priority: Role priority
            is_active: Whether the role takes part in resolution

        Returns:
            Created RoleORM
        """
        return await self.create(
            name=name,
            description=description,
            priority=priority,
            is_active=is_active,
        )

    async def set_permissions(
        self,
        role_id: UUID,
        permission_ids: Iterable[UUID],
    ) -> None:
        """Set permissions for a role (replaces existing).

        Args:
            role_id: Role UUID
            permission_ids: Permission UUIDs
        """
        await self.session.execute(
            delete(RolePermissionORM).where(RolePermissionORM.role_id == role_id)
        )

        for perm_id in dict.fromkeys(permission_ids):
            self.session.add(RolePermissionORM(role_id=role_id, permission_id=perm_id))

        await self.session.flush()
