"""Permission repository."""

from sqlalchemy import func, or_, select

from jood_api.models.orm.permission import PermissionORM
from jood_api.repositories.base import BaseRepository
from jood_api.utils.validation import escape_like_wildcards


class PermissionRepository(BaseRepository[PermissionORM]):
    """Repository for permission catalog operations."""

    model = PermissionORM

    async def get_by_name(self, name: str) -> PermissionORM | None:
        """Get permission by exact (case-sensitive) name, active or not.

        Args:
            name: Permission name

        Returns:
            PermissionORM or None if not found
        """
        result = await self.session.execute(select(PermissionORM).where(PermissionORM.name == name))
        return result.scalar_one_or_none()

    async def get_all_active(self) -> list[PermissionORM]:
        """Get active permissions in catalog order.

        Ordered by category, then descending priority, then name; matrix
        columns follow this order.

        Returns:
            List of PermissionORM
        """
        result = await self.session.execute(
            select(PermissionORM)
            .where(PermissionORM.is_active.is_(True))
            .order_by(
                PermissionORM.category,
                PermissionORM.priority.desc(),
                PermissionORM.name,
            )
        )
        return list(result.scalars().all())

    async def get_active_by_category(self, category: str) -> list[PermissionORM]:
        """Get active permissions of a category.

        Args:
            category: Permission category

        Returns:
            List of PermissionORM ordered by descending priority, then name
        """
        result = await self.session.execute(
            select(PermissionORM)
            .where(PermissionORM.category == category)
            .where(PermissionORM.is_active.is_(True))
            .order_by(PermissionORM.priority.desc(), PermissionORM.name)
        )
        return list(result.scalars().all())

    async def get_categories(self) -> list[str]:
        """Get distinct categories of active permissions."""
        result = await self.session.execute(
            select(PermissionORM.category)
            .where(PermissionORM.is_active.is_(True))
            .distinct()
            .order_by(PermissionORM.category)
        )
        return list(result.scalars().all())

    async def search(self, term: str, limit: int = 50) -> list[PermissionORM]:
        """Search active permissions by name or description.

        Args:
            term: Search term (LIKE wildcards are matched literally)
            limit: Maximum results

        Returns:
            List of PermissionORM ordered by name
        """
        pattern = f"%{escape_like_wildcards(term)}%"
        result = await self.session.execute(
            select(PermissionORM)
            .where(PermissionORM.is_active.is_(True))
            .where(
                or_(
                    PermissionORM.name.ilike(pattern, escape="\\"),
                    PermissionORM.description.ilike(pattern, escape="\\"),
                )
            )
            .order_by(PermissionORM.name)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_active(self) -> int:
        """Count active permissions."""
        result = await self.session.execute(
            select(func.count()).select_from(PermissionORM).where(PermissionORM.is_active.is_(True))
        )
        return result.scalar_one()

    async def create_permission(
        self,
        name: str,
        description: str,
        category: str,
        priority: int = 0,
        is_active: bool = True,
    ) -> PermissionORM:
        """Create a new permission.

        Args:
            name: Unique permission name
            description: Human-readable description
            category: Grouping category
            priority: Ordering priority within the category
            is_active: Whether the permission takes part in resolution

        Returns:
            Created PermissionORM
        """
        return await self.create(
            name=name,
            description=description,
            category=category,
            priority=priority,
            is_active=is_active,
        )
