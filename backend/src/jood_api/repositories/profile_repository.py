"""Profile grant store repository."""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from jood_api.models.orm.profile import ProfileORM
from jood_api.models.orm.profile_grant import ProfilePermissionORM, ProfileRoleORM
from jood_api.models.orm.role import RoleORM
from jood_api.models.orm.user import UserORM
from jood_api.repositories.base import BaseRepository


def _with_grants():
    """Loader options pulling everything resolution needs in one round trip each."""
    return (
        selectinload(ProfileORM.user),
        selectinload(ProfileORM.permissions),
        selectinload(ProfileORM.roles).selectinload(RoleORM.permissions),
    )


class ProfileRepository(BaseRepository[ProfileORM]):
    """Repository for profiles and their direct grants / role memberships.

    Grants are stored as individual junction rows so that concurrent edits to
    different grants of the same profile never overwrite each other.
    """

    model = ProfileORM

    async def get_with_grants(self, profile_id: UUID) -> ProfileORM | None:
        """Get a profile with user, direct permissions and roles loaded.

        Args:
            profile_id: Profile UUID

        Returns:
            ProfileORM or None if not found
        """
        result = await self.session.execute(
            select(ProfileORM)
            .options(*_with_grants())
            .where(ProfileORM.id == profile_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_all_with_grants(self, kind: str) -> list[ProfileORM]:
        """Get all profiles of a kind with grants loaded.

        Args:
            kind: Profile kind

        Returns:
            List of ProfileORM ordered by owner email
        """
        result = await self.session.execute(
            select(ProfileORM)
            .join(ProfileORM.user)
            .options(*_with_grants())
            .where(ProfileORM.kind == kind)
            .order_by(UserORM.email, ProfileORM.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_by_user(self, user_id: UUID, kind: str) -> ProfileORM | None:
        """Get the profile of a given kind owned by a user."""
        result = await self.session.execute(
            select(ProfileORM)
            .where(ProfileORM.user_id == user_id)
            .where(ProfileORM.kind == kind)
        )
        return result.scalar_one_or_none()

    async def get_ids_by_users(self, user_ids: Iterable[UUID], kind: str) -> dict[UUID, UUID]:
        """Map user IDs to the IDs of their profiles of a given kind.

        Args:
            user_ids: User UUIDs
            kind: Profile kind

        Returns:
            Dict of user_id -> profile_id (users without a profile are absent)
        """
        id_list = list(set(user_ids))
        if not id_list:
            return {}
        result = await self.session.execute(
            select(ProfileORM.user_id, ProfileORM.id)
            .where(ProfileORM.user_id.in_(id_list))
            .where(ProfileORM.kind == kind)
        )
        return {user_id: profile_id for user_id, profile_id in result.all()}

    async def create_profile(self, user_id: UUID, kind: str) -> ProfileORM:
        """Create an empty profile for a user."""
        return await self.create(user_id=user_id, kind=kind)

    # =========================================================================
    # Direct permission grants
    # =========================================================================

    async def has_permission_grant(self, profile_id: UUID, permission_id: UUID) -> bool:
        """Check whether a direct grant row exists."""
        result = await self.session.execute(
            select(ProfilePermissionORM.profile_id)
            .where(ProfilePermissionORM.profile_id == profile_id)
            .where(ProfilePermissionORM.permission_id == permission_id)
        )
        return result.first() is not None

    async def add_permission(
        self,
        profile_id: UUID,
        permission_id: UUID,
        granted_by: UUID | None = None,
    ) -> bool:
        """Grant a permission directly to a profile.

        Args:
            profile_id: Profile UUID
            permission_id: Permission UUID
            granted_by: User who granted it

        Returns:
            True if a grant row was created, False if it already existed
        """
        if await self.has_permission_grant(profile_id, permission_id):
            return False
        self.session.add(
            ProfilePermissionORM(
                profile_id=profile_id,
                permission_id=permission_id,
                granted_by=granted_by,
            )
        )
        await self.session.flush()
        return True

    async def remove_permission(self, profile_id: UUID, permission_id: UUID) -> bool:
        """Revoke a direct permission grant.

        Returns:
            True if a grant row was deleted, False if none existed
        """
        result = await self.session.execute(
            delete(ProfilePermissionORM)
            .where(ProfilePermissionORM.profile_id == profile_id)
            .where(ProfilePermissionORM.permission_id == permission_id)
        )
        return result.rowcount > 0

    # =========================================================================
    # Role memberships
    # =========================================================================

    async def has_role(self, profile_id: UUID, role_id: UUID) -> bool:
        """Check whether a role membership row exists."""
        result = await self.session.execute(
            select(ProfileRoleORM.profile_id)
            .where(ProfileRoleORM.profile_id == profile_id)
            .where(ProfileRoleORM.role_id == role_id)
        )
        return result.first() is not None

    async def add_role(
        self,
        profile_id: UUID,
        role_id: UUID,
        granted_by: UUID | None = None,
    ) -> bool:
        """Add a role to a profile.

        Returns:
            True if a membership row was created, False if it already existed
        """
        if await self.has_role(profile_id, role_id):
            return False
        self.session.add(
            ProfileRoleORM(profile_id=profile_id, role_id=role_id, granted_by=granted_by)
        )
        await self.session.flush()
        return True

    async def remove_role(self, profile_id: UUID, role_id: UUID) -> bool:
        """Remove a role from a profile.

        Returns:
            True if a membership row was deleted, False if none existed
        """
        result = await self.session.execute(
            delete(ProfileRoleORM)
            .where(ProfileRoleORM.profile_id == profile_id)
            .where(ProfileRoleORM.role_id == role_id)
        )
        return result.rowcount > 0
