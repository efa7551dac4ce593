"""Effective permission resolution for profiles."""

import logging
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from jood_api.exceptions import ProfileNotFoundError
from jood_api.models.domain.legacy_role import ALL_PERMISSIONS, LegacyRoleMapping
from jood_api.models.domain.matrix import MatrixUser
from jood_api.models.domain.profile import ProfileKind
from jood_api.models.domain.resolution import (
    PROVENANCE_DIRECT,
    PROVENANCE_LEGACY,
    EffectiveSet,
    role_provenance,
)
from jood_api.models.dto.permission_management import (
    EffectivePermission,
    PermissionSourceCounts,
    ProfilePermissionDetail,
)
from jood_api.models.orm.permission import PermissionORM
from jood_api.models.orm.profile import ProfileORM
from jood_api.repositories.permission_repository import PermissionRepository
from jood_api.repositories.profile_repository import ProfileRepository
from jood_api.repositories.user_repository import UserRepository
from jood_api.services.legacy_role_service import get_legacy_role_mapping

logger = logging.getLogger(__name__)


def matrix_user(profile: ProfileORM) -> MatrixUser:
    """Build the owner summary shown next to a profile."""
    user = profile.user
    return MatrixUser(
        id=user.id,
        name=user.display_name,
        email=user.email,
        roles=list(user.legacy_roles or []),
    )


class ResolutionEngine:
    """Computes effective permission sets against a snapshot of the catalog.

    The engine holds only the active permissions, so any grant row that points
    at an inactive or deleted permission is ignored. Build one engine per
    request and reuse it for every profile resolved in that request.
    """

    def __init__(
        self,
        active_permissions: Iterable[PermissionORM],
        legacy_mapping: LegacyRoleMapping,
    ) -> None:
        self._catalog: dict[str, PermissionORM] = {p.name: p for p in active_permissions}
        self._legacy_mapping = legacy_mapping

    def catalog_entry(self, name: str) -> PermissionORM | None:
        """Get the active catalog entry for a permission name."""
        return self._catalog.get(name)

    def _add_legacy(self, effective: EffectiveSet, tags: Iterable[str]) -> None:
        for tag in tags:
            for name in self._legacy_mapping.implied_names(tag):
                if name == ALL_PERMISSIONS:
                    for catalog_name in self._catalog:
                        effective.add(catalog_name, PROVENANCE_LEGACY)
                elif name in self._catalog:
                    effective.add(name, PROVENANCE_LEGACY)

    def resolve(self, profile: ProfileORM) -> EffectiveSet:
        """Compute the effective permission set of a profile.

        The profile must have ``user``, ``permissions`` and
        ``roles.permissions`` loaded.

        Args:
            profile: Profile with grants loaded

        Returns:
            EffectiveSet with provenance tags per permission
        """
        effective = EffectiveSet()

        for permission in profile.permissions:
            if permission.is_active and permission.name in self._catalog:
                effective.add(permission.name, PROVENANCE_DIRECT)

        for role in profile.roles:
            if not role.is_active:
                continue
            tag = role_provenance(role.name)
            for permission in role.permissions:
                if permission.is_active and permission.name in self._catalog:
                    effective.add(permission.name, tag)

        self._add_legacy(effective, profile.user.legacy_roles or [])
        return effective

    def resolve_tags(self, legacy_tags: Iterable[str]) -> EffectiveSet:
        """Resolve legacy tags alone (for accounts without a profile)."""
        effective = EffectiveSet()
        self._add_legacy(effective, legacy_tags)
        return effective

    def has_permission(self, profile: ProfileORM, name: str) -> bool:
        """Check a single permission. Resolve once when checking many."""
        return self.resolve(profile).contains(name)


class ResolutionService:
    """Service resolving profiles stored in the grant store."""

    def __init__(
        self,
        session: AsyncSession,
        legacy_mapping: LegacyRoleMapping | None = None,
    ) -> None:
        """Initialize service with database session.

        Args:
            session: Database session
            legacy_mapping: Legacy role table; the configured one when None
        """
        self.session = session
        self.legacy_mapping = legacy_mapping or get_legacy_role_mapping()
        self.permission_repo = PermissionRepository(session)
        self.profile_repo = ProfileRepository(session)
        self.user_repo = UserRepository(session)

    async def build_engine(self) -> ResolutionEngine:
        """Snapshot the active catalog into a resolution engine."""
        permissions = await self.permission_repo.get_all_active()
        return ResolutionEngine(permissions, self.legacy_mapping)

    async def _load_profile(self, profile_id: UUID) -> ProfileORM:
        profile = await self.profile_repo.get_with_grants(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id=str(profile_id))
        return profile

    async def resolve_profile(self, profile_id: UUID) -> EffectiveSet:
        """Resolve a profile by ID.

        Raises:
            ProfileNotFoundError: If the profile does not exist
        """
        profile = await self._load_profile(profile_id)
        engine = await self.build_engine()
        return engine.resolve(profile)

    async def has_permission(self, profile_id: UUID, name: str) -> bool:
        """Check whether a profile holds an effective permission."""
        effective = await self.resolve_profile(profile_id)
        return effective.contains(name)

    async def user_has_permission(
        self,
        user_id: UUID,
        name: str,
        kind: ProfileKind = ProfileKind.ADMIN,
    ) -> bool:
        """Check a permission for a user account.

        Uses the user's profile of the given kind. A user without such a
        profile is checked against its legacy tags only.

        Args:
            user_id: User UUID
            name: Permission name
            kind: Profile kind

        Returns:
            True if the permission is effective
        """
        profile = await self.profile_repo.get_by_user(user_id, kind.value)
        engine = await self.build_engine()
        if profile is not None:
            profile = await self._load_profile(profile.id)
            return engine.resolve(profile).contains(name)

        user = await self.user_repo.get(user_id)
        if user is None or not user.is_active:
            return False
        return engine.resolve_tags(user.legacy_roles or []).contains(name)

    async def get_permission_detail(self, profile_id: UUID) -> ProfilePermissionDetail:
        """Build the audit view of a profile's effective permissions.

        Args:
            profile_id: Profile UUID

        Returns:
            ProfilePermissionDetail with provenance per permission

        Raises:
            ProfileNotFoundError: If the profile does not exist
        """
        profile = await self._load_profile(profile_id)
        engine = await self.build_engine()
        effective = engine.resolve(profile)

        permissions = [
            EffectivePermission(
                name=name,
                category=engine.catalog_entry(name).category,
                sources=sources,
            )
            for name, sources in effective.as_dict().items()
        ]
        return ProfilePermissionDetail(
            profile_id=profile.id,
            kind=ProfileKind(profile.kind),
            user=matrix_user(profile),
            permissions=permissions,
            permission_sources=PermissionSourceCounts(**effective.source_counts()),
            total_permissions=len(effective),
        )
