"""Permission and role catalog service."""

import logging
from collections.abc import Awaitable, Callable, Iterable
from itertools import groupby
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jood_api.exceptions import (
    DuplicateNameError,
    PermissionNotFoundError,
    RoleNotFoundError,
    ValidationError,
)
from jood_api.models.dto.permission_management import (
    CatalogHealthResponse,
    PermissionCatalogResponse,
    PermissionCreateRequest,
    PermissionResponse,
    PermissionsByCategory,
    RoleCreateRequest,
    RoleListResponse,
    RolePermissionSummary,
    RoleResponse,
)
from jood_api.models.orm.permission import PermissionORM
from jood_api.models.orm.role import RoleORM
from jood_api.repositories.permission_repository import PermissionRepository
from jood_api.repositories.role_repository import RoleRepository
from jood_api.services.legacy_role_service import get_legacy_role_mapping
from jood_api.utils.validation import sanitize_category, sanitize_search

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100

CatalogChangedHook = Callable[[], Awaitable[None]]


def _validate_entry(entity: str, name: str, description: str) -> None:
    """Validate a catalog name and description.

    Raises:
        ValidationError: If the name length is out of range or the description is blank
    """
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ValidationError(
            f"{entity} name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
            {"name": name},
        )
    if not description or not description.strip():
        raise ValidationError(f"{entity} description is required", {"name": name})


def build_role_response(role: RoleORM) -> RoleResponse:
    """Build RoleResponse from a role with permissions loaded."""
    permissions = [p for p in role.permissions if p.is_active]
    return RoleResponse(
        id=role.id,
        name=role.name,
        description=role.description,
        priority=role.priority,
        is_active=role.is_active,
        permissions=[RolePermissionSummary.model_validate(p) for p in permissions],
        permission_count=len(permissions),
    )


class CatalogService:
    """Service for the permission and role catalogs.

    Catalog mutations are all-or-nothing per call: validation runs before any
    write and the call commits once at the end.
    """

    def __init__(
        self,
        session: AsyncSession,
        on_catalog_changed: CatalogChangedHook | None = None,
    ) -> None:
        """Initialize service with database session.

        Args:
            session: Database session
            on_catalog_changed: Awaited after every committed catalog change
        """
        self.session = session
        self.permission_repo = PermissionRepository(session)
        self.role_repo = RoleRepository(session)
        self.on_catalog_changed = on_catalog_changed

    async def _commit(self) -> None:
        await self.session.commit()
        if self.on_catalog_changed is not None:
            await self.on_catalog_changed()

    # =========================================================================
    # Permissions
    # =========================================================================

    async def create_permission(self, request: PermissionCreateRequest) -> PermissionResponse:
        """Create a permission.

        Args:
            request: Permission creation request

        Returns:
            Created permission

        Raises:
            ValidationError: If name length or description is invalid
            DuplicateNameError: If a permission with the exact name exists
        """
        _validate_entry("Permission", request.name, request.description)
        category = sanitize_category(request.category)
        if not category:
            raise ValidationError("Permission category is required", {"name": request.name})

        if await self.permission_repo.get_by_name(request.name) is not None:
            raise DuplicateNameError("Permission", request.name)

        try:
            permission = await self.permission_repo.create_permission(
                name=request.name,
                description=request.description,
                category=category,
                priority=request.priority,
                is_active=request.is_active,
            )
            await self._commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateNameError("Permission", request.name) from e

        logger.info("Created permission %s in category %s", permission.name, permission.category)
        return PermissionResponse.model_validate(permission)

    async def _set_permission_active(self, permission_id: UUID, active: bool) -> PermissionResponse:
        permission = await self.permission_repo.get(permission_id)
        if permission is None:
            raise PermissionNotFoundError(str(permission_id))

        if permission.is_active != active:
            permission.is_active = active
            await self.session.flush()
            await self._commit()
            logger.info(
                "%s permission %s",
                "Activated" if active else "Deactivated",
                permission.name,
            )
        return PermissionResponse.model_validate(permission)

    async def deactivate_permission(self, permission_id: UUID) -> PermissionResponse:
        """Soft-disable a permission. Grant rows are kept.

        Raises:
            PermissionNotFoundError: If the permission does not exist
        """
        return await self._set_permission_active(permission_id, False)

    async def activate_permission(self, permission_id: UUID) -> PermissionResponse:
        """Restore a soft-disabled permission.

        Raises:
            PermissionNotFoundError: If the permission does not exist
        """
        return await self._set_permission_active(permission_id, True)

    async def list_by_category(self, category: str) -> list[PermissionResponse]:
        """List active permissions of a category (priority desc, name asc)."""
        permissions = await self.permission_repo.get_active_by_category(category)
        return [PermissionResponse.model_validate(p) for p in permissions]

    async def list_active(self) -> list[PermissionResponse]:
        """List active permissions in catalog order."""
        permissions = await self.permission_repo.get_all_active()
        return [PermissionResponse.model_validate(p) for p in permissions]

    async def grouped_by_category(self) -> PermissionCatalogResponse:
        """List active permissions grouped by category."""
        permissions = await self.permission_repo.get_all_active()
        categories = [
            PermissionsByCategory(
                category=category,
                permissions=[PermissionResponse.model_validate(p) for p in items],
            )
            for category, items in groupby(permissions, key=lambda p: p.category)
        ]
        return PermissionCatalogResponse(categories=categories, total_count=len(permissions))

    async def search(self, term: str, limit: int = 50) -> list[PermissionResponse]:
        """Search active permissions by name or description."""
        term = sanitize_search(term)
        if not term:
            return []
        permissions = await self.permission_repo.search(term, limit=limit)
        return [PermissionResponse.model_validate(p) for p in permissions]

    async def list_categories(self) -> list[str]:
        """List categories of active permissions."""
        return await self.permission_repo.get_categories()

    # =========================================================================
    # Roles
    # =========================================================================

    async def _get_permissions(self, permission_ids: Iterable[UUID]) -> list[PermissionORM]:
        """Load permissions by ID, failing on the first unknown one."""
        ids = list(dict.fromkeys(permission_ids))
        permissions = await self.permission_repo.get_by_ids(ids)
        found = {p.id for p in permissions}
        for permission_id in ids:
            if permission_id not in found:
                raise PermissionNotFoundError(str(permission_id))
        return permissions

    async def create_role(self, request: RoleCreateRequest) -> RoleResponse:
        """Create a role with an initial permission bundle.

        Args:
            request: Role creation request

        Returns:
            Created role

        Raises:
            ValidationError: If name length or description is invalid
            DuplicateNameError: If a role with the exact name exists
            PermissionNotFoundError: If a listed permission does not exist
        """
        _validate_entry("Role", request.name, request.description)

        if await self.role_repo.get_by_name(request.name) is not None:
            raise DuplicateNameError("Role", request.name)

        permissions = await self._get_permissions(request.permission_ids)

        try:
            role = await self.role_repo.create_role(
                name=request.name,
                description=request.description,
                priority=request.priority,
                is_active=request.is_active,
            )
            if permissions:
                await self.role_repo.set_permissions(role.id, [p.id for p in permissions])
            await self._commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateNameError("Role", request.name) from e

        logger.info("Created role %s with %d permissions", role.name, len(permissions))
        role = await self.role_repo.get_with_permissions(role.id)
        return build_role_response(role)

    async def set_role_permissions(
        self,
        role_id: UUID,
        permission_ids: Iterable[UUID],
    ) -> RoleResponse:
        """Replace the permission bundle of a role.

        Raises:
            RoleNotFoundError: If the role does not exist
            PermissionNotFoundError: If a listed permission does not exist
        """
        role = await self.role_repo.get(role_id)
        if role is None:
            raise RoleNotFoundError(role_id=str(role_id))

        permissions = await self._get_permissions(permission_ids)
        await self.role_repo.set_permissions(role_id, [p.id for p in permissions])
        await self._commit()

        logger.info("Set %d permissions on role %s", len(permissions), role.name)
        role = await self.role_repo.get_with_permissions(role_id)
        return build_role_response(role)

    async def _set_role_active(self, role_id: UUID, active: bool) -> RoleResponse:
        role = await self.role_repo.get_with_permissions(role_id)
        if role is None:
            raise RoleNotFoundError(role_id=str(role_id))

        if role.is_active != active:
            role.is_active = active
            await self.session.flush()
            await self._commit()
            logger.info("%s role %s", "Activated" if active else "Deactivated", role.name)
        return build_role_response(role)

    async def deactivate_role(self, role_id: UUID) -> RoleResponse:
        """Soft-disable a role. Memberships are kept.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        return await self._set_role_active(role_id, False)

    async def activate_role(self, role_id: UUID) -> RoleResponse:
        """Restore a soft-disabled role.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        return await self._set_role_active(role_id, True)

    async def list_active_roles(self) -> RoleListResponse:
        """List active roles with their active permissions."""
        roles = await self.role_repo.get_all_active_with_permissions()
        return RoleListResponse(
            roles=[build_role_response(role) for role in roles],
            total_count=len(roles),
        )

    async def roles_with_permission(self, permission_name: str) -> list[str]:
        """Names of active roles bundling an active permission."""
        roles = await self.role_repo.get_active_with_permission(permission_name)
        return [role.name for role in roles]

    async def health_check(self) -> CatalogHealthResponse:
        """Report catalog counts."""
        permissions_count = await self.permission_repo.count_active()
        roles_count = await self.role_repo.count_active()
        return CatalogHealthResponse(
            status="healthy",
            permissions_count=permissions_count,
            roles_count=roles_count,
            legacy_mapping_version=get_legacy_role_mapping().version,
        )
