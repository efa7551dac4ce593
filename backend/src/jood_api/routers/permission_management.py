"""Permission management router: catalog, matrix and bulk grant editing."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from jood_api.constants.permissions import Permissions
from jood_api.dependencies import (
    get_bulk_mutation_service,
    get_catalog_service,
    get_matrix_service,
    get_profile_service,
    get_resolution_service,
)
from jood_api.models.domain.profile import ProfileKind, default_profile_kind
from jood_api.models.domain.user import CurrentUser
from jood_api.models.dto.permission_management import (
    BulkFailureResponse,
    BulkUpdateRequest,
    BulkUpdateResponse,
    CatalogHealthResponse,
    PermissionCatalogResponse,
    PermissionCreateRequest,
    PermissionMatrixResponse,
    PermissionResponse,
    ProfileCreateRequest,
    ProfilePermissionDetail,
    ProfileResponse,
    RoleCreateRequest,
    RoleListResponse,
    RoleMatrixResponse,
    RolePermissionsUpdateRequest,
    RoleResponse,
)
from jood_api.security.auth import require_permission
from jood_api.security.rate_limit import BULK_UPDATE_LIMIT, limiter
from jood_api.services.bulk_mutation_service import BulkMutationService
from jood_api.services.cache_service import CacheService, get_cache_service
from jood_api.services.catalog_service import CatalogService
from jood_api.services.matrix_service import MatrixService
from jood_api.services.profile_service import ProfileService
from jood_api.services.resolution_service import ResolutionService
from jood_api.utils.validation import sanitize_category

router = APIRouter()


# ============================================================================
# Permission catalog
# ============================================================================


@router.get("/permissions", response_model=PermissionCatalogResponse)
async def list_permissions(
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.VIEW_PERMISSIONS))],
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> PermissionCatalogResponse:
    """List active permissions grouped by category."""
    return await service.grouped_by_category()


@router.get("/permissions/search", response_model=list[PermissionResponse])
async def search_permissions(
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.VIEW_PERMISSIONS))],
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    q: str = Query(default="", max_length=200, description="Name or description fragment"),
) -> list[PermissionResponse]:
    """Search active permissions by name or description."""
    return await service.search(q)


@router.post("/permissions", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    body: PermissionCreateRequest,
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.MANAGE_PERMISSIONS))],
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> PermissionResponse:
    """Create a permission."""
    return await service.create_permission(body)


@router.post("/permissions/{permission_id}/deactivate", response_model=PermissionResponse)
async def deactivate_permission(
    permission_id: UUID,
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.MANAGE_PERMISSIONS))],
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> PermissionResponse:
    """Soft-disable a permission."""
    return await service.deactivate_permission(permission_id)


@router.post("/permissions/{permission_id}/activate", response_model=PermissionResponse)
async def activate_permission(
    permission_id: UUID,
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.MANAGE_PERMISSIONS))],
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> PermissionResponse:
    """Restore a soft-disabled permission."""
    return await service.activate_permission(permission_id)


# ============================================================================
# Role catalog
# ============================================================================


@router.get("/roles", response_model=RoleListResponse)
async def list_roles(
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.VIEW_PERMISSIONS))],
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> RoleListResponse:
    """List active roles with their permissions."""
    return await service.list_active_roles()


@router.post("/roles", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    body: RoleCreateRequest,
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.MANAGE_ROLES))],
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> RoleResponse:
    """Create a role."""
    return await service.create_role(body)


@router.put("/roles/{role_id}/permissions", response_model=RoleResponse)
async def set_role_permissions(
    role_id: UUID,
    body: RolePermissionsUpdateRequest,
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.MANAGE_ROLES))],
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> RoleResponse:
    """Replace the permission bundle of a role."""
    return await service.set_role_permissions(role_id, body.permission_ids)


@router.post("/roles/{role_id}/deactivate", response_model=RoleResponse)
async def deactivate_role(
    role_id: UUID,
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.MANAGE_ROLES))],
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> RoleResponse:
    """Soft-disable a role."""
    return await service.deactivate_role(role_id)


@router.post("/roles/{role_id}/activate", response_model=RoleResponse)
async def activate_role(
    role_id: UUID,
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.MANAGE_ROLES))],
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> RoleResponse:
    """Restore a soft-disabled role."""
    return await service.activate_role(role_id)


# ============================================================================
# Profiles
# ============================================================================


@router.post("/profiles", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    body: ProfileCreateRequest,
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.MANAGE_USER_PERMISSIONS))],
    service: Annotated[ProfileService, Depends(get_profile_service)],
) -> ProfileResponse:
    """Create an empty profile for a user."""
    return await service.create_profile(body.user_id, body.kind)


@router.get("/profiles/{profile_id}/permissions", response_model=ProfilePermissionDetail)
async def get_profile_permissions(
    profile_id: UUID,
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.VIEW_USER_PERMISSIONS))],
    service: Annotated[ResolutionService, Depends(get_resolution_service)],
    cache: Annotated[CacheService, Depends(get_cache_service)],
) -> ProfilePermissionDetail:
    """Get the effective permissions of a profile with their provenance.

    Response is cached until the profile's grants or the catalog change.
    """
    cached = await cache.get_profile_permissions(profile_id)
    if cached:
        return ProfilePermissionDetail(**cached)

    result = await service.get_permission_detail(profile_id)
    await cache.set_profile_permissions(profile_id, result)
    return result


# ============================================================================
# Matrix
# ============================================================================


@router.get("/matrix", response_model=PermissionMatrixResponse)
async def get_permission_matrix(
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.VIEW_PERMISSION_MATRIX))],
    service: Annotated[MatrixService, Depends(get_matrix_service)],
    cache: Annotated[CacheService, Depends(get_cache_service)],
    category: str | None = Query(default=None, max_length=50, description="Filter by category"),
    profile_kind: ProfileKind | None = Query(default=None, description="Profile kind"),
) -> PermissionMatrixResponse:
    """Get the profiles x permissions matrix.

    Response is cached until grants or the catalog change.
    """
    category = sanitize_category(category)
    profile_kind = profile_kind or default_profile_kind()
    filters = ("permissions", profile_kind.value, category or "all")

    cached = await cache.get_matrix(*filters)
    if cached:
        return PermissionMatrixResponse(**cached)

    result = await service.get_matrix(kind=profile_kind, category=category)
    await cache.set_matrix(result, *filters)
    return result


@router.get("/role-matrix", response_model=RoleMatrixResponse)
async def get_role_matrix(
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.VIEW_PERMISSION_MATRIX))],
    service: Annotated[MatrixService, Depends(get_matrix_service)],
    cache: Annotated[CacheService, Depends(get_cache_service)],
    profile_kind: ProfileKind | None = Query(default=None, description="Profile kind"),
) -> RoleMatrixResponse:
    """Get the profiles x roles matrix."""
    profile_kind = profile_kind or default_profile_kind()
    filters = ("roles", profile_kind.value)

    cached = await cache.get_matrix(*filters)
    if cached:
        return RoleMatrixResponse(**cached)

    result = await service.get_role_matrix(kind=profile_kind)
    await cache.set_matrix(result, *filters)
    return result


@router.post("/bulk-update", response_model=BulkUpdateResponse)
@limiter.limit(BULK_UPDATE_LIMIT)
async def bulk_update(
    request: Request,
    body: BulkUpdateRequest,
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.BULK_MANAGE_PERMISSIONS))],
    service: Annotated[BulkMutationService, Depends(get_bulk_mutation_service)],
) -> BulkUpdateResponse:
    """Apply a batch of grant/revoke operations.

    Operations are applied one by one; the response lists every failure
    instead of failing the request. An oversized batch is rejected whole.
    """
    report = await service.apply_user_operations(
        [item.model_dump() for item in body.operations],
        kind=body.profile_kind,
        actor_id=current_user.id,
    )
    return BulkUpdateResponse(
        success=True,
        processed=report.processed,
        successful=report.successful,
        skipped_duplicates=report.skipped_duplicates,
        failures=[BulkFailureResponse(**f.model_dump()) for f in report.failures],
        changed_profile_ids=report.changed_profile_ids,
    )


@router.get("/health", response_model=CatalogHealthResponse)
async def permission_system_health(
    current_user: Annotated[CurrentUser, Depends(require_permission(Permissions.VIEW_PERMISSIONS))],
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CatalogHealthResponse:
    """Report permission catalog health."""
    return await service.health_check()
