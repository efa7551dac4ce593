"""Permission management DTOs."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from jood_api.models.domain.matrix import MatrixCell, MatrixUser
from jood_api.models.domain.profile import ProfileKind, default_profile_kind

# =============================================================================
# Catalog
# =============================================================================


class PermissionCreateRequest(BaseModel):
    """Permission creation request.

    Length and blank checks happen in the catalog service so that they are
    reported as domain validation errors.
    """

    name: str
    description: str = Field(default="", max_length=1000)
    category: str = Field(default="general", min_length=1, max_length=50)
    priority: int = 0
    is_active: bool = True


class PermissionResponse(BaseModel):
    """Permission response DTO."""

    id: UUID
    name: str
    description: str
    category: str
    priority: int
    is_active: bool

    model_config = {"from_attributes": True}


class PermissionsByCategory(BaseModel):
    """Permissions grouped by category."""

    category: str
    permissions: list[PermissionResponse]


class PermissionCatalogResponse(BaseModel):
    """Grouped permission catalog."""

    categories: list[PermissionsByCategory]
    total_count: int


class RoleCreateRequest(BaseModel):
    """Role creation request."""

    name: str
    description: str = Field(default="", max_length=1000)
    priority: int = 0
    is_active: bool = True
    permission_ids: list[UUID] = Field(default=[], max_length=500)


class RolePermissionsUpdateRequest(BaseModel):
    """Replace the permission bundle of a role."""

    permission_ids: list[UUID] = Field(default=[], max_length=500)


class RolePermissionSummary(BaseModel):
    """Permission entry nested in a role response."""

    id: UUID
    name: str
    category: str

    model_config = {"from_attributes": True}


class RoleResponse(BaseModel):
    """Role response DTO."""

    id: UUID
    name: str
    description: str
    priority: int
    is_active: bool
    permissions: list[RolePermissionSummary]
    permission_count: int


class RoleListResponse(BaseModel):
    """Role list response."""

    roles: list[RoleResponse]
    total_count: int


class CatalogHealthResponse(BaseModel):
    """Permission system health summary."""

    status: str
    permissions_count: int = 0
    roles_count: int = 0
    legacy_mapping_version: str | None = None


# =============================================================================
# Profiles and resolution
# =============================================================================


class ProfileCreateRequest(BaseModel):
    """Create an empty profile for a user."""

    user_id: UUID
    kind: ProfileKind = Field(default_factory=default_profile_kind)


class ProfileResponse(BaseModel):
    """Profile response DTO."""

    id: UUID
    user_id: UUID
    kind: ProfileKind

    model_config = {"from_attributes": True}


class EffectivePermission(BaseModel):
    """Effective permission with the reasons it is granted."""

    name: str
    category: str
    sources: list[str]


class PermissionSourceCounts(BaseModel):
    """Number of effective permissions per grant source."""

    direct: int = 0
    from_roles: int = 0
    legacy: int = 0


class ProfilePermissionDetail(BaseModel):
    """Why-does-this-user-have-X audit view of a profile."""

    profile_id: UUID
    kind: ProfileKind
    user: MatrixUser
    permissions: list[EffectivePermission]
    permission_sources: PermissionSourceCounts
    total_permissions: int


# =============================================================================
# Matrix
# =============================================================================


class MatrixPermissionColumn(BaseModel):
    """Available permission column."""

    id: UUID
    name: str
    category: str
    priority: int


class MatrixRoleColumn(BaseModel):
    """Available role column."""

    id: UUID
    name: str
    permission_count: int


class MatrixEntry(BaseModel):
    """Matrix entry for one profile."""

    profile_id: UUID
    user: MatrixUser
    permissions: list[str]
    permission_sources: PermissionSourceCounts
    cells: list[MatrixCell]


class MatrixSummary(BaseModel):
    """Matrix totals."""

    total_users: int
    total_permissions: int
    total_roles: int


class PermissionMatrixResponse(BaseModel):
    """Permission matrix read payload."""

    users: list[MatrixUser]
    available_permissions: list[MatrixPermissionColumn]
    available_roles: list[MatrixRoleColumn]
    matrix: list[MatrixEntry]
    summary: MatrixSummary


class RoleMatrixEntry(BaseModel):
    """Role matrix entry for one profile."""

    profile_id: UUID
    user: MatrixUser
    roles: list[str]
    cells: list[bool]


class RoleMatrixResponse(BaseModel):
    """Role matrix read payload."""

    available_roles: list[MatrixRoleColumn]
    matrix: list[RoleMatrixEntry]


# =============================================================================
# Bulk update
# =============================================================================


class BulkOperationItem(BaseModel):
    """Raw bulk operation as submitted by the matrix UI.

    Fields are loosely typed on purpose: a malformed entry becomes a
    per-operation failure instead of rejecting the whole batch.
    """

    user_id: Any = None
    action: Any = None
    target_id: Any = None


class BulkUpdateRequest(BaseModel):
    """Bulk grant/revoke request."""

    operations: list[BulkOperationItem]
    profile_kind: ProfileKind = Field(default_factory=default_profile_kind)


class BulkFailureResponse(BaseModel):
    """Failed operation entry."""

    operation: dict[str, Any]
    reason: str
    error: str


class BulkUpdateResponse(BaseModel):
    """Bulk grant/revoke outcome."""

    success: bool
    processed: int
    successful: int
    skipped_duplicates: int
    failures: list[BulkFailureResponse]
    changed_profile_ids: list[UUID]
