"""Permission and role matrix builder."""

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from jood_api.models.domain.legacy_role import LegacyRoleMapping
from jood_api.models.domain.matrix import (
    MatrixCell,
    MatrixColumn,
    MatrixRow,
    PermissionMatrix,
    RoleMatrix,
    RoleMatrixColumn,
    RoleMatrixRow,
)
from jood_api.models.domain.profile import ProfileKind
from jood_api.models.dto.permission_management import (
    MatrixEntry,
    MatrixPermissionColumn,
    MatrixRoleColumn,
    MatrixSummary,
    PermissionMatrixResponse,
    PermissionSourceCounts,
    RoleMatrixEntry,
    RoleMatrixResponse,
)
from jood_api.models.orm.permission import PermissionORM
from jood_api.models.orm.profile import ProfileORM
from jood_api.models.orm.role import RoleORM
from jood_api.repositories.permission_repository import PermissionRepository
from jood_api.repositories.profile_repository import ProfileRepository
from jood_api.repositories.role_repository import RoleRepository
from jood_api.services.legacy_role_service import get_legacy_role_mapping
from jood_api.services.resolution_service import ResolutionEngine, matrix_user

logger = logging.getLogger(__name__)


def build_matrix(
    profiles: Sequence[ProfileORM],
    permissions: Sequence[PermissionORM],
    engine: ResolutionEngine,
) -> PermissionMatrix:
    """Build the profiles x permissions grid.

    Each profile is resolved exactly once; every cell is then a hash lookup in
    that profile's effective set. Columns keep the order of ``permissions``,
    which callers pass in catalog order.

    Args:
        profiles: Profiles with grants loaded, in row order
        permissions: Permission columns in display order
        engine: Resolution engine over the active catalog

    Returns:
        PermissionMatrix
    """
    columns = [
        MatrixColumn(id=p.id, name=p.name, category=p.category, priority=p.priority)
        for p in permissions
    ]
    rows = []
    for profile in profiles:
        effective = engine.resolve(profile)
        cells = [
            MatrixCell(has=True, sources=sorted(effective.provenance(column.name)))
            if column.name in effective
            else MatrixCell(has=False)
            for column in columns
        ]
        rows.append(
            MatrixRow(
                profile_id=profile.id,
                user=matrix_user(profile),
                cells=cells,
                permission_sources=effective.source_counts(),
            )
        )
    return PermissionMatrix(columns=columns, rows=rows)


def _active_permission_count(role: RoleORM) -> int:
    return sum(1 for p in role.permissions if p.is_active)


def build_role_matrix(profiles: Sequence[ProfileORM], roles: Sequence[RoleORM]) -> RoleMatrix:
    """Build the profiles x roles grid from direct role membership.

    Args:
        profiles: Profiles with roles loaded, in row order
        roles: Role columns in display order

    Returns:
        RoleMatrix
    """
    columns = [
        RoleMatrixColumn(id=r.id, name=r.name, permission_count=_active_permission_count(r))
        for r in roles
    ]
    rows = []
    for profile in profiles:
        held = {role.id for role in profile.roles}
        rows.append(
            RoleMatrixRow(
                profile_id=profile.id,
                user=matrix_user(profile),
                cells=[column.id in held for column in columns],
            )
        )
    return RoleMatrix(columns=columns, rows=rows)


class MatrixService:
    """Service assembling matrix read payloads."""

    def __init__(
        self,
        session: AsyncSession,
        legacy_mapping: LegacyRoleMapping | None = None,
    ) -> None:
        """Initialize service with database session."""
        self.session = session
        self.legacy_mapping = legacy_mapping or get_legacy_role_mapping()
        self.permission_repo = PermissionRepository(session)
        self.role_repo = RoleRepository(session)
        self.profile_repo = ProfileRepository(session)

    async def get_matrix(
        self,
        kind: ProfileKind = ProfileKind.ADMIN,
        category: str | None = None,
    ) -> PermissionMatrixResponse:
        """Build the permission matrix payload.

        Args:
            kind: Profile kind to list
            category: Restrict permission columns to one category

        Returns:
            PermissionMatrixResponse
        """
        active = await self.permission_repo.get_all_active()
        engine = ResolutionEngine(active, self.legacy_mapping)
        columns = [p for p in active if p.category == category] if category else active

        profiles = await self.profile_repo.get_all_with_grants(kind.value)
        roles = await self.role_repo.get_all_active_with_permissions()
        grid = build_matrix(profiles, columns, engine)

        entries = [
            MatrixEntry(
                profile_id=row.profile_id,
                user=row.user,
                permissions=[
                    column.name for column, cell in zip(grid.columns, row.cells) if cell.has
                ],
                permission_sources=PermissionSourceCounts(**row.permission_sources),
                cells=row.cells,
            )
            for row in grid.rows
        ]

        logger.debug(
            "Built %s permission matrix: %d profiles x %d permissions",
            kind.value,
            len(grid.rows),
            len(grid.columns),
        )
        return PermissionMatrixResponse(
            users=[row.user for row in grid.rows],
            available_permissions=[
                MatrixPermissionColumn(**column.model_dump()) for column in grid.columns
            ],
            available_roles=[
                MatrixRoleColumn(
                    id=role.id,
                    name=role.name,
                    permission_count=_active_permission_count(role),
                )
                for role in roles
            ],
            matrix=entries,
            summary=MatrixSummary(
                total_users=len(grid.rows),
                total_permissions=len(grid.columns),
                total_roles=len(roles),
            ),
        )

    async def get_role_matrix(self, kind: ProfileKind = ProfileKind.ADMIN) -> RoleMatrixResponse:
        """Build the role matrix payload."""
        profiles = await self.profile_repo.get_all_with_grants(kind.value)
        roles = await self.role_repo.get_all_active_with_permissions()
        grid = build_role_matrix(profiles, roles)

        return RoleMatrixResponse(
            available_roles=[MatrixRoleColumn(**column.model_dump()) for column in grid.columns],
            matrix=[
                RoleMatrixEntry(
                    profile_id=row.profile_id,
                    user=row.user,
                    roles=[column.name for column, has in zip(grid.columns, row.cells) if has],
                    cells=row.cells,
                )
                for row in grid.rows
            ],
        )
