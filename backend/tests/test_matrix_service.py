"""Tests for the permission and role matrix."""

from uuid import uuid4

import pytest

from jood_api.models.domain.profile import ProfileKind
from jood_api.repositories.permission_repository import PermissionRepository
from jood_api.repositories.profile_repository import ProfileRepository
from jood_api.repositories.role_repository import RoleRepository
from jood_api.services.catalog_service import CatalogService
from jood_api.services.matrix_service import MatrixService, build_matrix, build_role_matrix
from jood_api.services.resolution_service import ResolutionEngine


class CountingEngine(ResolutionEngine):
    """Engine counting resolve calls."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.resolve_calls = 0

    def resolve(self, profile):
        self.resolve_calls += 1
        return super().resolve(profile)


class TestBuildMatrix:
    """Grid construction."""

    async def test_cells_agree_with_resolution(self, db_session, seeded, legacy_mapping) -> None:
        permissions = await PermissionRepository(db_session).get_all_active()
        profiles = await ProfileRepository(db_session).get_all_with_grants("admin")
        engine = ResolutionEngine(permissions, legacy_mapping)

        grid = build_matrix(profiles, permissions, engine)

        for profile in profiles:
            effective = engine.resolve(profile)
            for permission in permissions:
                cell = grid.cell(profile.id, permission.name)
                assert cell.has == effective.contains(permission.name)
                assert set(cell.sources) == effective.provenance(permission.name)

    async def test_each_profile_is_resolved_once(self, db_session, seeded, legacy_mapping) -> None:
        permissions = await PermissionRepository(db_session).get_all_active()
        profiles = await ProfileRepository(db_session).get_all_with_grants("admin")
        engine = CountingEngine(permissions, legacy_mapping)

        build_matrix(profiles, permissions, engine)

        assert engine.resolve_calls == len(profiles) == 3

    async def test_rows_follow_owner_email(self, db_session, seeded, legacy_mapping) -> None:
        permissions = await PermissionRepository(db_session).get_all_active()
        profiles = await ProfileRepository(db_session).get_all_with_grants("admin")

        grid = build_matrix(profiles, permissions, ResolutionEngine(permissions, legacy_mapping))

        assert [row.user.email for row in grid.rows] == [
            "clerk@jood.test",
            "manager@jood.test",
            "root@jood.test",
        ]

    async def test_role_matrix_uses_membership(self, db_session, seeded) -> None:
        profiles = await ProfileRepository(db_session).get_all_with_grants("admin")
        roles = await RoleRepository(db_session).get_all_active_with_permissions()

        grid = build_role_matrix(profiles, roles)

        assert [column.name for column in grid.columns] == ["kitchen_manager_role"]
        assert grid.columns[0].permission_count == 2
        held = {row.user.email: row.cells for row in grid.rows}
        assert held == {
            "clerk@jood.test": [False],
            "manager@jood.test": [True],
            "root@jood.test": [False],
        }


class TestMatrixService:
    """Matrix endpoint payloads."""

    async def test_matrix_payload(self, db_session, seeded, legacy_mapping) -> None:
        matrix = await MatrixService(db_session, legacy_mapping).get_matrix()

        assert matrix.summary.total_users == 3
        assert matrix.summary.total_permissions == 12
        assert matrix.summary.total_roles == 1
        assert [c.name for c in matrix.available_permissions][:3] == [
            "view_dashboard",
            "view_kitchen",
            "manage_kitchen",
        ]
        assert matrix.available_roles[0].permission_count == 2

        rows = {entry.user.email: entry for entry in matrix.matrix}
        assert rows["clerk@jood.test"].permissions == ["view_logs"]
        assert rows["clerk@jood.test"].permission_sources.direct == 1
        assert rows["manager@jood.test"].permissions == ["view_dashboard", "manage_kitchen"]
        assert rows["manager@jood.test"].permission_sources.from_roles == 2
        assert len(rows["root@jood.test"].permissions) == 12
        assert rows["root@jood.test"].permission_sources.legacy == 12
        assert rows["root@jood.test"].user.roles == ["ROLE_SUPER_ADMIN"]

    async def test_category_filter_limits_columns(self, db_session, seeded, legacy_mapping) -> None:
        matrix = await MatrixService(db_session, legacy_mapping).get_matrix(category="kitchen")

        assert [c.name for c in matrix.available_permissions] == ["view_kitchen", "manage_kitchen"]
        rows = {entry.user.email: entry for entry in matrix.matrix}
        assert rows["manager@jood.test"].permissions == ["manage_kitchen"]
        assert [cell.has for cell in rows["manager@jood.test"].cells] == [False, True]
        assert rows["clerk@jood.test"].permissions == []

    async def test_profile_kind_filter(self, db_session, seeded, legacy_mapping) -> None:
        matrix = await MatrixService(db_session, legacy_mapping).get_matrix(kind=ProfileKind.KITCHEN)

        assert matrix.matrix == []
        assert matrix.summary.total_users == 0

    async def test_deactivated_permission_leaves_matrix(
        self, db_session, seeded, legacy_mapping
    ) -> None:
        await CatalogService(db_session).deactivate_permission(seeded.permission_ids["view_logs"])

        matrix = await MatrixService(db_session, legacy_mapping).get_matrix()

        assert "view_logs" not in [c.name for c in matrix.available_permissions]
        rows = {entry.user.email: entry for entry in matrix.matrix}
        assert rows["clerk@jood.test"].permissions == []

    async def test_role_matrix_payload(self, db_session, seeded, legacy_mapping) -> None:
        matrix = await MatrixService(db_session, legacy_mapping).get_role_matrix()

        rows = {entry.user.email: entry for entry in matrix.matrix}
        assert rows["manager@jood.test"].roles == ["kitchen_manager_role"]
        assert rows["clerk@jood.test"].roles == []

    async def test_cell_lookup_of_unknown_profile(self, db_session, seeded, legacy_mapping) -> None:
        permissions = await PermissionRepository(db_session).get_all_active()
        grid = build_matrix([], permissions, ResolutionEngine(permissions, legacy_mapping))

        with pytest.raises(KeyError):
            grid.cell(uuid4(), "view_logs")
