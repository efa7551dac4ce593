"""Tests for the permission and role catalog."""

from uuid import uuid4

import pytest

from jood_api.exceptions import (
    DuplicateNameError,
    PermissionNotFoundError,
    RoleNotFoundError,
    ValidationError,
)
from jood_api.models.dto.permission_management import PermissionCreateRequest, RoleCreateRequest
from jood_api.repositories.permission_repository import PermissionRepository
from jood_api.repositories.role_repository import RoleRepository
from jood_api.services.catalog_service import CatalogService

from conftest import CATALOG


def _permission_request(**overrides) -> PermissionCreateRequest:
    values = {
        "name": "manage_menu",
        "description": "Edit the menu",
        "category": "menu",
        "priority": 0,
    }
    values.update(overrides)
    return PermissionCreateRequest(**values)


class TestPermissionCatalog:
    """Permission catalog operations."""

    async def test_create_permission(self, db_session, seeded) -> None:
        service = CatalogService(db_session)

        created = await service.create_permission(_permission_request(priority=3))

        assert created.name == "manage_menu"
        assert created.category == "menu"
        assert created.priority == 3
        assert created.is_active

    @pytest.mark.parametrize("name", ["ab", "x" * 101, "x" * 300, ""])
    async def test_create_rejects_bad_name_length(self, db_session, name: str) -> None:
        with pytest.raises(ValidationError):
            await CatalogService(db_session).create_permission(_permission_request(name=name))

    @pytest.mark.parametrize("name", ["abc", "x" * 100])
    async def test_create_accepts_boundary_name_lengths(self, db_session, name: str) -> None:
        created = await CatalogService(db_session).create_permission(_permission_request(name=name))
        assert created.name == name

    async def test_create_rejects_blank_description(self, db_session) -> None:
        with pytest.raises(ValidationError):
            await CatalogService(db_session).create_permission(_permission_request(description="   "))

    async def test_duplicate_name_is_rejected(self, db_session, seeded) -> None:
        with pytest.raises(DuplicateNameError):
            await CatalogService(db_session).create_permission(
                _permission_request(name="view_logs")
            )

    async def test_name_race_is_reported_as_duplicate(self, db_session, seeded, monkeypatch) -> None:
        async def name_not_seen(self, name):
            return None

        notified = []

        async def on_changed() -> None:
            notified.append(True)

        # A concurrent create took the name after the duplicate check
        monkeypatch.setattr(PermissionRepository, "get_by_name", name_not_seen)
        service = CatalogService(db_session, on_catalog_changed=on_changed)

        with pytest.raises(DuplicateNameError):
            await service.create_permission(_permission_request(name="view_logs"))

        assert notified == []
        health = await service.health_check()
        assert health.permissions_count == len(CATALOG)

    async def test_duplicate_check_includes_inactive_entries(self, db_session, seeded) -> None:
        service = CatalogService(db_session)
        await service.deactivate_permission(seeded.permission_ids["view_logs"])

        with pytest.raises(DuplicateNameError):
            await service.create_permission(_permission_request(name="view_logs"))

    async def test_names_are_case_sensitive(self, db_session, seeded) -> None:
        created = await CatalogService(db_session).create_permission(
            _permission_request(name="VIEW_LOGS")
        )
        assert created.name == "VIEW_LOGS"

    async def test_deactivate_is_idempotent(self, db_session, seeded) -> None:
        service = CatalogService(db_session)
        permission_id = seeded.permission_ids["view_logs"]

        first = await service.deactivate_permission(permission_id)
        second = await service.deactivate_permission(permission_id)

        assert not first.is_active
        assert not second.is_active
        assert "view_logs" not in [p.name for p in await service.list_active()]

    async def test_deactivate_unknown_permission(self, db_session) -> None:
        with pytest.raises(PermissionNotFoundError):
            await CatalogService(db_session).deactivate_permission(uuid4())

    async def test_list_by_category_orders_by_priority_then_name(self, db_session, seeded) -> None:
        permissions = await CatalogService(db_session).list_by_category("permissions")

        assert [p.name for p in permissions] == [
            "view_permissions",
            "manage_permissions",
            "manage_roles",
            "bulk_manage_permissions",
            "view_permission_matrix",
            "manage_user_permissions",
            "view_user_permissions",
        ]

    async def test_list_active_orders_by_category_first(self, db_session, seeded) -> None:
        permissions = await CatalogService(db_session).list_active()

        categories = [p.category for p in permissions]
        assert categories == sorted(categories)
        assert [p.name for p in permissions if p.category == "kitchen"] == [
            "view_kitchen",
            "manage_kitchen",
        ]

    async def test_grouped_by_category(self, db_session, seeded) -> None:
        catalog = await CatalogService(db_session).grouped_by_category()

        assert [group.category for group in catalog.categories] == [
            "dashboard",
            "kitchen",
            "orders",
            "permissions",
            "system",
        ]
        assert catalog.total_count == 12

    async def test_search_matches_name_and_description(self, db_session, seeded) -> None:
        service = CatalogService(db_session)

        assert [p.name for p in await service.search("kitchen")] == [
            "manage_kitchen",
            "view_kitchen",
        ]
        assert [p.name for p in await service.search("view logs")] == ["view_logs"]

    async def test_search_treats_wildcards_literally(self, db_session, seeded) -> None:
        assert await CatalogService(db_session).search("%") == []

    async def test_list_categories(self, db_session, seeded) -> None:
        categories = await CatalogService(db_session).list_categories()
        assert categories == ["dashboard", "kitchen", "orders", "permissions", "system"]

    async def test_changes_notify_hook(self, db_session, seeded) -> None:
        calls = []

        async def on_changed() -> None:
            calls.append(True)

        service = CatalogService(db_session, on_catalog_changed=on_changed)
        await service.deactivate_permission(seeded.permission_ids["view_logs"])
        await service.deactivate_permission(seeded.permission_ids["view_logs"])

        assert calls == [True]


class TestRoleCatalog:
    """Role catalog operations."""

    async def test_create_role_with_permissions(self, db_session, seeded) -> None:
        service = CatalogService(db_session)

        role = await service.create_role(
            RoleCreateRequest(
                name="auditor",
                description="Reads logs",
                permission_ids=[seeded.permission_ids["view_logs"]],
            )
        )

        assert role.name == "auditor"
        assert role.permission_count == 1
        assert [p.name for p in role.permissions] == ["view_logs"]

    async def test_create_role_with_unknown_permission_fails(self, db_session, seeded) -> None:
        service = CatalogService(db_session)

        with pytest.raises(PermissionNotFoundError):
            await service.create_role(
                RoleCreateRequest(name="auditor", description="Reads logs", permission_ids=[uuid4()])
            )

        names = [role.name for role in (await service.list_active_roles()).roles]
        assert names == ["kitchen_manager_role"]

    async def test_duplicate_role_name(self, db_session, seeded) -> None:
        with pytest.raises(DuplicateNameError):
            await CatalogService(db_session).create_role(
                RoleCreateRequest(name="kitchen_manager_role", description="Again")
            )

    async def test_role_name_race_is_reported_as_duplicate(
        self, db_session, seeded, monkeypatch
    ) -> None:
        async def name_not_seen(self, name):
            return None

        monkeypatch.setattr(RoleRepository, "get_by_name", name_not_seen)
        service = CatalogService(db_session)

        with pytest.raises(DuplicateNameError):
            await service.create_role(
                RoleCreateRequest(name="kitchen_manager_role", description="Again")
            )

        assert (await service.health_check()).roles_count == 1

    async def test_set_role_permissions_replaces_bundle(self, db_session, seeded) -> None:
        service = CatalogService(db_session)

        role = await service.set_role_permissions(
            seeded.role_id,
            [seeded.permission_ids["view_orders"], seeded.permission_ids["view_orders"]],
        )

        assert [p.name for p in role.permissions] == ["view_orders"]

    async def test_set_permissions_of_unknown_role(self, db_session, seeded) -> None:
        with pytest.raises(RoleNotFoundError):
            await CatalogService(db_session).set_role_permissions(uuid4(), [])

    async def test_role_deactivation_round_trip(self, db_session, seeded) -> None:
        service = CatalogService(db_session)

        await service.deactivate_role(seeded.role_id)
        await service.deactivate_role(seeded.role_id)
        assert (await service.list_active_roles()).total_count == 0

        restored = await service.activate_role(seeded.role_id)
        assert restored.is_active
        assert restored.permission_count == 2

    async def test_roles_with_permission(self, db_session, seeded) -> None:
        service = CatalogService(db_session)

        assert await service.roles_with_permission("manage_kitchen") == ["kitchen_manager_role"]
        assert await service.roles_with_permission("view_logs") == []

        await service.deactivate_permission(seeded.permission_ids["manage_kitchen"])
        assert await service.roles_with_permission("manage_kitchen") == []

    async def test_health_check(self, db_session, seeded) -> None:
        health = await CatalogService(db_session).health_check()

        assert health.status == "healthy"
        assert health.permissions_count == 12
        assert health.roles_count == 1
        assert health.legacy_mapping_version == "2025.07.1"
