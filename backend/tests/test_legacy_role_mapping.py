"""Tests for the legacy role mapping table."""

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from jood_api.exceptions import ValidationError
from jood_api.models.domain.legacy_role import LegacyRoleMapping, normalize_legacy_tag
from jood_api.services.legacy_role_service import default_legacy_role_mapping, load_legacy_role_mapping


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("ROLE_SUPER_ADMIN", "super_admin"),
        ("role_admin", "admin"),
        ("  Kitchen ", "kitchen"),
        ("super_admin", "super_admin"),
    ],
)
def test_normalize_legacy_tag(raw: str, expected: str) -> None:
    assert normalize_legacy_tag(raw) == expected


def test_builtin_mapping() -> None:
    mapping = default_legacy_role_mapping()

    assert mapping.version == "2025.07.1"
    assert mapping.implied_names("ROLE_SUPER_ADMIN") == ["*"]
    assert mapping.implied_names("ROLE_ADMIN") == ["view_dashboard", "dashboard"]
    assert mapping.implied_names("ROLE_KITCHEN") == ["view_kitchen", "view_orders", "kitchen", "orders"]
    assert mapping.implied_names("ROLE_USER") == []


def test_entries_are_normalized_and_merged() -> None:
    mapping = LegacyRoleMapping(
        version="1",
        entries={"ROLE_ADMIN": ["view_dashboard", " "], "admin": ["view_dashboard", "view_logs"]},
    )

    assert mapping.entries == {"admin": ["view_dashboard", "view_logs"]}


def test_mapping_requires_version() -> None:
    with pytest.raises(PydanticValidationError):
        LegacyRoleMapping(version="", entries={})


def test_load_mapping_from_file(tmp_path) -> None:
    path = tmp_path / "legacy.json"
    path.write_text(json.dumps({"version": "2025.08", "entries": {"ROLE_MANAGER": ["view_orders"]}}))

    mapping = load_legacy_role_mapping(path)

    assert mapping.version == "2025.08"
    assert mapping.implied_names("manager") == ["view_orders"]


def test_load_without_path_uses_builtin_table() -> None:
    assert load_legacy_role_mapping(None) == default_legacy_role_mapping()


@pytest.mark.parametrize(
    "content",
    ["not json", json.dumps({"entries": {}}), json.dumps({"version": "1", "entries": {"": ["x"]}})],
)
def test_invalid_mapping_file(tmp_path, content: str) -> None:
    path = tmp_path / "legacy.json"
    path.write_text(content)

    with pytest.raises(ValidationError):
        load_legacy_role_mapping(path)


def test_missing_mapping_file(tmp_path) -> None:
    with pytest.raises(ValidationError):
        load_legacy_role_mapping(tmp_path / "missing.json")
