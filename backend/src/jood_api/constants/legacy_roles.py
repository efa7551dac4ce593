"""Built-in legacy role mapping table.

Account-level role strings predate the permission catalog. This table keeps
them meaningful: each tag implies a fixed list of permission names. Bump the
version whenever an entry changes.
"""

from jood_api.models.domain.legacy_role import ALL_PERMISSIONS

LEGACY_ROLE_MAPPING_VERSION = "2025.07.1"

LEGACY_ROLE_MAPPING: dict[str, list[str]] = {
    "super_admin": [ALL_PERMISSIONS],
    "admin": ["view_dashboard", "dashboard"],
    "kitchen": ["view_kitchen", "view_orders", "kitchen", "orders"],
}
