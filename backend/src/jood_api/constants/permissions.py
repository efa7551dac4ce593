"""Permission names guarding the permission management API."""


class Permissions:
    """Permission names checked by the HTTP layer."""

    VIEW_PERMISSIONS = "view_permissions"
    MANAGE_PERMISSIONS = "manage_permissions"
    MANAGE_ROLES = "manage_roles"
    VIEW_PERMISSION_MATRIX = "view_permission_matrix"
    BULK_MANAGE_PERMISSIONS = "bulk_manage_permissions"
    VIEW_USER_PERMISSIONS = "view_user_permissions"
    MANAGE_USER_PERMISSIONS = "manage_user_permissions"
