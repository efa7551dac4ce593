"""Domain-specific exceptions for the Jood Kitchen API.

These exceptions provide a clean separation between service-layer errors
and HTTP responses, avoiding string matching in routers.
"""

from typing import Any


class JoodAPIError(Exception):
    """Base exception for all Jood Kitchen API errors."""

    def __init__(self, message: str = "An error occurred", details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class NotFoundError(JoodAPIError):
    """Base class for resource not found errors."""

    pass


class UserNotFoundError(NotFoundError):
    """Raised when a user account cannot be found."""

    def __init__(self, user_id: str | None = None) -> None:
        details = {"user_id": str(user_id)} if user_id else {}
        super().__init__("User not found", details)


class ProfileNotFoundError(NotFoundError):
    """Raised when a profile cannot be found."""

    def __init__(self, profile_id: str | None = None, user_id: str | None = None) -> None:
        details: dict[str, Any] = {}
        if profile_id:
            details["profile_id"] = str(profile_id)
        if user_id:
            details["user_id"] = str(user_id)
        super().__init__("Profile not found", details)


class PermissionNotFoundError(NotFoundError):
    """Raised when a permission cannot be found."""

    def __init__(self, permission_id: str | None = None) -> None:
        details = {"permission_id": str(permission_id)} if permission_id else {}
        super().__init__("Permission not found", details)


class RoleNotFoundError(NotFoundError):
    """Raised when a role cannot be found."""

    def __init__(self, role_id: str | None = None, role_name: str | None = None) -> None:
        details: dict[str, Any] = {}
        if role_id:
            details["role_id"] = str(role_id)
        if role_name:
            details["role_name"] = role_name
        super().__init__("Role not found", details)


# =============================================================================
# Conflict Errors (409)
# =============================================================================


class ConflictError(JoodAPIError):
    """Base class for resource conflict errors."""

    pass


class DuplicateNameError(ConflictError):
    """Raised when a catalog entry with the same name already exists."""

    def __init__(self, entity: str, name: str) -> None:
        super().__init__(f"{entity} name already exists", {"entity": entity, "name": name})


class ProfileAlreadyExistsError(ConflictError):
    """Raised when a user already holds a profile of the requested kind."""

    def __init__(self, user_id: str, kind: str) -> None:
        super().__init__("Profile already exists", {"user_id": str(user_id), "kind": kind})


class VersionConflictError(ConflictError):
    """Raised when a profile version stamp does not match.

    Reserved for optimistic locking of grant mutations; not raised yet.
    """

    def __init__(self, profile_id: str, expected: int, actual: int) -> None:
        super().__init__(
            "Profile was modified concurrently",
            {"profile_id": str(profile_id), "expected": expected, "actual": actual},
        )


# =============================================================================
# Authorization Errors (403)
# =============================================================================


class ForbiddenError(JoodAPIError):
    """Base class for authorization errors."""

    pass


class OperationForbiddenError(ForbiddenError):
    """Raised when the caller may not change a user's grants."""

    def __init__(self, user_id: str, reason: str) -> None:
        super().__init__("Permission denied", {"user_id": str(user_id), "reason": reason})


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(JoodAPIError):
    """Base class for validation errors."""

    pass


class InactiveTargetError(ValidationError):
    """Raised when a bulk operation targets a soft-disabled permission or role."""

    def __init__(self, entity: str, target_id: str) -> None:
        super().__init__(f"{entity} is inactive", {"target_id": str(target_id)})


class InvalidOperationError(ValidationError):
    """Raised when a bulk operation is malformed."""

    pass


TAXONOMY = (ValidationError, DuplicateNameError, NotFoundError, ConflictError, ForbiddenError)


def taxonomy_name(exc: Exception) -> str:
    """Return the error category name reported to API clients.

    Args:
        exc: Raised exception

    Returns:
        One of ValidationError, DuplicateNameError, NotFoundError,
        ConflictError, ForbiddenError, or the exception's own class name
        for anything else
    """
    for category in TAXONOMY:
        if isinstance(exc, category):
            return category.__name__
    return type(exc).__name__
