"""Profile domain types."""

from enum import StrEnum

from jood_api.config import get_settings


class ProfileKind(StrEnum):
    """Kinds of authorization-bearing profiles a user can hold."""

    ADMIN = "admin"
    KITCHEN = "kitchen"


def default_profile_kind() -> ProfileKind:
    """Profile kind used when a request does not name one."""
    return ProfileKind(get_settings().default_profile_kind)
