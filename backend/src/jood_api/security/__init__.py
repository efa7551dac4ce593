"""Security package."""

from jood_api.security.auth import decode_token, get_current_user, require_permission

__all__ = [
    "decode_token",
    "get_current_user",
    "require_permission",
]
