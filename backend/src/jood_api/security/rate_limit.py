"""Rate limiting configuration for permission management endpoints."""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from jood_api.config import get_settings


def get_client_ip(request: Request) -> str:
    """Get the client address used as rate limit key.

    Args:
        request: The incoming request object.

    Returns:
        The client IP address.
    """
    return get_remote_address(request)


def _get_storage_uri() -> str | None:
    """Get rate limiter storage URI.

    Uses Redis database 1 so rate limit counters never collide with cache keys.

    Returns:
        Redis URI or None for in-memory storage.
    """
    settings = get_settings()

    redis_url = str(settings.redis_url) if settings.redis_url else None
    if redis_url:
        if redis_url.endswith("/"):
            return f"{redis_url}1"
        elif redis_url.count("/") == 2:
            return f"{redis_url}/1"
        return redis_url

    if settings.environment == "production":
        raise ValueError(
            "REDIS_URL must be configured in production for distributed rate limiting."
        )

    return None


_settings = get_settings()

limiter = Limiter(
    key_func=get_client_ip,
    default_limits=[f"{_settings.rate_limit_default}/minute"],
    storage_uri=_get_storage_uri(),
    enabled=_settings.rate_limit_enabled,
)

BULK_UPDATE_LIMIT = f"{_settings.rate_limit_bulk_update}/minute"
