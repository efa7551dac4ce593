"""Redis caching service for permission reads."""

import json
import logging
from collections.abc import Iterable
from uuid import UUID

import redis.asyncio as redis
from pydantic import BaseModel

from jood_api.config import get_settings

logger = logging.getLogger(__name__)


class CacheConfig:
    """Cache configuration with key prefixes."""

    PREFIX_PROFILE_PERMISSIONS = "profile_permissions"
    PREFIX_PERMISSION_MATRIX = "permission_matrix"


def get_cache_ttl(prefix: str) -> int:
    """Get TTL for a cache prefix from settings.

    Args:
        prefix: Cache key prefix

    Returns:
        TTL in seconds
    """
    settings = get_settings()
    ttl_map = {
        CacheConfig.PREFIX_PROFILE_PERMISSIONS: settings.cache_ttl_permissions,
        CacheConfig.PREFIX_PERMISSION_MATRIX: settings.cache_ttl_matrix,
    }
    return ttl_map.get(prefix, 300)


class CacheService:
    """Service for Redis-based caching of permission reads.

    Every operation degrades to a no-op when Redis is unavailable, so reads
    fall through to the database and writes never fail because of the cache.
    """

    _instance: "CacheService | None" = None

    def __init__(self) -> None:
        """Initialize cache service."""
        self._client: redis.Redis | None = None
        self._connected = False

    @classmethod
    async def get_instance(cls) -> "CacheService":
        """Get or create cache service instance.

        Returns:
            CacheService singleton instance
        """
        if cls._instance is None:
            cls._instance = CacheService()
            await cls._instance._connect()
        return cls._instance

    async def _connect(self) -> None:
        """Connect to Redis server."""
        settings = get_settings()

        if not settings.redis_url:
            logger.warning("REDIS_URL not configured - caching disabled")
            return

        try:
            self._client = redis.from_url(
                str(settings.redis_url),
                encoding="utf-8",
                decode_responses=True,
            )
            await self._client.ping()
            self._connected = True
            logger.info("Redis cache connected successfully")
        except redis.RedisError as e:
            logger.warning("Failed to connect to Redis for caching: %s", e)
            self._client = None
            self._connected = False

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._client is not None:
            await self._client.aclose()
        self._client = None
        self._connected = False

    @property
    def is_connected(self) -> bool:
        """Check if cache is connected."""
        return self._connected and self._client is not None

    def _make_key(self, prefix: str, *parts: str) -> str:
        """Create a cache key from parts."""
        key_parts = [prefix] + [str(p) for p in parts if p]
        return ":".join(key_parts)

    async def get(self, key: str) -> str | None:
        """Get value from cache."""
        if not self.is_connected:
            return None

        try:
            return await self._client.get(key)
        except redis.RedisError as e:
            logger.error("Cache get error: %s", e)
            return None

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """Set value in cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time-to-live in seconds

        Returns:
            True if successful
        """
        if not self.is_connected:
            return False

        try:
            if ttl:
                await self._client.setex(key, ttl, value)
            else:
                await self._client.set(key, value)
            return True
        except redis.RedisError as e:
            logger.error("Cache set error: %s", e)
            return False

    async def delete(self, *keys: str) -> int:
        """Delete keys from cache.

        Returns:
            Number of keys deleted
        """
        if not self.is_connected or not keys:
            return 0

        try:
            return await self._client.delete(*keys)
        except redis.RedisError as e:
            logger.error("Cache delete error: %s", e)
            return 0

    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching a pattern (e.g. ``permission_matrix:*``).

        Returns:
            Number of keys deleted
        """
        if not self.is_connected:
            return 0

        try:
            keys = [key async for key in self._client.scan_iter(match=pattern)]
            if keys:
                return await self._client.delete(*keys)
            return 0
        except redis.RedisError as e:
            logger.error("Cache delete pattern error: %s", e)
            return 0

    async def get_json(self, key: str) -> dict | list | None:
        """Get JSON value from cache."""
        value = await self.get(key)
        if value:
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return None
        return None

    async def set_json(
        self,
        key: str,
        value: dict | list | BaseModel,
        ttl: int | None = None,
    ) -> bool:
        """Set JSON value in cache.

        Args:
            key: Cache key
            value: Value to cache (dict, list, or Pydantic model)
            ttl: Time-to-live in seconds

        Returns:
            True if successful
        """
        try:
            if isinstance(value, BaseModel):
                json_str = value.model_dump_json()
            else:
                json_str = json.dumps(value, default=str)
            return await self.set(key, json_str, ttl)
        except (TypeError, ValueError) as e:
            logger.error("Cache set_json error: %s", e)
            return False

    # Domain-specific cache methods

    async def get_profile_permissions(self, profile_id: UUID) -> dict | None:
        """Get the cached permission detail of a profile."""
        key = self._make_key(CacheConfig.PREFIX_PROFILE_PERMISSIONS, str(profile_id))
        return await self.get_json(key)

    async def set_profile_permissions(self, profile_id: UUID, data: dict | BaseModel) -> bool:
        """Cache the permission detail of a profile."""
        key = self._make_key(CacheConfig.PREFIX_PROFILE_PERMISSIONS, str(profile_id))
        return await self.set_json(
            key, data, get_cache_ttl(CacheConfig.PREFIX_PROFILE_PERMISSIONS)
        )

    async def get_matrix(self, *filters: str) -> dict | None:
        """Get a cached matrix payload for the given filter values."""
        key = self._make_key(CacheConfig.PREFIX_PERMISSION_MATRIX, *filters)
        return await self.get_json(key)

    async def set_matrix(self, data: dict | BaseModel, *filters: str) -> bool:
        """Cache a matrix payload for the given filter values."""
        key = self._make_key(CacheConfig.PREFIX_PERMISSION_MATRIX, *filters)
        return await self.set_json(key, data, get_cache_ttl(CacheConfig.PREFIX_PERMISSION_MATRIX))

    async def invalidate_profiles(self, profile_ids: Iterable[UUID]) -> int:
        """Drop cached reads of the given profiles and every cached matrix.

        Args:
            profile_ids: Profiles whose grants changed

        Returns:
            Number of keys deleted
        """
        keys = [
            self._make_key(CacheConfig.PREFIX_PROFILE_PERMISSIONS, str(profile_id))
            for profile_id in profile_ids
        ]
        count = await self.delete(*keys)
        count += await self.invalidate_matrix()
        if count:
            logger.debug("Invalidated %d permission cache keys", count)
        return count

    async def invalidate_matrix(self) -> int:
        """Invalidate all cached matrices."""
        return await self.delete_pattern(f"{CacheConfig.PREFIX_PERMISSION_MATRIX}:*")

    async def invalidate_all(self) -> int:
        """Invalidate every permission cache entry (after catalog changes)."""
        count = await self.delete_pattern(f"{CacheConfig.PREFIX_PROFILE_PERMISSIONS}:*")
        count += await self.invalidate_matrix()
        return count


# Global instance getter
_cache_instance: CacheService | None = None


async def get_cache_service() -> CacheService:
    """Get the cache service instance.

    Returns:
        CacheService singleton instance
    """
    global _cache_instance
    if _cache_instance is None:
        _cache_instance = await CacheService.get_instance()
    return _cache_instance
