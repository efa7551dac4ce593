"""Centralized dependency injection factories for FastAPI.

Mutating services get cache invalidation hooks wired to the shared
CacheService, so services themselves never talk to Redis.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from jood_api.database import get_db
from jood_api.services.bulk_mutation_service import BulkMutationService
from jood_api.services.cache_service import CacheService, get_cache_service
from jood_api.services.catalog_service import CatalogService
from jood_api.services.matrix_service import MatrixService
from jood_api.services.profile_service import ProfileService
from jood_api.services.resolution_service import ResolutionService


def get_catalog_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache_service),
) -> CatalogService:
    """Get CatalogService instance."""

    async def on_catalog_changed() -> None:
        await cache.invalidate_all()

    return CatalogService(db, on_catalog_changed=on_catalog_changed)


def get_profile_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache_service),
) -> ProfileService:
    """Get ProfileService instance."""

    async def on_profile_created() -> None:
        await cache.invalidate_matrix()

    return ProfileService(db, on_profile_created=on_profile_created)


def get_resolution_service(db: AsyncSession = Depends(get_db)) -> ResolutionService:
    """Get ResolutionService instance."""
    return ResolutionService(db)


def get_matrix_service(db: AsyncSession = Depends(get_db)) -> MatrixService:
    """Get MatrixService instance."""
    return MatrixService(db)


def get_bulk_mutation_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache_service),
) -> BulkMutationService:
    """Get BulkMutationService instance."""
    return BulkMutationService(db, on_profiles_changed=cache.invalidate_profiles)
