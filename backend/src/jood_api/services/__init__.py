"""Services package."""

from jood_api.services.bulk_mutation_service import BulkMutationService
from jood_api.services.cache_service import CacheService
from jood_api.services.catalog_service import CatalogService
from jood_api.services.matrix_service import MatrixService
from jood_api.services.profile_service import ProfileService
from jood_api.services.resolution_service import ResolutionEngine, ResolutionService

__all__ = [
    "BulkMutationService",
    "CacheService",
    "CatalogService",
    "MatrixService",
    "ProfileService",
    "ResolutionEngine",
    "ResolutionService",
]
