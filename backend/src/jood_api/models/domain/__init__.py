"""Domain models package."""

from jood_api.models.domain.grant import BulkFailure, BulkReport, GrantAction, GrantOperation
from jood_api.models.domain.legacy_role import LegacyRoleMapping
from jood_api.models.domain.profile import ProfileKind
from jood_api.models.domain.resolution import EffectiveSet
from jood_api.models.domain.user import CurrentUser

__all__ = [
    "BulkFailure",
    "BulkReport",
    "CurrentUser",
    "EffectiveSet",
    "GrantAction",
    "GrantOperation",
    "LegacyRoleMapping",
    "ProfileKind",
]
