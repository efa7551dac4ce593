"""Tests for profile creation and lookup."""

from uuid import uuid4

import pytest

from jood_api.exceptions import ProfileAlreadyExistsError, ProfileNotFoundError, UserNotFoundError
from jood_api.models.domain.profile import ProfileKind
from jood_api.services.profile_service import ProfileService


class TestProfileService:
    """ProfileService behavior."""

    async def test_create_and_lookup(self, db_session, seeded) -> None:
        service = ProfileService(db_session)
        user_id = seeded.user_ids["no_profile"]

        created = await service.create_profile(user_id, ProfileKind.KITCHEN)
        found = await service.get_profile_for_user(user_id, ProfileKind.KITCHEN)

        assert found.id == created.id
        assert found.kind == ProfileKind.KITCHEN

    async def test_one_profile_per_kind(self, db_session, seeded) -> None:
        service = ProfileService(db_session)

        with pytest.raises(ProfileAlreadyExistsError):
            await service.create_profile(seeded.user_ids["clerk"], ProfileKind.ADMIN)

        kitchen = await service.create_profile(seeded.user_ids["clerk"], ProfileKind.KITCHEN)
        assert kitchen.id != seeded.profile_ids["clerk"]

    async def test_unknown_user(self, db_session, seeded) -> None:
        with pytest.raises(UserNotFoundError):
            await ProfileService(db_session).create_profile(uuid4(), ProfileKind.ADMIN)

    async def test_missing_profile_lookup(self, db_session, seeded) -> None:
        service = ProfileService(db_session)

        with pytest.raises(ProfileNotFoundError):
            await service.get_profile_for_user(seeded.user_ids["no_profile"], ProfileKind.ADMIN)
