"""Profile service."""

import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jood_api.exceptions import ProfileAlreadyExistsError, ProfileNotFoundError, UserNotFoundError
from jood_api.models.domain.profile import ProfileKind
from jood_api.models.dto.permission_management import ProfileResponse
from jood_api.repositories.profile_repository import ProfileRepository
from jood_api.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

ProfileCreatedHook = Callable[[], Awaitable[None]]


class ProfileService:
    """Service for creating and looking up profiles."""

    def __init__(
        self,
        session: AsyncSession,
        on_profile_created: ProfileCreatedHook | None = None,
    ) -> None:
        """Initialize service with database session.

        Args:
            session: Database session
            on_profile_created: Awaited after a new profile is committed
        """
        self.session = session
        self.on_profile_created = on_profile_created
        self.profile_repo = ProfileRepository(session)
        self.user_repo = UserRepository(session)

    async def create_profile(self, user_id: UUID, kind: ProfileKind) -> ProfileResponse:
        """Create an empty profile for a user.

        Args:
            user_id: Owning user
            kind: Profile kind

        Returns:
            Created profile

        Raises:
            UserNotFoundError: If the user does not exist
            ProfileAlreadyExistsError: If the user already has a profile of this kind
        """
        user = await self.user_repo.get(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))

        if await self.profile_repo.get_by_user(user_id, kind.value) is not None:
            raise ProfileAlreadyExistsError(str(user_id), kind.value)

        try:
            profile = await self.profile_repo.create_profile(user_id, kind.value)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ProfileAlreadyExistsError(str(user_id), kind.value) from e

        if self.on_profile_created is not None:
            await self.on_profile_created()

        logger.info("Created %s profile %s for user %s", kind.value, profile.id, user_id)
        return ProfileResponse.model_validate(profile)

    async def get_profile_for_user(self, user_id: UUID, kind: ProfileKind) -> ProfileResponse:
        """Get the profile of a given kind owned by a user.

        Raises:
            ProfileNotFoundError: If the user has no such profile
        """
        profile = await self.profile_repo.get_by_user(user_id, kind.value)
        if profile is None:
            raise ProfileNotFoundError(user_id=str(user_id))
        return ProfileResponse.model_validate(profile)
