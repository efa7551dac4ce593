"""User account repository."""

from jood_api.models.orm.user import UserORM
from jood_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserORM]):
    """Repository for user account lookups."""

    model = UserORM
